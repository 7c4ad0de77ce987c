"""
InMemoryJobEngine -- reference ``JobEngine`` that records submissions.

Runs nothing.  Each ``submit()`` is appended to ``submissions`` and
answered with a ``DispatchReceipt``.  Used by the test suite and for
local dry runs of a splitting configuration.
"""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID, uuid4

from jobsplit_kernel.logging_config import get_logger

from jobsplit_batch.domain.types import BatchSubmission

logger = get_logger("batch.engine.memory")


@dataclass(frozen=True)
class DispatchReceipt:
    """Result returned by ``InMemoryJobEngine.submit()``."""

    batch_id: UUID
    label: str
    total_jobs: int
    queue: str
    connection: str


class InMemoryJobEngine:
    """Job engine that keeps every submitted batch in memory."""

    def __init__(self) -> None:
        self._submissions: list[tuple[UUID, BatchSubmission]] = []

    def submit(self, submission: BatchSubmission) -> DispatchReceipt:
        batch_id = uuid4()
        self._submissions.append((batch_id, submission))
        logger.info(
            "memory_engine_batch_recorded",
            extra={
                "batch_id": str(batch_id),
                "label": submission.label,
                "total_jobs": submission.total_jobs,
            },
        )
        return DispatchReceipt(
            batch_id=batch_id,
            label=submission.label,
            total_jobs=submission.total_jobs,
            queue=submission.queue,
            connection=submission.connection,
        )

    @property
    def submissions(self) -> tuple[BatchSubmission, ...]:
        return tuple(s for _, s in self._submissions)

    def get(self, batch_id: UUID) -> BatchSubmission:
        """Return a recorded submission by id.

        Raises:
            KeyError: If no batch with ``batch_id`` was submitted.
        """
        for recorded_id, submission in self._submissions:
            if recorded_id == batch_id:
                return submission
        raise KeyError(f"No batch recorded with id '{batch_id}'")

    def clear(self) -> None:
        self._submissions.clear()

    def __len__(self) -> int:
        return len(self._submissions)
