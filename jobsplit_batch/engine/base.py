"""
Collaborator protocols at the job-engine boundary.

Contract:
    ``JobEngine`` is what the splitter hands a finished batch to.
    ``OriginatingJob`` is the oversized job being evaluated.

Architecture:
    jobsplit_batch/engine.  ZERO imports from services; only
    jobsplit_batch.domain (frozen DTOs) and stdlib.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable

from jobsplit_batch.domain.types import BatchSubmission


@runtime_checkable
class JobEngine(Protocol):
    """Protocol for the external job-execution engine.

    Contract:
        - ``submit()`` accepts one ``BatchSubmission`` and returns an opaque
          dispatch result, which the splitter passes back to its caller
          without interpreting it.

    Non-goals:
        - The splitter does NOT catch engine errors; they propagate.
        - Scheduling, retry and backoff timing belong to the engine.
    """

    def submit(self, submission: BatchSubmission) -> Any:
        """Submit a batch for execution.

        Args:
            submission: Children, shared policy, and finally step.

        Returns:
            Engine-specific dispatch result.
        """
        ...


@runtime_checkable
class OriginatingJob(Protocol):
    """Protocol for the job whose properties are being evaluated.

    Contract:
        - ``mapping``: job type identifier, reused for every child.
        - ``chained``: handles already chained after this job, in order.

    Optional members, looked up with ``getattr``:
        - ``label``: human-readable job-type label; defaults to ``mapping``.
        - ``notify(message)``: best-effort notification hook.
    """

    @property
    def mapping(self) -> str: ...

    @property
    def chained(self) -> Sequence[Any]: ...
