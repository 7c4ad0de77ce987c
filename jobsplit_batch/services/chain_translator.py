"""
ChainTranslator -- rebuilds the work that runs after a batch.

Contract:
    ``attach(existing_chain, appendix, fallback_label)`` returns ONE job
    handle to run once every child of the batch has completed:

        existing chained jobs (original order) + appendix jobs (appendix order)

    - Nothing left after normalization -> a synthesized completion job
      (``settings.completion_mapping``) carrying ``fallback_label``.
    - Exactly one handle -> that handle.
    - More than one -> a ``ChainDescriptor`` running them in order.

Normalization is the same for both inputs and is decided once per value
by ``classify_chain_input``:

    EmptyChain          None or ""              -> nothing
    SingleJob           a job handle            -> the handle, as-is
    JobList             list / tuple            -> handles as-is, mappings
                                                   translated, rest dropped
    LooseDescriptor     mapping                 -> one JobDescriptor, or
                                                   nothing without a job type
    UnrecognizedChain   anything else           -> nothing

Malformed entries are dropped one at a time; the rest of the chain still
translates.  Nothing here raises for bad input.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from jobsplit_config.schema import BatchSettings
from jobsplit_kernel.logging_config import get_logger
from jobsplit_kernel.utils.safe_access import ValueKind, first_present, safe_get

from jobsplit_batch.domain.types import (
    ChainDescriptor,
    EmptyChain,
    JobDescriptor,
    JobList,
    LooseDescriptor,
    PropertyBag,
    SingleJob,
    UnrecognizedChain,
    classify_chain_input,
    is_job_handle,
)

logger = get_logger("batch.chain")

# Accepted field names in a loose descriptor, first match wins.
JOB_TYPE_KEYS = ("mapping", "job")
CHAIN_KEYS = ("chain", "chained")
PROPERTY_KEYS = ("properties", "props")


class ChainTranslator:
    """Normalizes job-like inputs and composes the batch's finally step."""

    def __init__(self, settings: BatchSettings | None = None):
        self._settings = settings or BatchSettings()

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    def attach(self, existing_chain: Any, appendix: Any, fallback_label: str) -> Any:
        """Compose the finally step for a batch.

        Args:
            existing_chain: Jobs the caller had chained to the parent.
            appendix: The parent's ``batchFinally`` value.
            fallback_label: Job-type label of the batch, used by the
                synthesized completion job.

        Returns:
            A single job handle (``JobDescriptor``, ``ChainDescriptor`` or
            an engine handle from the inputs).
        """
        jobs = self.normalize(existing_chain) + self.normalize(appendix)

        if not jobs:
            return self.completion_job(fallback_label)
        if len(jobs) == 1:
            return jobs[0]
        return ChainDescriptor(jobs=jobs)

    def normalize(self, value: Any) -> tuple[Any, ...]:
        """Translate any chain input into an ordered tuple of handles."""
        variant = classify_chain_input(value)

        if isinstance(variant, EmptyChain):
            return ()
        if isinstance(variant, SingleJob):
            return (variant.handle,)
        if isinstance(variant, JobList):
            return self._normalize_list(variant.entries)
        if isinstance(variant, LooseDescriptor):
            descriptor = self.translate_descriptor(variant.data)
            return () if descriptor is None else (descriptor,)
        if isinstance(variant, UnrecognizedChain):
            _log_dropped(variant.value, "unrecognized shape")
        return ()

    def translate_descriptor(self, data: Mapping[str, Any]) -> JobDescriptor | None:
        """Translate a loose mapping into a ``JobDescriptor``.

        Returns None when no non-empty job type is present under
        ``mapping`` or ``job``.
        """
        mapping = _job_type(data)
        if mapping is None:
            _log_dropped(data, "missing job type")
            return None

        settings = self._settings
        properties = first_present(data, PROPERTY_KEYS, ValueKind.MAPPING, {})
        raw_chain = first_present(data, CHAIN_KEYS, ValueKind.LIST, [])

        backoff = safe_get(data, "backoff", ValueKind.NUMBER, 0)
        timeout = safe_get(data, "timeout", ValueKind.NUMBER, settings.timeout_seconds)
        max_attempts = safe_get(data, "maxAttempts", ValueKind.INTEGER, settings.max_attempts)

        return JobDescriptor(
            mapping=mapping,
            properties=PropertyBag(properties),
            chain=self._normalize_list(tuple(raw_chain)),
            queue=safe_get(data, "queue", ValueKind.STRING, "default") or "default",
            connection=safe_get(data, "connection", ValueKind.STRING, ""),
            backoff=backoff if backoff >= 0 else 0,
            timeout_seconds=timeout if timeout > 0 else settings.timeout_seconds,
            max_attempts=max_attempts if max_attempts >= 1 else settings.max_attempts,
        )

    def completion_job(self, label: str) -> JobDescriptor:
        """The job run after a batch that has no other finally work."""
        settings = self._settings
        return JobDescriptor(
            mapping=settings.completion_mapping,
            properties=PropertyBag({"label": label}),
            queue=settings.queue,
            connection=settings.connection,
            backoff=settings.backoff,
            timeout_seconds=settings.timeout_seconds,
            max_attempts=settings.max_attempts,
        )

    # -------------------------------------------------------------------------
    # Internal
    # -------------------------------------------------------------------------

    def _normalize_list(self, entries: tuple[Any, ...]) -> tuple[Any, ...]:
        jobs: list[Any] = []
        for entry in entries:
            if is_job_handle(entry):
                jobs.append(entry)
            elif isinstance(entry, Mapping):
                descriptor = self.translate_descriptor(entry)
                if descriptor is not None:
                    jobs.append(descriptor)
            else:
                _log_dropped(entry, "list entry is not a job")
        return tuple(jobs)


def _job_type(data: Mapping[str, Any]) -> str | None:
    for key in JOB_TYPE_KEYS:
        value = safe_get(data, key, ValueKind.STRING, "")
        if value.strip():
            return value
    return None


def _log_dropped(value: Any, reason: str) -> None:
    logger.debug(
        "chain_entry_dropped",
        extra={"reason": reason, "entry_type": type(value).__name__},
    )
