"""
BatchEvaluator -- decides whether a job is split into a batch.

Contract:
    ``evaluate(parent_job, props)`` returns ``EvaluationResult``:

        autoBatch false                     -> batched=False, silent
        items key missing / not keyed       -> batched=False, one notification
        item count <= batchSize             -> batched=False, silent
        otherwise                           -> batched=True, result=<engine result>

    Option defaults (``autoBatch``, ``batchSize``, ``batchQueue``,
    ``batchItemsKey``, ``batchCarryover``) are filled in only where the
    caller left them out.  The caller's mapping is never mutated.

Non-goals:
    - Does NOT dedupe: evaluating twice submits two batches.
    - Does NOT distinguish the skip and below-threshold outcomes in the
      return value; the skip reason goes to the notify hook and the log.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from jobsplit_config.schema import BatchSettings
from jobsplit_kernel.logging_config import LogContext, get_logger
from jobsplit_kernel.utils.safe_access import lookup

from jobsplit_batch.domain.options import resolve_options, with_option_defaults
from jobsplit_batch.domain.types import EvaluationResult
from jobsplit_batch.engine.base import JobEngine
from jobsplit_batch.services.dispatcher import BatchDispatcher, job_label
from jobsplit_batch.services.notify import notify_best_effort

logger = get_logger("batch.evaluator")

_MISSING = object()


class BatchEvaluator:
    """Threshold check in front of ``BatchDispatcher``."""

    def __init__(
        self,
        engine: JobEngine,
        settings: BatchSettings | None = None,
        dispatcher: BatchDispatcher | None = None,
    ):
        self._settings = settings or BatchSettings()
        self._dispatcher = dispatcher or BatchDispatcher(engine, self._settings)

    def evaluate(self, parent_job: Any, props: Mapping[str, Any]) -> EvaluationResult:
        """Split ``parent_job`` into a batch if its items exceed the threshold."""
        effective = with_option_defaults(props, self._settings)
        options = resolve_options(effective, self._settings)

        if not options.auto_batch:
            return EvaluationResult(batched=False)

        label = job_label(parent_job)
        with LogContext.bind(job_label=label):
            items = lookup(effective, options.items_key, _MISSING)
            if items is _MISSING or not isinstance(items, Mapping):
                reason = "missing" if items is _MISSING else "not a keyed collection"
                logger.warning(
                    "batch_evaluation_skipped",
                    extra={"items_key": options.items_key, "reason": reason},
                )
                notify_best_effort(
                    parent_job,
                    f"Auto-batch skipped for {label}: property "
                    f"'{options.items_key}' is {reason}",
                )
                return EvaluationResult(batched=False)

            if len(items) <= options.batch_size:
                logger.debug(
                    "batch_below_threshold",
                    extra={"item_count": len(items), "batch_size": options.batch_size},
                )
                return EvaluationResult(batched=False)

            result = self._dispatcher.dispatch(parent_job, effective)
        return EvaluationResult(batched=True, result=result)
