"""
BatchDispatcher -- assembles one BatchSubmission and hands it to the engine.

Contract:
    ``build_submission()`` is pure: chunk the items, build one child per
    chunk, resolve the shared policy, compose the finally step.
    ``dispatch()`` builds, notifies the parent twice (batch created, batch
    dispatching) and returns whatever ``engine.submit()`` returns.

Architecture: jobsplit_batch/services.  Imports from jobsplit_batch.domain,
    jobsplit_batch.engine and sibling services.

Invariants enforced:
    - Every child carries ``autoBatch=False`` (via JobDescriptorBuilder).
    - Existing chained work runs before ``batchFinally`` work.
    - Engine exceptions propagate unchanged; notify failures never do.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from jobsplit_config.schema import BatchSettings
from jobsplit_kernel.logging_config import LogContext, get_logger
from jobsplit_kernel.utils.safe_access import lookup

from jobsplit_batch.domain.chunker import chunk_items
from jobsplit_batch.domain.options import resolve_options, with_option_defaults
from jobsplit_batch.domain.types import BatchSubmission
from jobsplit_batch.engine.base import JobEngine
from jobsplit_batch.services.chain_translator import ChainTranslator
from jobsplit_batch.services.descriptor_builder import JobDescriptorBuilder
from jobsplit_batch.services.notify import notify_best_effort

logger = get_logger("batch.dispatcher")


def job_mapping(parent_job: Any) -> str:
    """Job type identifier of the parent; reused for every child."""
    mapping = getattr(parent_job, "mapping", None)
    if isinstance(mapping, str) and mapping.strip():
        return mapping
    return type(parent_job).__name__


def job_label(parent_job: Any) -> str:
    """Human-readable job-type label; falls back to the mapping."""
    label = getattr(parent_job, "label", None)
    if isinstance(label, str) and label.strip():
        return label
    return job_mapping(parent_job)


class BatchDispatcher:
    """Builds and submits the batch for an oversized job.

    Non-goals:
        - Does NOT decide whether to split -- that is BatchEvaluator's job.
        - Does NOT retry or catch engine failures.
    """

    def __init__(
        self,
        engine: JobEngine,
        settings: BatchSettings | None = None,
        builder: JobDescriptorBuilder | None = None,
        translator: ChainTranslator | None = None,
    ):
        self._engine = engine
        self._settings = settings or BatchSettings()
        self._builder = builder or JobDescriptorBuilder()
        self._translator = translator or ChainTranslator(self._settings)

    # -------------------------------------------------------------------------
    # Build
    # -------------------------------------------------------------------------

    def build_submission(self, parent_job: Any, props: Mapping[str, Any]) -> BatchSubmission:
        """Assemble the BatchSubmission for ``parent_job``.

        ``props`` must hold a keyed collection under the items key; the
        evaluator checks this before delegating here.
        """
        submission, _ = self._assemble(parent_job, props)
        return submission

    def _assemble(
        self, parent_job: Any, props: Mapping[str, Any],
    ) -> tuple[BatchSubmission, dict[str, int]]:
        parent_props = with_option_defaults(props, self._settings)
        options = resolve_options(parent_props, self._settings)
        mapping = job_mapping(parent_job)
        label = job_label(parent_job)

        items = lookup(parent_props, options.items_key)
        chunks = chunk_items(items, options.batch_size)
        children = self._builder.build_all(parent_props, chunks, options, mapping)

        finally_step = self._translator.attach(
            getattr(parent_job, "chained", None),
            options.finally_value,
            label,
        )

        submission = BatchSubmission(
            label=label,
            items=children,
            queue=options.queue,
            connection=options.connection,
            max_attempts=options.max_attempts,
            backoff=options.backoff,
            timeout_seconds=options.timeout_seconds,
            allow_failures=options.allow_failures,
            finally_step=finally_step,
        )
        counts = {
            "item_count": len(items),
            "chunk_count": len(chunks),
            "batch_size": options.batch_size,
        }
        return submission, counts

    # -------------------------------------------------------------------------
    # Dispatch
    # -------------------------------------------------------------------------

    def dispatch(self, parent_job: Any, props: Mapping[str, Any]) -> Any:
        """Build the batch, notify the parent, and submit it to the engine.

        Returns:
            The engine's dispatch result, uninterpreted.
        """
        submission, counts = self._assemble(parent_job, props)

        with LogContext.bind(batch_label=submission.label):
            logger.info("batch_created", extra=counts)
            notify_best_effort(
                parent_job,
                f"Batch created for {submission.label}: {counts['item_count']} items "
                f"in {counts['chunk_count']} jobs of up to {counts['batch_size']}",
            )

            logger.info(
                "batch_dispatching",
                extra={"queue": submission.queue, "connection": submission.connection},
            )
            notify_best_effort(
                parent_job,
                f"Dispatching batch for {submission.label} "
                f"on queue '{submission.queue}'",
            )

            result = self._engine.submit(submission)
            logger.info("batch_dispatched", extra={"chunk_count": submission.total_jobs})
        return result
