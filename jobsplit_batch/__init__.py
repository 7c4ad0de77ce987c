"""
jobsplit_batch -- Splits oversized jobs into batches.

Decides whether a job's keyed item collection exceeds its batch size,
and if so splits it into bounded child jobs, reattaches any work chained
after the original job, and hands one BatchSubmission to an external
job engine.

Architecture:
    jobsplit_batch/ is a top-level package built on jobsplit_kernel and
    jobsplit_config.  The job engine is reached only through the
    ``JobEngine`` protocol.

Invariants:
    - Chunk completeness: every item lands in exactly one child, in order
    - No empty chunks
    - Children carry autoBatch=False (fan-out is one level deep)
    - Existing chained work runs before batchFinally work
    - No state survives between evaluate() calls
"""

from jobsplit_batch.domain.types import (
    BatchSubmission,
    ChainDescriptor,
    EvaluationResult,
    JobDescriptor,
    PropertyBag,
)
from jobsplit_batch.orchestrator import SplitOrchestrator
from jobsplit_batch.services.evaluator import BatchEvaluator

__all__ = [
    "BatchEvaluator",
    "BatchSubmission",
    "ChainDescriptor",
    "EvaluationResult",
    "JobDescriptor",
    "PropertyBag",
    "SplitOrchestrator",
]
