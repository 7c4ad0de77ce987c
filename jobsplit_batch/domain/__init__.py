"""
jobsplit_batch.domain -- Pure types, chunking, and option resolution.

ZERO I/O.  All DTOs are frozen dataclasses.
"""

from jobsplit_batch.domain.chunker import chunk_items
from jobsplit_batch.domain.options import (
    BatchOptions,
    resolve_options,
    with_option_defaults,
)
from jobsplit_batch.domain.types import (
    BatchSubmission,
    ChainDescriptor,
    ChainInput,
    EmptyChain,
    EvaluationResult,
    JobDescriptor,
    JobHandle,
    JobList,
    LooseDescriptor,
    PropertyBag,
    SingleJob,
    UnrecognizedChain,
    classify_chain_input,
    is_job_handle,
)

__all__ = [
    "BatchOptions",
    "BatchSubmission",
    "ChainDescriptor",
    "ChainInput",
    "EmptyChain",
    "EvaluationResult",
    "JobDescriptor",
    "JobHandle",
    "JobList",
    "LooseDescriptor",
    "PropertyBag",
    "SingleJob",
    "UnrecognizedChain",
    "chunk_items",
    "classify_chain_input",
    "is_job_handle",
    "resolve_options",
    "with_option_defaults",
]
