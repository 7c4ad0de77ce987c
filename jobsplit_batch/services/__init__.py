"""
jobsplit_batch.services -- Descriptor building, chain translation,
dispatch and evaluation.
"""

from jobsplit_batch.services.chain_translator import ChainTranslator
from jobsplit_batch.services.descriptor_builder import JobDescriptorBuilder
from jobsplit_batch.services.dispatcher import BatchDispatcher
from jobsplit_batch.services.evaluator import BatchEvaluator

__all__ = [
    "BatchDispatcher",
    "BatchEvaluator",
    "ChainTranslator",
    "JobDescriptorBuilder",
]
