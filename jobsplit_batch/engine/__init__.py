"""
jobsplit_batch.engine -- Job-engine boundary protocols and the in-memory engine.
"""

from jobsplit_batch.engine.base import JobEngine, OriginatingJob
from jobsplit_batch.engine.memory import DispatchReceipt, InMemoryJobEngine

__all__ = [
    "DispatchReceipt",
    "InMemoryJobEngine",
    "JobEngine",
    "OriginatingJob",
]
