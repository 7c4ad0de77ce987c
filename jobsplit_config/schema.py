"""
BatchSettings schema.

Process-independent defaults consulted whenever a job's property bag does
not supply a batch option.  Instances are passed explicitly into the
evaluator and dispatcher; nothing reads settings from ambient state.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class BatchSettings:
    """Default batch options.

    Every field backs one ``batch*`` property-bag option (see
    ``jobsplit_batch.domain.options``), except ``completion_mapping``,
    which names the job type synthesized when a batch has no finally work.
    """

    batch_size: int = 100
    queue: str = "default"
    connection: str = "default"
    max_attempts: int = 3
    backoff: float = 0
    timeout_seconds: float = 3600
    allow_failures: bool = True
    completion_mapping: str = "batch.completed"
