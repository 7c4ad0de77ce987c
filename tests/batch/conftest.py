"""
Shared fixtures for jobsplit_batch tests.

``FakeJob`` is a minimal OriginatingJob: a mapping, an optional label,
pre-existing chained handles, and a ``notify`` hook that records messages.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import pytest

from jobsplit_batch.domain.types import JobDescriptor, PropertyBag
from jobsplit_batch.engine.memory import InMemoryJobEngine
from jobsplit_config.schema import BatchSettings


@dataclass
class FakeJob:
    """Minimal OriginatingJob implementation for testing."""

    mapping: str = "contacts.import"
    label: str = "ImportContacts"
    chained: list[Any] = field(default_factory=list)
    messages: list[str] = field(default_factory=list)

    def notify(self, message: str) -> None:
        self.messages.append(message)


@dataclass
class SilentJob:
    """OriginatingJob without a notify hook."""

    mapping: str = "contacts.import"
    chained: list[Any] = field(default_factory=list)


class ExplodingNotifyJob(FakeJob):
    """OriginatingJob whose notify hook always fails."""

    def notify(self, message: str) -> None:
        raise RuntimeError("notification transport down")


def make_items(count: int, prefix: str = "item") -> dict[str, dict[str, int]]:
    """Build an ordered keyed collection of ``count`` entries."""
    return {f"{prefix}-{i:03d}": {"n": i} for i in range(count)}


def job(mapping: str, **props: Any) -> JobDescriptor:
    """Shorthand for a chained job handle."""
    return JobDescriptor(mapping=mapping, properties=PropertyBag(props))


@pytest.fixture
def settings() -> BatchSettings:
    return BatchSettings(batch_size=10, queue="bulk", connection="redis", max_attempts=2)


@pytest.fixture
def engine() -> InMemoryJobEngine:
    return InMemoryJobEngine()


@pytest.fixture
def parent_job() -> FakeJob:
    return FakeJob()
