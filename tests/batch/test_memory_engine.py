"""
Tests for jobsplit_batch.engine -- protocols and InMemoryJobEngine.
"""

import pytest

from jobsplit_batch.domain.types import BatchSubmission, JobDescriptor
from jobsplit_batch.engine.base import JobEngine, OriginatingJob
from jobsplit_batch.engine.memory import DispatchReceipt, InMemoryJobEngine

from tests.batch.conftest import FakeJob


def _submission(label: str = "ImportContacts", count: int = 2) -> BatchSubmission:
    return BatchSubmission(
        label=label,
        items=tuple(JobDescriptor(mapping="m") for _ in range(count)),
        queue="bulk",
        connection="redis",
        max_attempts=3,
        backoff=0,
        timeout_seconds=60,
        allow_failures=True,
        finally_step=JobDescriptor(mapping="batch.completed"),
    )


class TestProtocolCompliance:
    def test_memory_engine_is_job_engine(self):
        assert isinstance(InMemoryJobEngine(), JobEngine)

    def test_fake_job_is_originating_job(self):
        assert isinstance(FakeJob(), OriginatingJob)


class TestInMemoryJobEngine:
    def test_submit_returns_receipt(self):
        engine = InMemoryJobEngine()
        receipt = engine.submit(_submission(count=3))
        assert isinstance(receipt, DispatchReceipt)
        assert receipt.label == "ImportContacts"
        assert receipt.total_jobs == 3
        assert receipt.queue == "bulk"
        assert receipt.connection == "redis"

    def test_records_in_order(self):
        engine = InMemoryJobEngine()
        first, second = _submission("a"), _submission("b")
        engine.submit(first)
        engine.submit(second)
        assert engine.submissions == (first, second)
        assert len(engine) == 2

    def test_get_by_batch_id(self):
        engine = InMemoryJobEngine()
        submission = _submission()
        receipt = engine.submit(submission)
        assert engine.get(receipt.batch_id) is submission

    def test_unique_batch_ids(self):
        engine = InMemoryJobEngine()
        ids = {engine.submit(_submission()).batch_id for _ in range(5)}
        assert len(ids) == 5

    def test_get_unknown_raises(self):
        engine = InMemoryJobEngine()
        receipt = InMemoryJobEngine().submit(_submission())
        with pytest.raises(KeyError):
            engine.get(receipt.batch_id)

    def test_clear(self):
        engine = InMemoryJobEngine()
        engine.submit(_submission())
        engine.clear()
        assert len(engine) == 0
        assert engine.submissions == ()
