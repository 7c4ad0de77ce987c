"""
Tests for jobsplit_batch.services.evaluator.

Validates the enable flag, the items-key checks, the threshold boundary,
notification behavior on each path, and independence of repeated calls.
"""

from unittest.mock import MagicMock

import pytest

from jobsplit_batch.domain.types import EvaluationResult
from jobsplit_batch.engine.base import JobEngine
from jobsplit_batch.services.dispatcher import BatchDispatcher
from jobsplit_batch.services.evaluator import BatchEvaluator

from tests.batch.conftest import ExplodingNotifyJob, FakeJob, SilentJob, make_items


@pytest.fixture
def evaluator(engine, settings):
    return BatchEvaluator(engine, settings)


# =============================================================================
# Enable flag
# =============================================================================


class TestAutoBatchFlag:
    def test_disabled_by_default(self, evaluator, engine, parent_job):
        result = evaluator.evaluate(parent_job, {"items": make_items(500)})
        assert result == EvaluationResult(batched=False)
        assert len(engine) == 0
        assert parent_job.messages == []

    @pytest.mark.parametrize("flag", [False, "false", 0, "no"])
    def test_explicitly_disabled(self, evaluator, engine, parent_job, flag):
        result = evaluator.evaluate(parent_job, {"autoBatch": flag, "items": make_items(50)})
        assert result.batched is False
        assert len(engine) == 0

    def test_unparseable_flag_is_disabled(self, evaluator, engine, parent_job):
        result = evaluator.evaluate(parent_job, {"autoBatch": "sure", "items": make_items(50)})
        assert result.batched is False

    def test_disabled_does_not_inspect_items(self, evaluator, parent_job):
        evaluator.evaluate(parent_job, {"autoBatch": False})
        assert parent_job.messages == []


# =============================================================================
# Items key
# =============================================================================


class TestItemsKey:
    def test_missing_items_key_notifies(self, evaluator, engine, parent_job):
        result = evaluator.evaluate(parent_job, {"autoBatch": True})
        assert result.batched is False
        assert len(engine) == 0
        assert len(parent_job.messages) == 1
        assert "'items'" in parent_job.messages[0]
        assert "missing" in parent_job.messages[0]

    @pytest.mark.parametrize("value", [["a", "b"], "abc", 12, None])
    def test_non_keyed_collection_notifies(self, evaluator, engine, parent_job, value):
        result = evaluator.evaluate(parent_job, {"autoBatch": True, "items": value})
        assert result.batched is False
        assert len(engine) == 0
        assert len(parent_job.messages) == 1
        assert "not a keyed collection" in parent_job.messages[0]

    def test_custom_items_key(self, evaluator, engine, parent_job):
        result = evaluator.evaluate(parent_job, {
            "autoBatch": True,
            "batchItemsKey": "contacts",
            "contacts": make_items(11),
        })
        assert result.batched is True
        submission = engine.submissions[0]
        assert all("contacts" in c.properties for c in submission.items)

    def test_items_key_case_insensitive(self, evaluator, parent_job):
        result = evaluator.evaluate(parent_job, {"autoBatch": True, "Items": make_items(11)})
        assert result.batched is True

    def test_skip_without_notify_hook(self, evaluator):
        result = evaluator.evaluate(SilentJob(), {"autoBatch": True})
        assert result.batched is False

    def test_failing_notify_hook_on_skip(self, evaluator, engine, captured_logs):
        result = evaluator.evaluate(ExplodingNotifyJob(), {"autoBatch": True})

        assert result == EvaluationResult(batched=False)
        assert len(engine) == 0
        failures = [r for r in captured_logs() if r["message"] == "notify_hook_failed"]
        assert len(failures) == 1
        assert failures[0]["exc_type"] == "RuntimeError"
        assert "missing" in failures[0]["notify_message"]

    def test_skip_is_logged(self, evaluator, parent_job, captured_logs):
        evaluator.evaluate(parent_job, {"autoBatch": True, "items": [1, 2]})
        skipped = [r for r in captured_logs() if r["message"] == "batch_evaluation_skipped"]
        assert len(skipped) == 1
        assert skipped[0]["items_key"] == "items"
        assert skipped[0]["job_label"] == "ImportContacts"


# =============================================================================
# Threshold
# =============================================================================


class TestThreshold:
    def test_exactly_batch_size_not_batched(self, evaluator, engine, parent_job):
        result = evaluator.evaluate(parent_job, {"autoBatch": True, "items": make_items(10)})
        assert result.batched is False
        assert len(engine) == 0
        assert parent_job.messages == []

    def test_one_over_batch_size_batched(self, evaluator, engine, parent_job):
        result = evaluator.evaluate(parent_job, {"autoBatch": True, "items": make_items(11)})
        assert result.batched is True
        assert result.result.total_jobs == 2
        assert len(engine) == 1

    def test_empty_collection_not_batched(self, evaluator, parent_job):
        result = evaluator.evaluate(parent_job, {"autoBatch": True, "items": {}})
        assert result.batched is False
        assert parent_job.messages == []

    def test_caller_batch_size_wins(self, evaluator, engine, parent_job):
        result = evaluator.evaluate(
            parent_job, {"autoBatch": True, "batchSize": 4, "items": make_items(9)},
        )
        assert result.batched is True
        assert [len(c.properties["items"]) for c in engine.submissions[0].items] == [4, 4, 1]

    @pytest.mark.parametrize(
        "key,value",
        [
            ("batchSize", "+-5"),
            ("batchSize", "\u00b2"),
            ("batchMaxAttempts", "--3"),
            ("batchBackoff", 10**400),
        ],
    )
    def test_malformed_option_falls_back(self, evaluator, engine, parent_job, key, value):
        result = evaluator.evaluate(
            parent_job, {"autoBatch": True, "items": make_items(25), key: value},
        )
        assert result.batched is True
        submission = engine.submissions[0]
        assert submission.total_jobs == 3
        assert submission.max_attempts == 2
        assert submission.backoff == 0

    def test_invalid_batch_size_uses_settings(self, evaluator, engine, parent_job):
        result = evaluator.evaluate(
            parent_job, {"autoBatch": True, "batchSize": 0, "items": make_items(10)},
        )
        assert result.batched is False


# =============================================================================
# Batched path
# =============================================================================


class TestBatched:
    def test_scenario_twenty_five_by_ten(self, evaluator, engine, parent_job):
        result = evaluator.evaluate(parent_job, {"autoBatch": True, "items": make_items(25)})

        assert result.batched is True
        submission = engine.get(result.result.batch_id)
        children = submission.items
        assert [len(c.properties["items"]) for c in children] == [10, 10, 5]
        assert [c.properties["batchIndex"] for c in children] == [1, 2, 3]
        assert all(c.properties["batchTotal"] == 3 for c in children)
        assert all(c.properties["autoBatch"] is False for c in children)
        assert all(c.properties["isBatchChild"] is True for c in children)

    def test_child_does_not_split_again(self, evaluator, engine, parent_job):
        evaluator.evaluate(parent_job, {"autoBatch": True, "items": make_items(25)})
        child = engine.submissions[0].items[0]

        child_job = FakeJob(mapping=child.mapping)
        oversized = dict(child.properties)
        oversized["items"] = make_items(100)
        result = evaluator.evaluate(child_job, oversized)

        assert result.batched is False
        assert len(engine) == 1

    def test_delegates_to_dispatcher(self, settings, parent_job):
        dispatcher = MagicMock(spec=BatchDispatcher)
        dispatcher.dispatch.return_value = "receipt"
        evaluator = BatchEvaluator(MagicMock(spec=JobEngine), settings, dispatcher=dispatcher)

        result = evaluator.evaluate(parent_job, {"autoBatch": True, "items": make_items(11)})

        assert result == EvaluationResult(batched=True, result="receipt")
        dispatcher.dispatch.assert_called_once()
        called_job, called_props = dispatcher.dispatch.call_args.args
        assert called_job is parent_job
        assert called_props["batchQueue"] == "bulk"

    def test_caller_props_not_mutated(self, evaluator, parent_job):
        props = {"autoBatch": True, "items": make_items(11)}
        evaluator.evaluate(parent_job, props)
        assert set(props) == {"autoBatch", "items"}

    def test_engine_errors_propagate(self, settings, parent_job):
        engine = MagicMock(spec=JobEngine)
        engine.submit.side_effect = RuntimeError("broker down")
        evaluator = BatchEvaluator(engine, settings)
        with pytest.raises(RuntimeError, match="broker down"):
            evaluator.evaluate(parent_job, {"autoBatch": True, "items": make_items(11)})

    def test_repeated_calls_are_independent(self, evaluator, engine, parent_job):
        props = {
            "autoBatch": True,
            "items": make_items(25),
            "batchFinally": {"mapping": "reports.send"},
        }
        first = evaluator.evaluate(parent_job, props)
        second = evaluator.evaluate(parent_job, props)

        assert first.result.batch_id != second.result.batch_id
        a, b = engine.submissions
        assert a == b
        assert a is not b
        assert a.items[0].properties is not b.items[0].properties
