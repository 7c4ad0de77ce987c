"""
Tests for jobsplit_batch.orchestrator.

Validates SplitOrchestrator wiring: defaults, settings-file factory,
shared settings across components, and end-to-end evaluation.
"""

import yaml

from jobsplit_batch.engine.memory import InMemoryJobEngine
from jobsplit_batch.orchestrator import SplitOrchestrator
from jobsplit_batch.services.chain_translator import ChainTranslator
from jobsplit_batch.services.dispatcher import BatchDispatcher
from jobsplit_batch.services.evaluator import BatchEvaluator
from jobsplit_config.schema import BatchSettings

from tests.batch.conftest import FakeJob, job, make_items


class TestConstruction:
    def test_defaults(self):
        orchestrator = SplitOrchestrator()
        assert orchestrator.settings == BatchSettings()
        assert isinstance(orchestrator.engine, InMemoryJobEngine)
        assert isinstance(orchestrator.evaluator, BatchEvaluator)
        assert isinstance(orchestrator.dispatcher, BatchDispatcher)
        assert isinstance(orchestrator.translator, ChainTranslator)

    def test_uses_given_engine(self):
        engine = InMemoryJobEngine()
        assert SplitOrchestrator(engine=engine).engine is engine

    def test_from_settings_file(self, tmp_path):
        path = tmp_path / "jobsplit.yaml"
        path.write_text(yaml.safe_dump({"batch": {"batch_size": 5, "queue": "imports"}}))

        orchestrator = SplitOrchestrator.from_settings_file(path)

        assert orchestrator.settings.batch_size == 5
        assert orchestrator.settings.queue == "imports"


class TestEndToEnd:
    def test_evaluate_splits_and_submits(self):
        engine = InMemoryJobEngine()
        orchestrator = SplitOrchestrator(
            engine=engine, settings=BatchSettings(batch_size=10, queue="imports"),
        )
        a, b = job("crm.sync"), job("reports.send")
        parent = FakeJob(chained=[a])

        result = orchestrator.evaluate(parent, {
            "autoBatch": True,
            "logID": "log-42",
            "accountId": 3,
            "items": make_items(25),
            "batchIdKey": "itemKeys",
            "batchFinally": b,
        })

        assert result.batched is True
        submission = engine.get(result.result.batch_id)
        assert submission.total_jobs == 3
        assert submission.queue == "imports"
        assert submission.finally_step.jobs == (a, b)

        first = submission.items[0]
        assert first.properties["accountId"] == 3
        assert "logID" not in first.properties
        assert first.properties["itemKeys"] == list(make_items(25))[:10]

    def test_settings_shared_with_translator(self):
        orchestrator = SplitOrchestrator(
            settings=BatchSettings(completion_mapping="jobs.batch_done"),
        )
        step = orchestrator.translator.attach(None, None, "Nightly")
        assert step.mapping == "jobs.batch_done"
