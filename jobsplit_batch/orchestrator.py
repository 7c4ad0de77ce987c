"""
SplitOrchestrator -- DI container for the batch splitter.

Contract:
    Wires BatchSettings, the job engine, JobDescriptorBuilder,
    ChainTranslator, BatchDispatcher and BatchEvaluator.  Single place
    where all splitter dependencies are composed.

Architecture: jobsplit_batch (top-level).  This is the canonical entry
    point for configuring and running the splitter.
"""

from __future__ import annotations

from collections.abc import Mapping
from pathlib import Path
from typing import Any

from jobsplit_config import get_settings
from jobsplit_config.schema import BatchSettings

from jobsplit_batch.domain.types import EvaluationResult
from jobsplit_batch.engine.base import JobEngine
from jobsplit_batch.engine.memory import InMemoryJobEngine
from jobsplit_batch.services.chain_translator import ChainTranslator
from jobsplit_batch.services.descriptor_builder import JobDescriptorBuilder
from jobsplit_batch.services.dispatcher import BatchDispatcher
from jobsplit_batch.services.evaluator import BatchEvaluator


class SplitOrchestrator:
    """DI container for the batch splitter.

    Contract:
        - ``from_settings_file()`` factory loads settings from YAML.
        - ``evaluate()`` forwards to the wired BatchEvaluator.
        - ``dispatcher`` / ``evaluator`` / ``translator`` expose the parts.

    Non-goals:
        - Does NOT own the engine's lifecycle -- caller decides.
    """

    def __init__(
        self,
        engine: JobEngine | None = None,
        settings: BatchSettings | None = None,
    ) -> None:
        self._settings = settings or BatchSettings()
        self._engine = engine if engine is not None else InMemoryJobEngine()
        self._builder = JobDescriptorBuilder()
        self._translator = ChainTranslator(self._settings)
        self._dispatcher = BatchDispatcher(
            engine=self._engine,
            settings=self._settings,
            builder=self._builder,
            translator=self._translator,
        )
        self._evaluator = BatchEvaluator(
            engine=self._engine,
            settings=self._settings,
            dispatcher=self._dispatcher,
        )

    # -------------------------------------------------------------------------
    # Factory
    # -------------------------------------------------------------------------

    @classmethod
    def from_settings_file(
        cls,
        path: Path | str,
        engine: JobEngine | None = None,
    ) -> SplitOrchestrator:
        """Create a fully wired SplitOrchestrator from a YAML settings file.

        Args:
            path: YAML settings file (see ``jobsplit_config.loader``).
            engine: Optional engine.  If None, uses InMemoryJobEngine.
        """
        return cls(engine=engine, settings=get_settings(path))

    # -------------------------------------------------------------------------
    # Evaluation
    # -------------------------------------------------------------------------

    def evaluate(self, parent_job: Any, props: Mapping[str, Any]) -> EvaluationResult:
        return self._evaluator.evaluate(parent_job, props)

    # -------------------------------------------------------------------------
    # Properties
    # -------------------------------------------------------------------------

    @property
    def settings(self) -> BatchSettings:
        return self._settings

    @property
    def engine(self) -> JobEngine:
        return self._engine

    @property
    def evaluator(self) -> BatchEvaluator:
        return self._evaluator

    @property
    def dispatcher(self) -> BatchDispatcher:
        return self._dispatcher

    @property
    def translator(self) -> ChainTranslator:
        return self._translator
