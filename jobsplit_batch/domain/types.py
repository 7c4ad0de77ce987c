"""
jobsplit_batch.domain.types -- Pure value types for the batch splitter.

ZERO I/O.  All DTOs are frozen dataclasses with tuples for immutable
sequences.  ``PropertyBag`` is an immutable ordered mapping with
case-insensitive key comparison.

Invariants enforced:
    - A PropertyBag preserves the first spelling of every key and its
      insertion order; lookups ignore case.
    - Builders never share a PropertyBag's internal storage; every
      transformation returns a new bag.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass, field
from typing import Any, Protocol, Union, runtime_checkable


# =============================================================================
# PropertyBag
# =============================================================================


class PropertyBag(Mapping[str, Any]):
    """Immutable ordered mapping of job properties.

    Keys compare case-insensitively (``bag["autobatch"]`` finds
    ``"autoBatch"``) but are stored verbatim.  Writing a key under a
    different casing replaces the value and keeps the original spelling.
    """

    __slots__ = ("_data", "_index")

    def __init__(self, data: Mapping[str, Any] | Iterable[tuple[str, Any]] | None = None):
        self._data: dict[str, Any] = {}
        self._index: dict[str, str] = {}
        if data is None:
            return
        pairs = data.items() if isinstance(data, Mapping) else data
        for key, value in pairs:
            self._store(key, value)

    def _store(self, key: str, value: Any) -> None:
        folded = _fold(key)
        existing = self._index.get(folded)
        if existing is None:
            self._index[folded] = key
            self._data[key] = value
        else:
            self._data[existing] = value

    # -- Mapping protocol -----------------------------------------------------

    def __getitem__(self, key: str) -> Any:
        original = self._index.get(_fold(key))
        if original is None:
            raise KeyError(key)
        return self._data[original]

    def __contains__(self, key: object) -> bool:
        return isinstance(key, str) and _fold(key) in self._index

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"PropertyBag({self._data!r})"

    # -- Transformations ------------------------------------------------------

    def merged(self, overrides: Mapping[str, Any]) -> PropertyBag:
        """Return a new bag with ``overrides`` written over this one."""
        bag = PropertyBag(self._data)
        for key, value in overrides.items():
            bag._store(key, value)
        return bag

    def with_defaults(self, defaults: Mapping[str, Any]) -> PropertyBag:
        """Return a new bag with ``defaults`` added only for missing keys."""
        bag = PropertyBag(self._data)
        for key, value in defaults.items():
            if key not in bag:
                bag._store(key, value)
        return bag

    def without(self, keys: Iterable[str]) -> PropertyBag:
        """Return a new bag without ``keys`` (case-insensitive)."""
        excluded = {_fold(k) for k in keys}
        return PropertyBag(
            (k, v) for k, v in self._data.items() if _fold(k) not in excluded
        )

    def only(self, keys: Iterable[str]) -> PropertyBag:
        """Return a new bag holding only ``keys`` that are present.

        Entries keep this bag's order and spelling.
        """
        wanted = {_fold(k) for k in keys}
        return PropertyBag(
            (k, v) for k, v in self._data.items() if _fold(k) in wanted
        )

    def to_dict(self) -> dict[str, Any]:
        """Return a shallow ``dict`` copy."""
        return dict(self._data)


def _fold(key: Any) -> str:
    return key.casefold() if isinstance(key, str) else str(key)


# =============================================================================
# Job handles
# =============================================================================


@runtime_checkable
class JobHandle(Protocol):
    """Anything the job engine can run as one step of a chain.

    ``JobDescriptor`` and ``ChainDescriptor`` satisfy this; so does any
    handle a concrete engine builds itself.
    """

    @property
    def mapping(self) -> str: ...


@dataclass(frozen=True)
class JobDescriptor:
    """Engine-agnostic description of one dispatchable unit of work."""

    mapping: str  # Job type identifier
    properties: PropertyBag = field(default_factory=PropertyBag)
    chain: tuple[Any, ...] = ()  # Handles run after this job, in order
    queue: str = "default"
    connection: str = ""
    backoff: float = 0
    timeout_seconds: float = 3600
    max_attempts: int = 1


@dataclass(frozen=True)
class ChainDescriptor:
    """An ordered composed chain of job handles, run strictly in order."""

    jobs: tuple[Any, ...]

    @property
    def mapping(self) -> str:
        return "chain"

    def __len__(self) -> int:
        return len(self.jobs)


def is_job_handle(value: Any) -> bool:
    """True for descriptors and engine-built handles."""
    if isinstance(value, (JobDescriptor, ChainDescriptor)):
        return True
    if isinstance(value, (Mapping, str, bytes, list, tuple)):
        return False
    return isinstance(value, JobHandle) and isinstance(value.mapping, str)


# =============================================================================
# Chain input variants
# =============================================================================


@dataclass(frozen=True)
class EmptyChain:
    """Absent input, or a zero-length string."""


@dataclass(frozen=True)
class SingleJob:
    """An already-constructed job handle."""

    handle: Any


@dataclass(frozen=True)
class JobList:
    """A list whose entries are handles, loose descriptors, or garbage."""

    entries: tuple[Any, ...]


@dataclass(frozen=True)
class LooseDescriptor:
    """A loosely-typed mapping describing one job."""

    data: Mapping[str, Any]


@dataclass(frozen=True)
class UnrecognizedChain:
    """Any other shape; contributes nothing."""

    value: Any


ChainInput = Union[EmptyChain, SingleJob, JobList, LooseDescriptor, UnrecognizedChain]


def classify_chain_input(value: Any) -> ChainInput:
    """Resolve a caller-supplied "run this after" value to its variant."""
    if value is None or (isinstance(value, str) and value == ""):
        return EmptyChain()
    if is_job_handle(value):
        return SingleJob(handle=value)
    if isinstance(value, (list, tuple)):
        return JobList(entries=tuple(value))
    if isinstance(value, Mapping):
        return LooseDescriptor(data=value)
    return UnrecognizedChain(value=value)


# =============================================================================
# Batch submission
# =============================================================================


@dataclass(frozen=True)
class BatchSubmission:
    """The single artifact handed to the job engine.

    ``items`` run with the shared queue / retry / failure policy;
    ``finally_step`` runs once every item has completed.
    """

    label: str  # Originating job-type label
    items: tuple[JobDescriptor, ...]
    queue: str
    connection: str
    max_attempts: int
    backoff: float
    timeout_seconds: float
    allow_failures: bool
    finally_step: Any  # JobHandle

    @property
    def total_jobs(self) -> int:
        return len(self.items)


@dataclass(frozen=True)
class EvaluationResult:
    """Outcome of ``BatchEvaluator.evaluate()``.

    ``result`` is whatever the engine returned from ``submit()``; it is
    ``None`` when the job was not batched.
    """

    batched: bool
    result: Any = None
