"""
jobsplit_batch.domain.options -- The batch option table.

Maps the ``batch*`` keys of a job's property bag onto a typed
``BatchOptions`` structure.  Every value goes through ``safe_get``; a
missing or mistyped value takes its default from ``BatchSettings``.

    Key                 Default                         Field
    ------------------  ------------------------------  ----------------
    autoBatch           False                           auto_batch
    batchSize           settings.batch_size             batch_size
    batchQueue          settings.queue                  queue
    batchConnection     resolved batchQueue             connection
    batchItemsKey       "items"                         items_key
    batchIdKey          ""                              id_key
    batchMaxAttempts    settings.max_attempts           max_attempts
    batchBackoff        settings.backoff                backoff
    batchTimeout        settings.timeout_seconds        timeout_seconds
    batchAllowFailures  settings.allow_failures         allow_failures
    batchFinally        ""                              finally_value
    batchCarryover      []                              carryover
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from jobsplit_config.schema import BatchSettings
from jobsplit_kernel.utils.safe_access import ValueKind, lookup, safe_get

from jobsplit_batch.domain.types import PropertyBag

# Property-bag keys
AUTO_BATCH = "autoBatch"
BATCH_SIZE = "batchSize"
BATCH_QUEUE = "batchQueue"
BATCH_CONNECTION = "batchConnection"
BATCH_ITEMS_KEY = "batchItemsKey"
BATCH_ID_KEY = "batchIdKey"
BATCH_MAX_ATTEMPTS = "batchMaxAttempts"
BATCH_BACKOFF = "batchBackoff"
BATCH_TIMEOUT = "batchTimeout"
BATCH_ALLOW_FAILURES = "batchAllowFailures"
BATCH_FINALLY = "batchFinally"
BATCH_CARRYOVER = "batchCarryover"

# Fields written on every child
IS_BATCH_CHILD = "isBatchChild"
BATCH_INDEX = "batchIndex"
BATCH_TOTAL = "batchTotal"

LOG_ID = "logID"
DEFAULT_ITEMS_KEY = "items"


@dataclass(frozen=True)
class BatchOptions:
    """Typed view of a job's batch options."""

    auto_batch: bool
    batch_size: int
    queue: str
    connection: str
    items_key: str
    id_key: str
    max_attempts: int
    backoff: float
    timeout_seconds: float
    allow_failures: bool
    finally_value: Any
    carryover: tuple[str, ...]
    carryover_is_allow_list: bool

    @property
    def excluded_keys(self) -> tuple[str, ...]:
        """Parent keys never carried to children in pass-all mode."""
        return (LOG_ID, self.items_key, BATCH_CARRYOVER)


def with_option_defaults(props: Mapping[str, Any], settings: BatchSettings) -> PropertyBag:
    """Return ``props`` as a new bag with the evaluation defaults filled in.

    Only keys the caller did not supply are added; caller values are
    never overridden, even when they are mistyped.
    """
    bag = props if isinstance(props, PropertyBag) else PropertyBag(props)
    return bag.with_defaults({
        AUTO_BATCH: False,
        BATCH_SIZE: settings.batch_size,
        BATCH_QUEUE: settings.queue,
        BATCH_ITEMS_KEY: DEFAULT_ITEMS_KEY,
        BATCH_CARRYOVER: [],
    })


def _non_empty_string(props: Mapping[str, Any], key: str, default: str) -> str:
    value = safe_get(props, key, ValueKind.STRING, default)
    return value if value.strip() else default


def resolve_options(props: Mapping[str, Any], settings: BatchSettings) -> BatchOptions:
    """Resolve every batch option from ``props`` with ``settings`` fallback."""
    batch_size = safe_get(props, BATCH_SIZE, ValueKind.INTEGER, settings.batch_size)
    if batch_size < 1:
        batch_size = settings.batch_size

    max_attempts = safe_get(props, BATCH_MAX_ATTEMPTS, ValueKind.INTEGER, settings.max_attempts)
    if max_attempts < 1:
        max_attempts = settings.max_attempts

    backoff = safe_get(props, BATCH_BACKOFF, ValueKind.NUMBER, settings.backoff)
    if backoff < 0:
        backoff = settings.backoff

    timeout = safe_get(props, BATCH_TIMEOUT, ValueKind.NUMBER, settings.timeout_seconds)
    if timeout <= 0:
        timeout = settings.timeout_seconds

    queue = _non_empty_string(props, BATCH_QUEUE, settings.queue)
    # The queue name doubles as the connection unless one is given explicitly
    connection = _non_empty_string(props, BATCH_CONNECTION, queue)

    raw_carryover = safe_get(props, BATCH_CARRYOVER, ValueKind.LIST, [])
    carryover = tuple(
        name for name in raw_carryover if isinstance(name, str) and name.strip()
    )

    return BatchOptions(
        auto_batch=safe_get(props, AUTO_BATCH, ValueKind.BOOLEAN, False),
        batch_size=batch_size,
        queue=queue,
        connection=connection,
        items_key=_non_empty_string(props, BATCH_ITEMS_KEY, DEFAULT_ITEMS_KEY),
        id_key=safe_get(props, BATCH_ID_KEY, ValueKind.STRING, "").strip(),
        max_attempts=max_attempts,
        backoff=backoff,
        timeout_seconds=timeout,
        allow_failures=safe_get(
            props, BATCH_ALLOW_FAILURES, ValueKind.BOOLEAN, settings.allow_failures,
        ),
        finally_value=lookup(props, BATCH_FINALLY, ""),
        carryover=carryover,
        carryover_is_allow_list=len(raw_carryover) > 0,
    )
