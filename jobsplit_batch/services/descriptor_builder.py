"""
JobDescriptorBuilder -- materializes one child job per chunk.

Contract:
    ``build()`` turns the parent's properties plus one chunk into a child
    ``JobDescriptor``.  ``build_all()`` does it for every chunk with a
    1-based index.

Carryover (mutually exclusive):
    - Allow-list (``batchCarryover`` non-empty): the child starts with only
      the named parent keys that exist.
    - Pass-all (``batchCarryover`` empty): the child starts with every
      parent key except ``logID``, the items key and ``batchCarryover``.

Then, unconditionally: items key -> chunk, id key -> chunk keys (when
configured), ``isBatchChild``, ``batchIndex``, ``batchTotal`` and
``autoBatch=False``.  The last one stops a child from splitting again.

Dispatch parameters come from the resolved ``BatchOptions``, never from
carried-over properties.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any

from jobsplit_batch.domain.options import (
    AUTO_BATCH,
    BATCH_INDEX,
    BATCH_TOTAL,
    IS_BATCH_CHILD,
    BatchOptions,
)
from jobsplit_batch.domain.types import JobDescriptor, PropertyBag


class JobDescriptorBuilder:
    """Builds child ``JobDescriptor`` instances for a batch."""

    def base_properties(self, parent_props: PropertyBag, options: BatchOptions) -> PropertyBag:
        """Apply the carryover policy to the parent's properties."""
        if options.carryover_is_allow_list:
            return parent_props.only(options.carryover)
        return parent_props.without(options.excluded_keys)

    def build(
        self,
        parent_props: PropertyBag,
        chunk: Mapping[Any, Any],
        index: int,
        total: int,
        options: BatchOptions,
        mapping: str,
    ) -> JobDescriptor:
        """Build the child descriptor for one chunk.

        Args:
            parent_props: Parent properties with option defaults applied.
            chunk: This child's slice of the item collection.
            index: 1-based position of the chunk.
            total: Number of chunks in the batch.
            options: Resolved batch options of the parent.
            mapping: Job type identifier shared by all children.
        """
        overrides: dict[str, Any] = {options.items_key: dict(chunk)}
        if options.id_key:
            overrides[options.id_key] = list(chunk.keys())
        overrides[IS_BATCH_CHILD] = True
        overrides[BATCH_INDEX] = index
        overrides[BATCH_TOTAL] = total
        overrides[AUTO_BATCH] = False

        properties = self.base_properties(parent_props, options).merged(overrides)

        return JobDescriptor(
            mapping=mapping,
            properties=properties,
            chain=(),
            queue=options.queue,
            connection=options.connection,
            backoff=options.backoff,
            timeout_seconds=options.timeout_seconds,
            max_attempts=options.max_attempts,
        )

    def build_all(
        self,
        parent_props: PropertyBag,
        chunks: Sequence[Mapping[Any, Any]],
        options: BatchOptions,
        mapping: str,
    ) -> tuple[JobDescriptor, ...]:
        """Build one child per chunk, indexed from 1."""
        total = len(chunks)
        return tuple(
            self.build(parent_props, chunk, i, total, options, mapping)
            for i, chunk in enumerate(chunks, start=1)
        )
