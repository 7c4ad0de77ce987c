"""
Chunker -- deterministic partition of a keyed item collection.

Pure function, ZERO I/O.

Invariants enforced:
    - Every key of the input appears in exactly one chunk.
    - Concatenating the chunks reproduces the input in its key order.
    - ``len(chunks) == ceil(len(items) / size)``; only the last chunk may
      be smaller than ``size``; no chunk is empty.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from jobsplit_kernel.exceptions import InvalidChunkSizeError


def chunk_items(items: Mapping[Any, Any], size: int) -> tuple[dict[Any, Any], ...]:
    """Split ``items`` into consecutive chunks of at most ``size`` entries.

    Args:
        items: Ordered keyed collection to split.
        size: Maximum entries per chunk.

    Returns:
        Tuple of fresh dicts, in input order.  Empty input yields ``()``.

    Raises:
        InvalidChunkSizeError: If ``size`` is not a positive integer.
    """
    if isinstance(size, bool) or not isinstance(size, int) or size < 1:
        raise InvalidChunkSizeError(size)

    chunks: list[dict[Any, Any]] = []
    current: dict[Any, Any] = {}
    for key, value in items.items():
        current[key] = value
        if len(current) == size:
            chunks.append(current)
            current = {}
    if current:
        chunks.append(current)
    return tuple(chunks)
