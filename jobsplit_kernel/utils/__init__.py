"""Utility modules for the jobsplit kernel."""

from jobsplit_kernel.utils.safe_access import (
    ValueKind,
    first_present,
    lookup,
    safe_get,
)

__all__ = [
    "ValueKind",
    "first_present",
    "lookup",
    "safe_get",
]
