"""
Typed Exception Hierarchy for the Job Splitter.

===============================================================================
WHEN THINGS RAISE
===============================================================================

Splitting a job is a pure transformation.  Every "should not batch"
outcome (disabled flag, missing items key, collection below threshold)
is a normal return value, never an exception.  Malformed chain entries
and mistyped options fall back to defaults.  Exceptions are reserved for:

  1. Programming errors inside the splitter (e.g. a chunk size < 1)
  2. Invalid settings files, rejected at load time
  3. Failures raised by the external job engine, which propagate
     unchanged and are NOT wrapped by this hierarchy

Every class carries a ``code`` attribute (machine-readable, API-safe)
and exposes its structured data as attributes rather than only in the
message string.

===============================================================================
EXCEPTION HIERARCHY
===============================================================================

    JobSplitError (base)
    |
    +-- SplitError
    |   +-- InvalidChunkSizeError
    |
    +-- SettingsError
        +-- InvalidSettingError

===============================================================================
"""

from typing import Any


class JobSplitError(Exception):
    """
    Base exception for all job splitter errors.

    All subclasses must have a `code` class attribute
    for machine-readable error identification.
    """

    code: str = "JOBSPLIT_ERROR"


# Split exceptions


class SplitError(JobSplitError):
    """Base exception for errors raised while splitting a job."""

    code: str = "SPLIT_ERROR"


class InvalidChunkSizeError(SplitError):
    """Chunk size must be a positive integer."""

    code: str = "INVALID_CHUNK_SIZE"

    def __init__(self, size: Any):
        self.size = size
        super().__init__(f"Chunk size must be a positive integer, got {size!r}")


# Settings exceptions


class SettingsError(JobSplitError):
    """Base exception for settings loading errors."""

    code: str = "SETTINGS_ERROR"


class InvalidSettingError(SettingsError):
    """A settings value is missing, unknown, or of the wrong type."""

    code: str = "INVALID_SETTING"

    def __init__(self, field: str, value: Any, reason: str):
        self.field = field
        self.value = value
        self.reason = reason
        super().__init__(f"Invalid setting '{field}' = {value!r}: {reason}")
