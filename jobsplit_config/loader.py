"""
Settings Loader (``jobsplit_config.loader``).

Responsibility
--------------
Loads a YAML settings file and parses it into a ``BatchSettings``
instance.  The single public entry point for runtime settings is
``jobsplit_config.get_settings()``.

Invariants enforced
-------------------
* Settings files are validated strictly: unknown keys, wrong types and
  out-of-range values raise ``InvalidSettingError``.  This is the
  opposite of property-bag options, which fall back to defaults.
* Keys missing from the file take the ``BatchSettings`` default.
* The returned object is a frozen dataclass.

Failure modes
-------------
* Missing YAML file  -> ``FileNotFoundError`` propagates.
* Malformed YAML  -> ``yaml.YAMLError`` propagates.
* Invalid value  -> ``InvalidSettingError``.

File format
-----------
Either a flat mapping of ``BatchSettings`` fields, or the same mapping
nested under a top-level ``batch`` key::

    batch:
      batch_size: 250
      queue: bulk
      max_attempts: 5
"""

from __future__ import annotations

import math
from dataclasses import fields, replace
from pathlib import Path
from typing import Any

import yaml

from jobsplit_config.schema import BatchSettings
from jobsplit_kernel.exceptions import InvalidSettingError

_SETTING_FIELDS: frozenset[str] = frozenset(f.name for f in fields(BatchSettings))


def load_yaml_file(path: Path) -> dict[str, Any]:
    """
    Load a single YAML file and return its contents as a dict.

    Raises:
        FileNotFoundError: if the file does not exist.
        yaml.YAMLError: if the file contains invalid YAML.
        InvalidSettingError: if the document is not a mapping.
    """
    with open(path) as f:
        data = yaml.safe_load(f) or {}
    if not isinstance(data, dict):
        raise InvalidSettingError("<document>", data, "expected a mapping")
    return data


def _positive_int(name: str, value: Any) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidSettingError(name, value, "expected an integer")
    if value < 1:
        raise InvalidSettingError(name, value, "must be >= 1")
    return value


def _number(name: str, value: Any, *, strictly_positive: bool) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise InvalidSettingError(name, value, "expected a number")
    if not math.isfinite(value):
        raise InvalidSettingError(name, value, "must be finite")
    if strictly_positive and value <= 0:
        raise InvalidSettingError(name, value, "must be > 0")
    if value < 0:
        raise InvalidSettingError(name, value, "must be >= 0")
    return value


def _string(name: str, value: Any, *, allow_empty: bool = False) -> str:
    if not isinstance(value, str):
        raise InvalidSettingError(name, value, "expected a string")
    if not allow_empty and not value.strip():
        raise InvalidSettingError(name, value, "must not be empty")
    return value


def parse_settings(data: dict[str, Any]) -> BatchSettings:
    """
    Parse ``BatchSettings`` from a dict.

    Preconditions:
        - ``data`` is a mapping, either flat or nested under ``batch``.
    Postconditions:
        - Returns a fully populated ``BatchSettings``.
    Raises:
        InvalidSettingError: on unknown keys or invalid values.
    """
    section = data.get("batch", data) if isinstance(data, dict) else data
    if not isinstance(section, dict):
        raise InvalidSettingError("batch", section, "expected a mapping")

    unknown = sorted(set(section) - _SETTING_FIELDS)
    if unknown:
        raise InvalidSettingError(unknown[0], section[unknown[0]], "unknown setting")

    defaults = BatchSettings()
    values: dict[str, Any] = {}

    if "batch_size" in section:
        values["batch_size"] = _positive_int("batch_size", section["batch_size"])
    if "max_attempts" in section:
        values["max_attempts"] = _positive_int("max_attempts", section["max_attempts"])
    if "backoff" in section:
        values["backoff"] = _number("backoff", section["backoff"], strictly_positive=False)
    if "timeout_seconds" in section:
        values["timeout_seconds"] = _number(
            "timeout_seconds", section["timeout_seconds"], strictly_positive=True,
        )
    if "queue" in section:
        values["queue"] = _string("queue", section["queue"])
    if "connection" in section:
        values["connection"] = _string("connection", section["connection"], allow_empty=True)
    if "completion_mapping" in section:
        values["completion_mapping"] = _string(
            "completion_mapping", section["completion_mapping"],
        )
    if "allow_failures" in section:
        allow = section["allow_failures"]
        if not isinstance(allow, bool):
            raise InvalidSettingError("allow_failures", allow, "expected a boolean")
        values["allow_failures"] = allow

    return replace(defaults, **values)


def load_settings_file(path: Path) -> BatchSettings:
    """Load and parse a settings YAML file."""
    return parse_settings(load_yaml_file(path))
