"""
jobsplit_config -- single public entrypoint for batch settings.

Responsibility:
    Provides the ONLY way to obtain ``BatchSettings`` at runtime through
    ``get_settings()``.  The splitter never reads environment variables or
    global state; callers obtain settings here and pass them in.

Failure modes:
    - ``FileNotFoundError`` -- the requested settings file does not exist.
    - ``InvalidSettingError`` -- the file contains an invalid value.

Audit relevance:
    Every ``get_settings()`` call emits a ``JOBSPLIT_SETTINGS_TRACE`` log
    entry with the source and the effective values.
"""

from __future__ import annotations

from dataclasses import asdict
from pathlib import Path

from jobsplit_config.loader import load_settings_file
from jobsplit_config.schema import BatchSettings
from jobsplit_kernel.logging_config import get_logger

_logger = get_logger("config")


def get_settings(path: Path | str | None = None) -> BatchSettings:
    """Return the effective batch settings.

    Args:
        path: Optional YAML settings file.  ``None`` returns the
            built-in defaults.

    Raises:
        FileNotFoundError: if ``path`` does not exist.
        InvalidSettingError: if the file contains an invalid value.
    """
    if path is None:
        settings = BatchSettings()
        source = "defaults"
    else:
        settings = load_settings_file(Path(path))
        source = str(path)

    _logger.info(
        "JOBSPLIT_SETTINGS_TRACE",
        extra={"source": source, "settings": asdict(settings)},
    )
    return settings


__all__ = [
    "BatchSettings",
    "get_settings",
]
