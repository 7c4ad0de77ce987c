"""Best-effort notification through the originating job's ``notify`` hook."""

from __future__ import annotations

from typing import Any

from jobsplit_kernel.logging_config import get_logger

logger = get_logger("batch.notify")


def notify_best_effort(job: Any, message: str) -> bool:
    """Send ``message`` to ``job.notify`` if the job has one.

    A missing hook is skipped silently.  A failing hook is logged and
    swallowed so batching always continues.

    Returns:
        True if the hook was called and returned normally.
    """
    hook = getattr(job, "notify", None)
    if not callable(hook):
        return False
    try:
        hook(message)
    except Exception:
        logger.warning(
            "notify_hook_failed",
            extra={"notify_message": message},
            exc_info=True,
        )
        return False
    return True
