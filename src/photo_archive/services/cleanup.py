"""Best-effort cleanup helpers."""

import inspect
import logging
from collections.abc import Awaitable, Callable
from pathlib import Path

from photo_archive.domain.errors import CleanupFailedError

_logger = logging.getLogger(__name__)


async def best_effort(
    description: str,
    action: Callable[[], Awaitable[object] | object],
    **context: object,
) -> CleanupFailedError | None:
    """Run a cleanup action, logging failures instead of raising them.

    Returns the logged ``CleanupFailedError`` when the action failed so callers
    can inspect it; the enclosing operation's outcome never depends on it.
    """
    try:
        result = action()
        if inspect.isawaitable(result):
            await result
    except Exception as exc:
        failure = CleanupFailedError(f"{description} failed: {exc}")
        failure.__cause__ = exc
        _logger.warning(
            "Cleanup failed: %s", description, exc_info=exc, extra=context
        )
        return failure
    return None


async def remove_staged_file(path: Path) -> CleanupFailedError | None:
    """Delete a staged upload if it is still on disk."""
    return await best_effort(
        "remove staged file",
        lambda: path.unlink(missing_ok=True),
        staged_path=str(path),
    )
