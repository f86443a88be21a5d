"""Best-effort side writes.

A side write is persistence whose failure must not change the caller's
result, e.g. caching a live-fetched price. Failures are logged with a
traceback and the session is rolled back so it stays usable.
"""

import logging
from typing import Awaitable, Callable, TypeVar

from sqlalchemy.orm import Session

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _report_failure(description: str, db: Session | None, log: logging.Logger) -> None:
    log.warning("Best-effort write failed: %s", description, exc_info=True)
    if db is None:
        return
    try:
        db.rollback()
    except Exception:
        log.warning("Rollback after failed %s also failed", description, exc_info=True)


def best_effort(
    description: str,
    write: Callable[[], T],
    db: Session | None = None,
    log: logging.Logger | None = None,
) -> T | None:
    """Run ``write`` and swallow any exception it raises.

    Args:
        description: Short label used in the warning log line.
        write: Zero-argument callable performing the side write.
        db: Session to roll back on failure, if any.
        log: Logger to report failures to (defaults to this module's).

    Returns:
        The callable's return value, or None if it failed.
    """
    try:
        return write()
    except Exception:
        _report_failure(description, db, log or logger)
        return None


async def best_effort_async(
    description: str,
    write: Callable[[], Awaitable[T]],
    db: Session | None = None,
    log: logging.Logger | None = None,
) -> T | None:
    """Async variant of best_effort for coroutine-returning callables."""
    try:
        return await write()
    except Exception:
        _report_failure(description, db, log or logger)
        return None
