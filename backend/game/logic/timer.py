"""
Delayed reset timer for finished games.

After a game ends the authority leaves the result on screen for the game's
display delay, then broadcasts a RESET. At most one reset is pending per game
instance; scheduling again or cancelling drops the earlier one.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

import structlog

logger = structlog.get_logger()

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable


class ResetTimer:
    """Single-shot cancellable timer driving the post-game reset."""

    def __init__(self) -> None:
        self._active_task: asyncio.Task[None] | None = None

    @property
    def pending(self) -> bool:
        return self._active_task is not None and not self._active_task.done()

    def start(self, delay: float, on_timeout: Callable[[], Awaitable[None]]) -> None:
        """Start the timer, replacing any pending one."""
        self.cancel()
        self._active_task = asyncio.create_task(self._run_timer(max(0.0, delay), on_timeout))

    def cancel(self) -> None:
        """Cancel the pending timer, if any."""
        if self._active_task is not None and not self._active_task.done():
            self._active_task.cancel()
        self._active_task = None

    async def _run_timer(self, seconds: float, on_timeout: Callable[[], Awaitable[None]]) -> None:
        try:
            await asyncio.sleep(seconds)
            # detach first so a cancel() issued from the callback cannot abort it
            self._active_task = None
            await on_timeout()
        except asyncio.CancelledError:
            pass
        except (RuntimeError, OSError, ConnectionError, ValueError):
            logger.exception("reset timer callback failed")
