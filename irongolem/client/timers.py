"""Cancellable one-shot timer on the running event loop."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable


class CancellableTimer:
    """One-shot timer that owns its ``asyncio.TimerHandle``.

    At most one callback is pending per timer: arming an armed timer raises
    ``RuntimeError``. Disarming cancels the handle itself, so a disarmed
    timer can never fire.

    Attributes:
        name (str): Label used in log lines.
    """

    def __init__(self, callback: Callable[[], None], *, name: str) -> None:
        self._callback = callback
        self.name = name
        self._handle: asyncio.TimerHandle | None = None

    @property
    def armed(self) -> bool:
        return self._handle is not None

    @property
    def when(self) -> float | None:
        """Loop time at which the timer fires, None when disarmed."""
        return self._handle.when() if self._handle else None

    def arm(self, delay: float) -> None:
        """Schedule the callback ``delay`` seconds from now.

        Raises:
            RuntimeError: If the timer is already armed, or no loop is running.
        """
        if self._handle is not None:
            raise RuntimeError(f"Timer '{self.name}' is already armed")
        loop = asyncio.get_running_loop()
        self._handle = loop.call_later(max(0.0, delay), self._fire)
        logging.debug(f"⏲️ Timer armed name={self.name} delay={delay:.3f}s")

    def disarm(self) -> bool:
        """Cancel the pending callback.

        Returns:
            True if a pending callback was cancelled.
        """
        if self._handle is None:
            return False
        self._handle.cancel()
        self._handle = None
        logging.debug(f"⏹️ Timer disarmed name={self.name}")
        return True

    def _fire(self) -> None:
        # Cleared before the callback so the callback may re-arm.
        self._handle = None
        self._callback()


__all__ = ["CancellableTimer"]
