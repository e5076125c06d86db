"""Paced outbound chat queue."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from collections.abc import Callable
from dataclasses import dataclass

from ..errors.internal import NotOnlineError
from .timers import CancellableTimer


@dataclass
class QueueEntry:
    """A message waiting for its dispatch slot."""

    text: str
    future: asyncio.Future[None]


def _consume_exception(future: asyncio.Future[None]) -> None:
    if not future.cancelled():
        future.exception()


class OutboundQueue:
    """Paces calls into the transport's chat primitive.

    Consecutive dispatches are at least ``min_interval`` seconds apart.
    ``min_interval == 0`` disables pacing: every send dispatches immediately.
    Entries leave the queue in FIFO order, except that ``send_next`` places
    its entry at the front.

    Exactly one drain timer exists per queue and only ``_ensure_drain`` arms
    it, after checking it is idle. While entries are queued the timer is
    armed; the drain callback re-arms it when entries remain.

    Attributes:
        min_interval (float): Minimum seconds between dispatches.
        last_dispatch (float | None): Loop time of the last dispatch.
    """

    def __init__(
        self,
        dispatch: Callable[[str], object],
        *,
        min_interval: float = 0.0,
        is_online: Callable[[], bool] = lambda: True,
    ) -> None:
        """Initialize the queue.

        Args:
            dispatch: Sends one line to the server (``Transport.chat``).
            min_interval: Minimum seconds between dispatches.
            is_online: Whether the client is currently logged in.
        """
        if min_interval < 0:
            raise ValueError("min_interval must be >= 0")
        self._dispatch = dispatch
        self.min_interval = min_interval
        self._is_online = is_online
        self._queue: deque[QueueEntry] = deque()
        self._drain_timer = CancellableTimer(self._drain_one, name="outbound_drain")
        self.last_dispatch: float | None = None

    def __len__(self) -> int:
        return len(self._queue)

    @property
    def pacing_enabled(self) -> bool:
        return self.min_interval > 0

    @property
    def drain_scheduled(self) -> bool:
        return self._drain_timer.armed

    def pending_texts(self) -> list[str]:
        return [entry.text for entry in self._queue]

    def _ensure_online(self) -> None:
        if not self._is_online():
            raise NotOnlineError("Cannot send chat while not logged in")

    def _remaining_wait(self, now: float) -> float:
        if self.last_dispatch is None:
            return 0.0
        return max(0.0, self.last_dispatch + self.min_interval - now)

    def _dispatch_now(self, text: str) -> None:
        self._dispatch(text)
        self.last_dispatch = asyncio.get_running_loop().time()
        logging.debug(f"📤 Chat dispatched length={len(text)} queued={len(self._queue)}")

    def _new_entry(self, text: str) -> QueueEntry:
        future: asyncio.Future[None] = asyncio.get_running_loop().create_future()
        # Dropped futures never log an unretrieved exception.
        future.add_done_callback(_consume_exception)
        return QueueEntry(text, future)

    def _ensure_drain(self) -> None:
        if self._drain_timer.armed or not self._queue:
            return
        now = asyncio.get_running_loop().time()
        self._drain_timer.arm(self._remaining_wait(now))

    def send(self, text: str, ignore_delay: bool = False) -> asyncio.Future[None]:
        """Send ``text`` as soon as pacing allows.

        The returned future resolves once the text has been handed to the
        transport. Awaiting it is optional; the message is sent either way.

        Raises:
            NotOnlineError: If the client is not logged in.
        """
        self._ensure_online()
        loop = asyncio.get_running_loop()
        immediate = (
            ignore_delay
            or not self.pacing_enabled
            or (not self._queue and self._remaining_wait(loop.time()) <= 0)
        )
        if immediate:
            self._dispatch_now(text)
            future: asyncio.Future[None] = loop.create_future()
            future.set_result(None)
            return future

        entry = self._new_entry(text)
        self._queue.append(entry)
        self._ensure_drain()
        logging.debug(f"📥 Chat queued position={len(self._queue)}")
        return entry.future

    def send_now(self, text: str) -> asyncio.Future[None]:
        return self.send(text, ignore_delay=True)

    def send_next(self, text: str) -> asyncio.Future[None]:
        """Queue ``text`` ahead of every waiting entry.

        Never dispatches immediately; the entry still waits for its pacing
        slot.

        Raises:
            NotOnlineError: If the client is not logged in.
        """
        self._ensure_online()
        entry = self._new_entry(text)
        self._queue.appendleft(entry)
        self._ensure_drain()
        logging.debug(f"⏫ Chat queued at front queued={len(self._queue)}")
        return entry.future

    def _drain_one(self) -> None:
        if not self._queue:
            return
        loop = asyncio.get_running_loop()
        remaining = self._remaining_wait(loop.time())
        if remaining > 0:
            # Woken before the slot opened; wait out the rest.
            self._drain_timer.arm(remaining)
            return

        entry = self._queue.popleft()
        try:
            self._dispatch_now(entry.text)
        except Exception as e:  # noqa: BLE001
            logging.error(
                f"💥 Chat dispatch failed error_type={type(e).__name__} error={str(e)}"
            )
            # The slot is consumed either way.
            self.last_dispatch = loop.time()
            if not entry.future.done():
                entry.future.set_exception(e)
        else:
            if not entry.future.done():
                entry.future.set_result(None)

        if self._queue:
            self._drain_timer.arm(self.min_interval)

    def reset(self, error: BaseException | None = None) -> int:
        """Drop every queued entry and forget the pacing state.

        Queued futures fail with ``error`` (``NotOnlineError`` by default).

        Returns:
            Number of entries dropped.
        """
        self._drain_timer.disarm()
        dropped = list(self._queue)
        self._queue.clear()
        self.last_dispatch = None
        for entry in dropped:
            if not entry.future.done():
                entry.future.set_exception(
                    error or NotOnlineError("Outbound queue reset before dispatch")
                )
        if dropped:
            logging.debug(f"🧹 Outbound queue reset dropped={len(dropped)}")
        return len(dropped)


__all__ = ["OutboundQueue", "QueueEntry"]
