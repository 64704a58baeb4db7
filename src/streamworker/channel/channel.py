from __future__ import annotations

import threading
from collections import deque
from typing import Callable, Deque, List, Optional

from streamworker.utils.logging import get_logger

from ..errors import ProtocolViolation
from .models import ChannelEntry, Completed, Failed, Message, is_terminal

logger = get_logger(__name__)

WakeupHook = Callable[[], None]


class Channel:
    """Unbounded FIFO carrying messages and one terminal sentinel.

    The worker thread is the only caller of ``push`` and the consumer loop is
    the only caller of ``drain``. ``push`` never blocks on the consumer.
    """

    def __init__(self, depth_warning_threshold: int = 0) -> None:
        self._entries: Deque[ChannelEntry] = deque()
        self._cond = threading.Condition(threading.Lock())
        self._terminal_pushed = False
        self._released = False
        self._wakeup: Optional[WakeupHook] = None
        self._depth_warning_threshold = depth_warning_threshold
        self._depth_warned = False
        self.pushed_count = 0
        self.drained_count = 0
        self.high_water_mark = 0

    @property
    def depth(self) -> int:
        with self._cond:
            return len(self._entries)

    @property
    def closed(self) -> bool:
        with self._cond:
            return self._terminal_pushed or self._released

    @property
    def terminal_pushed(self) -> bool:
        with self._cond:
            return self._terminal_pushed

    def set_wakeup(self, hook: Optional[WakeupHook]) -> None:
        with self._cond:
            self._wakeup = hook

    def push(self, entry: ChannelEntry) -> None:
        if not isinstance(entry, (Message, Completed, Failed)):
            raise ProtocolViolation(
                f"cannot push {type(entry).__name__}; expected Message, Completed or Failed"
            )
        with self._cond:
            if self._released:
                raise ProtocolViolation("push on a released channel")
            if self._terminal_pushed:
                raise ProtocolViolation(
                    f"push of {type(entry).__name__} after the terminal sentinel"
                )
            self._entries.append(entry)
            self.pushed_count += 1
            depth = len(self._entries)
            if depth > self.high_water_mark:
                self.high_water_mark = depth
            warn = self._should_warn(depth)
            if is_terminal(entry):
                self._terminal_pushed = True
            self._cond.notify_all()
            wakeup = self._wakeup
        if warn:
            logger.warning(
                "channel depth %d exceeds %d; consumer is falling behind",
                depth,
                self._depth_warning_threshold,
            )
        if wakeup is not None:
            wakeup()

    def drain(
        self, block: bool = True, timeout: Optional[float] = None
    ) -> List[ChannelEntry]:
        with self._cond:
            if block and not self._entries and not self._closed_locked():
                self._cond.wait_for(
                    lambda: bool(self._entries) or self._closed_locked(), timeout
                )
            drained = list(self._entries)
            self._entries.clear()
            self.drained_count += len(drained)
            if self._depth_warned and self._depth_warning_threshold:
                self._depth_warned = False
            return drained

    def release(self) -> int:
        """Close the channel for good and drop whatever is still pending."""
        with self._cond:
            dropped = len(self._entries)
            self._entries.clear()
            self._released = True
            self._wakeup = None
            self._cond.notify_all()
        return dropped

    def _closed_locked(self) -> bool:
        return self._terminal_pushed or self._released

    def _should_warn(self, depth: int) -> bool:
        if not self._depth_warning_threshold or self._depth_warned:
            return False
        if depth > self._depth_warning_threshold:
            self._depth_warned = True
            return True
        return False
