from __future__ import annotations

import queue
import threading
from typing import Optional

from ..channel.models import Message


class Inbox:
    """Messages sent from the consumer to a running worker, plus a close flag.

    Closing is cooperative: a worker that never looks at ``closed`` still runs
    to its own terminal state.
    """

    def __init__(self) -> None:
        self._queue: "queue.Queue[Message]" = queue.Queue()
        self._closed = threading.Event()

    @property
    def closed(self) -> bool:
        return self._closed.is_set()

    def put(self, message: Message) -> None:
        if not isinstance(message, Message):
            raise TypeError("Inbox only carries Message instances")
        self._queue.put(message)

    def close(self) -> None:
        self._closed.set()

    def receive(self, timeout: Optional[float] = None) -> Optional[Message]:
        try:
            return self._queue.get(timeout=timeout)
        except queue.Empty:
            return None

    def receive_nowait(self) -> Optional[Message]:
        try:
            return self._queue.get_nowait()
        except queue.Empty:
            return None

    def wait_closed(self, timeout: Optional[float] = None) -> bool:
        return self._closed.wait(timeout)
