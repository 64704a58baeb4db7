from __future__ import annotations

import asyncio
import inspect
import threading
from collections import deque
from enum import Enum
from typing import Any, Awaitable, Callable, Deque, Iterator, Optional, Union

from streamworker.utils.logging import get_logger

from ..channel.channel import Channel
from ..channel.models import ChannelEntry, Completed, Failed, Message
from ..config import BridgeConfig
from ..errors import AlreadyStarted, NotStarted
from .inbox import Inbox
from .worker import InboxAware, Worker, WorkerFactory, describe_fault

logger = get_logger(__name__)

MaybeAwaitable = Union[None, Awaitable[None]]
MessageCallback = Callable[[Message], MaybeAwaitable]
CompleteCallback = Callable[[], MaybeAwaitable]
ErrorCallback = Callable[[str], MaybeAwaitable]


class BridgeState(str, Enum):
    IDLE = "idle"
    RUNNING = "running"
    DRAINING = "draining"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def terminal(self) -> bool:
        return self in (BridgeState.COMPLETED, BridgeState.FAILED)


class Bridge:
    """Runs one worker on a background thread and replays its output here.

    Every callback runs on the thread (or asyncio loop) that calls ``poll`` or
    ``run``. Leaving the context manager, or calling ``shutdown``, always joins
    the worker thread.
    """

    def __init__(
        self,
        worker_factory: WorkerFactory,
        on_message: MessageCallback,
        on_complete: Optional[CompleteCallback] = None,
        on_error: Optional[ErrorCallback] = None,
        options: Any = None,
        config: Optional[BridgeConfig] = None,
    ) -> None:
        self._worker_factory = worker_factory
        self._on_message = on_message
        self._on_complete = on_complete or _noop_complete
        self._on_error = on_error or _log_error
        self._options = options
        self.config = config or BridgeConfig()
        self.state = BridgeState.IDLE
        self._channel: Optional[Channel] = None
        self._thread: Optional[threading.Thread] = None
        self._inbox = Inbox()
        self._backlog: Deque[ChannelEntry] = deque()
        self._terminal_observed = False
        self._released = False
        self.delivered_count = 0
        self.error: Optional[str] = None

    @property
    def terminal_observed(self) -> bool:
        return self._terminal_observed

    @property
    def queue_depth(self) -> int:
        pending = len(self._backlog)
        if self._channel is not None:
            pending += self._channel.depth
        return pending

    @property
    def channel(self) -> Optional[Channel]:
        return self._channel

    def is_alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        if self.state != BridgeState.IDLE:
            raise AlreadyStarted(f"bridge already started (state={self.state.value})")
        channel = Channel(depth_warning_threshold=self.config.depth_warning_threshold)
        worker = self._worker_factory(self._options)
        if isinstance(worker, InboxAware):
            worker.attach_inbox(self._inbox)
        self._channel = channel
        self._thread = threading.Thread(
            target=_run_worker,
            args=(worker, channel),
            name=self.config.thread_name,
        )
        self.state = BridgeState.RUNNING
        self._thread.start()
        logger.debug("worker thread started: %s", self._thread.name)

    def send(self, message: Message) -> None:
        self._require_started()
        self._inbox.put(message)

    def close(self) -> None:
        """Ask the worker to finish early; it decides whether to listen."""
        self._require_started()
        self._inbox.close()

    def poll(self, block: bool = False, timeout: Optional[float] = None) -> bool:
        """Run one drain step. Returns True while more polling is needed."""
        steps = self._dispatch(block, timeout)
        try:
            for result in steps:
                if inspect.isawaitable(result):
                    if inspect.iscoroutine(result):
                        result.close()
                    raise TypeError(
                        "async callbacks need Bridge.run() or poll_async()"
                    )
        finally:
            steps.close()
        return self._needs_polling()

    async def poll_async(self) -> bool:
        steps = self._dispatch(False, None)
        try:
            for result in steps:
                if inspect.isawaitable(result):
                    await result
        finally:
            steps.close()
        return self._needs_polling()

    async def run(self) -> BridgeState:
        """Drive the bridge on the running asyncio loop until it is terminal."""
        if self.state == BridgeState.IDLE:
            self.start()
        channel = self._channel
        if channel is None or not self._needs_polling():
            return self.state
        loop = asyncio.get_running_loop()
        wake = asyncio.Event()

        def _wakeup() -> None:
            try:
                loop.call_soon_threadsafe(wake.set)
            except RuntimeError:
                # consumer loop already closed; nothing left to wake
                return

        channel.set_wakeup(_wakeup)
        timeout = self.config.poll_interval or None
        try:
            while await self.poll_async():
                try:
                    await asyncio.wait_for(wake.wait(), timeout=timeout)
                except asyncio.TimeoutError:
                    pass
                wake.clear()
        except asyncio.CancelledError:
            logger.info("consumer cancelled; joining worker thread")
            self.shutdown()
            raise
        finally:
            channel.set_wakeup(None)
        return self.state

    def join(self, timeout: Optional[float] = None) -> bool:
        if self._thread is None:
            return True
        self._thread.join(timeout)
        return not self._thread.is_alive()

    def shutdown(self) -> None:
        """Join the worker thread and release the channel.

        Entries that were never delivered are dropped without callbacks.
        """
        if self._thread is None:
            return
        self._inbox.close()
        if self._thread.is_alive():
            logger.info("waiting for worker thread to exit: %s", self._thread.name)
        self._thread.join()
        self._release()

    async def aclose(self) -> None:
        if self._thread is None:
            return
        self._inbox.close()
        if self._thread.is_alive():
            loop = asyncio.get_running_loop()
            await loop.run_in_executor(None, self._thread.join)
        self.shutdown()

    def __enter__(self) -> "Bridge":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.shutdown()

    async def __aenter__(self) -> "Bridge":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()

    def _dispatch(
        self, block: bool, timeout: Optional[float]
    ) -> Iterator[MaybeAwaitable]:
        self._require_started()
        if not self._needs_polling():
            return
        if self._channel is None:
            return
        self.state = BridgeState.DRAINING
        if not self._backlog:
            self._backlog.extend(self._channel.drain(block=block, timeout=timeout))
        while self._backlog:
            entry = self._backlog.popleft()
            if isinstance(entry, Message):
                self.delivered_count += 1
                yield self._on_message(entry)
                continue
            self._terminal_observed = True
            self._backlog.clear()
            try:
                if isinstance(entry, Failed):
                    self.state = BridgeState.FAILED
                    self.error = entry.description
                    yield self._on_error(entry.description)
                else:
                    self.state = BridgeState.COMPLETED
                    yield self._on_complete()
            finally:
                self._finish()
            return

    def _finish(self) -> None:
        assert self._thread is not None
        self._thread.join()
        self._release()
        logger.debug(
            "bridge %s after %d messages", self.state.value, self.delivered_count
        )

    def _release(self) -> None:
        if self._released:
            return
        self._released = True
        self._backlog.clear()
        if self._channel is not None:
            dropped = self._channel.release()
            if dropped:
                logger.debug("dropped %d undelivered entries", dropped)
        self._channel = None

    def _needs_polling(self) -> bool:
        return not (self._terminal_observed or self._released)

    def _require_started(self) -> None:
        if self.state == BridgeState.IDLE:
            raise NotStarted("bridge has not been started")


def _run_worker(worker: Worker, channel: Channel) -> None:
    try:
        worker.run(channel)
    except BaseException as exc:
        logger.error("worker run raised: %s", type(worker).__name__, exc_info=True)
        if not channel.terminal_pushed:
            channel.push(Failed(describe_fault(exc)))
        return
    if not channel.terminal_pushed:
        logger.error("worker returned without a terminal signal: %s", type(worker).__name__)
        channel.push(Failed("worker exited without a terminal signal"))


def _noop_complete() -> None:
    return None


def _log_error(description: str) -> None:
    logger.error("worker failed: %s", description)
