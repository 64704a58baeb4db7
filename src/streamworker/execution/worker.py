from __future__ import annotations

import inspect
from typing import (
    Any,
    Callable,
    Iterable,
    Literal,
    Optional,
    Protocol,
    Tuple,
    Union,
    runtime_checkable,
)

from streamworker.utils.logging import get_logger

from ..channel.models import Completed, Failed, Message, Payload
from ..channel.protocols import EntrySink
from ..errors import ProtocolViolation
from .inbox import Inbox

logger = get_logger(__name__)

WorkerPhase = Literal["idle", "running", "completed", "failed"]
Emit = Callable[[str, Payload], None]
WorkItem = Union[Message, Tuple[str, Payload]]


@runtime_checkable
class Worker(Protocol):
    def run(self, channel: EntrySink) -> None: ...


@runtime_checkable
class InboxAware(Protocol):
    def attach_inbox(self, inbox: Inbox) -> None: ...


WorkerFactory = Callable[[Any], Worker]


def describe_fault(exc: BaseException) -> str:
    text = str(exc).strip()
    if text:
        return text
    return type(exc).__name__


class StreamingWorker:
    """Base class for workers that stream messages while they run.

    Subclasses implement ``execute`` and call ``emit(kind, payload)`` for each
    unit of progress. Returning from ``execute`` completes the worker; raising
    fails it with the exception text as description.
    """

    def __init__(self, options: Any = None) -> None:
        self.options = options
        self.inbox = Inbox()
        self.phase: WorkerPhase = "idle"
        self._channel: Optional[EntrySink] = None

    def attach_inbox(self, inbox: Inbox) -> None:
        self.inbox = inbox

    @property
    def closed(self) -> bool:
        return self.inbox.closed

    def execute(self, emit: Emit) -> None:
        raise NotImplementedError

    def run(self, channel: EntrySink) -> None:
        if self.phase != "idle":
            raise ProtocolViolation(f"worker already ran (phase={self.phase})")
        self._channel = channel
        self.phase = "running"
        try:
            self.execute(self.write)
        except Exception as exc:
            if self.phase != "running":
                logger.error(
                    "worker raised after its terminal signal: %s",
                    type(self).__name__,
                    exc_info=True,
                )
                return
            logger.error("worker failed: %s", type(self).__name__, exc_info=True)
            self._finish(Failed(describe_fault(exc)))
            return
        if self.phase == "running":
            self._finish(Completed())

    def write(self, kind: str, payload: Payload = "") -> None:
        self.write_message(Message(kind, payload))

    def write_message(self, message: Message) -> None:
        if self._channel is None or self.phase != "running":
            raise ProtocolViolation(f"write while worker is {self.phase}")
        self._channel.push(message)

    def fail(self, description: str) -> None:
        """End the run with an error without raising."""
        if self.phase != "running":
            raise ProtocolViolation(f"fail while worker is {self.phase}")
        self._finish(Failed(description))

    def _finish(self, entry: Union[Completed, Failed]) -> None:
        assert self._channel is not None
        self.phase = "completed" if isinstance(entry, Completed) else "failed"
        self._channel.push(entry)
        self._channel = None


class FunctionWorker(StreamingWorker):
    """Adapts a plain function or generator function into a worker.

    A generator function is called with no arguments and may yield
    ``Message`` instances or ``(kind, payload)`` pairs. Any other callable is
    called with ``emit``.
    """

    def __init__(
        self,
        fn: Union[Callable[[Emit], None], Callable[[], Iterable[WorkItem]]],
        options: Any = None,
    ) -> None:
        super().__init__(options)
        self._fn = fn

    def execute(self, emit: Emit) -> None:
        if inspect.isgeneratorfunction(self._fn):
            for item in self._fn():
                if isinstance(item, Message):
                    self.write_message(item)
                else:
                    kind, payload = item
                    emit(kind, payload)
            return
        self._fn(emit)


def function_worker_factory(
    fn: Union[Callable[[Emit], None], Callable[[], Iterable[WorkItem]]],
) -> WorkerFactory:
    def _factory(options: Any) -> Worker:
        return FunctionWorker(fn, options)

    return _factory
