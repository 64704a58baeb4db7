"""Background worker execution and consumer-side dispatch."""

from .bridge import Bridge, BridgeState
from .inbox import Inbox
from .loop import ConsumerLoop, LoopConfig, load_loop_config
from .router import KindRouter
from .stream import stream_messages
from .worker import (
    FunctionWorker,
    StreamingWorker,
    Worker,
    WorkerFactory,
    function_worker_factory,
)

__all__ = [
    "Bridge",
    "BridgeState",
    "Inbox",
    "ConsumerLoop",
    "LoopConfig",
    "load_loop_config",
    "KindRouter",
    "stream_messages",
    "FunctionWorker",
    "StreamingWorker",
    "Worker",
    "WorkerFactory",
    "function_worker_factory",
]
