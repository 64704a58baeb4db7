"""Stream results from a background worker thread into a single consumer loop."""

from .channel import Channel, Completed, Failed, Message
from .config import BridgeConfig, load_bridge_config
from .errors import (
    AlreadyStarted,
    NotStarted,
    ProtocolViolation,
    StreamWorkerError,
    WorkerFault,
)
from .execution import (
    Bridge,
    BridgeState,
    ConsumerLoop,
    FunctionWorker,
    Inbox,
    KindRouter,
    LoopConfig,
    StreamingWorker,
    function_worker_factory,
    stream_messages,
)

__all__ = [
    "Channel",
    "Completed",
    "Failed",
    "Message",
    "BridgeConfig",
    "load_bridge_config",
    "AlreadyStarted",
    "NotStarted",
    "ProtocolViolation",
    "StreamWorkerError",
    "WorkerFault",
    "Bridge",
    "BridgeState",
    "ConsumerLoop",
    "FunctionWorker",
    "Inbox",
    "KindRouter",
    "LoopConfig",
    "StreamingWorker",
    "function_worker_factory",
    "stream_messages",
]
