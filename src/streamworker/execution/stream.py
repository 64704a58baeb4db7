from __future__ import annotations

import asyncio
import contextlib
from typing import Any, AsyncIterator, List, Optional, Union

from ..channel.models import Message
from ..config import BridgeConfig
from ..errors import WorkerFault
from .bridge import Bridge
from .worker import WorkerFactory

_END = object()


async def stream_messages(
    worker_factory: WorkerFactory,
    options: Any = None,
    config: Optional[BridgeConfig] = None,
) -> AsyncIterator[Message]:
    """Yield a worker's messages in order as an async iterator.

    Raises WorkerFault after the last message if the worker failed. Leaving the
    loop early still joins the worker thread.
    """
    queue: "asyncio.Queue[Union[Message, object]]" = asyncio.Queue()
    failures: List[str] = []

    def _on_complete() -> None:
        queue.put_nowait(_END)

    def _on_error(description: str) -> None:
        failures.append(description)
        queue.put_nowait(_END)

    bridge = Bridge(
        worker_factory,
        on_message=queue.put_nowait,
        on_complete=_on_complete,
        on_error=_on_error,
        options=options,
        config=config,
    )
    bridge.start()
    task = asyncio.create_task(bridge.run())
    try:
        while True:
            item = await queue.get()
            if item is _END:
                break
            assert isinstance(item, Message)
            yield item
        await task
        if failures:
            raise WorkerFault(failures[0])
    finally:
        await bridge.aclose()
        if not task.done():
            task.cancel()
            with contextlib.suppress(asyncio.CancelledError):
                await task
