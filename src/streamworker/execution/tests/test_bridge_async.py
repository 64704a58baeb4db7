import asyncio
import threading

import pytest

from streamworker.config import BridgeConfig
from streamworker.execution.bridge import Bridge, BridgeState
from streamworker.execution.worker import StreamingWorker, function_worker_factory


class IntegerWorker(StreamingWorker):
    def execute(self, emit) -> None:
        for i in range(self.options["count"]):
            emit("integer", str(i))


class BlockUntilClosedWorker(StreamingWorker):
    def execute(self, emit) -> None:
        emit("started", "")
        self.inbox.wait_closed()


def test_run_starts_and_delivers_everything():
    payloads = []
    done = []
    bridge = Bridge(
        IntegerWorker,
        on_message=lambda message: payloads.append(message.payload),
        on_complete=lambda: done.append(True),
        options={"count": 100},
    )
    state = asyncio.run(bridge.run())
    assert state == BridgeState.COMPLETED
    assert payloads == [str(i) for i in range(100)]
    assert done == [True]
    assert not bridge.is_alive()


def test_run_awaits_async_callbacks():
    events = []

    async def _on_message(message):
        await asyncio.sleep(0)
        events.append(message.payload)

    async def _on_error(description):
        events.append(f"error:{description}")

    def _work(emit):
        emit("integer", "1")
        raise RuntimeError("disk full")

    bridge = Bridge(
        function_worker_factory(_work),
        on_message=_on_message,
        on_error=_on_error,
    )
    state = asyncio.run(bridge.run())
    assert state == BridgeState.FAILED
    assert events == ["1", "error:disk full"]


def test_run_without_poll_interval_relies_on_wakeups():
    release = threading.Event()
    payloads = []

    def _work(emit):
        release.wait(5)
        for i in range(3):
            emit("integer", str(i))

    bridge = Bridge(
        function_worker_factory(_work),
        on_message=lambda message: payloads.append(message.payload),
        config=BridgeConfig(poll_interval=0),
    )

    async def _main():
        task = asyncio.create_task(bridge.run())
        await asyncio.sleep(0.05)
        assert not task.done()
        release.set()
        return await asyncio.wait_for(task, timeout=5)

    assert asyncio.run(_main()) == BridgeState.COMPLETED
    assert payloads == ["0", "1", "2"]


def test_consumer_does_other_work_while_worker_runs():
    release = threading.Event()
    ticks = []

    def _work(emit):
        release.wait(5)
        emit("integer", "0")

    bridge = Bridge(function_worker_factory(_work), on_message=lambda message: None)

    async def _ticker():
        for i in range(3):
            ticks.append(i)
            await asyncio.sleep(0.01)
        release.set()

    async def _main():
        await asyncio.gather(bridge.run(), _ticker())

    asyncio.run(_main())
    assert ticks == [0, 1, 2]
    assert bridge.state == BridgeState.COMPLETED


def test_cancelled_consumer_still_joins_worker():
    seen = []
    bridge = Bridge(
        BlockUntilClosedWorker,
        on_message=lambda message: seen.append(message.kind),
    )

    async def _main():
        task = asyncio.create_task(bridge.run())
        while not seen:
            await asyncio.sleep(0.01)
        task.cancel()
        with pytest.raises(asyncio.CancelledError):
            await task

    asyncio.run(_main())
    assert seen == ["started"]
    assert not bridge.is_alive()
    assert bridge.channel is None
    assert bridge.state == BridgeState.DRAINING


def test_async_context_manager_joins_worker():
    async def _main():
        async with Bridge(
            IntegerWorker, on_message=lambda message: None, options={"count": 5000}
        ) as bridge:
            bridge.start()
        return bridge

    bridge = asyncio.run(_main())
    assert not bridge.is_alive()
    assert bridge.delivered_count == 0
