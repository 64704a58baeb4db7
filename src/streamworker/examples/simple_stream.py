from __future__ import annotations

import asyncio
import sys

from streamworker import Bridge, KindRouter, StreamingWorker, load_bridge_config


class IntegerWorker(StreamingWorker):
    def execute(self, emit) -> None:
        count = int((self.options or {}).get("count", 100))
        for i in range(count):
            if self.closed:
                return
            emit("integer", str(i))


def _write_line(payload) -> None:
    sys.stdout.write(f"{payload}\n")
    sys.stdout.flush()


async def main() -> None:
    router = KindRouter().on("integer", _write_line)
    bridge = Bridge(
        IntegerWorker,
        on_message=router,
        on_complete=lambda: _write_line("done"),
        on_error=lambda description: _write_line(f"error: {description}"),
        options={"count": 100},
        config=load_bridge_config(),
    )
    async with bridge:
        await bridge.run()


if __name__ == "__main__":
    asyncio.run(main())
