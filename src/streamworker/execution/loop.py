from __future__ import annotations

import asyncio
from dataclasses import dataclass
from typing import List, Optional

from streamworker.utils.logging import get_logger

from ..config import BridgeConfig, load_bridge_config
from .bridge import Bridge, BridgeState

logger = get_logger(__name__)


@dataclass
class LoopConfig:
    poll_interval: float = 0.05

    @classmethod
    def from_bridge_config(cls, config: BridgeConfig) -> "LoopConfig":
        return cls(poll_interval=config.poll_interval)


def load_loop_config() -> LoopConfig:
    """Loop settings from the same STREAMWORKER_POLL_INTERVAL the bridges read."""
    return LoopConfig.from_bridge_config(load_bridge_config())


class ConsumerLoop:
    """Single asyncio consumer hosting any number of independent bridges."""

    def __init__(self, config: Optional[LoopConfig] = None) -> None:
        self.config = config or LoopConfig()
        self._bridges: List[Bridge] = []
        self._stop = asyncio.Event()

    @property
    def bridges(self) -> List[Bridge]:
        return list(self._bridges)

    def add(self, bridge: Bridge) -> Bridge:
        if bridge.state == BridgeState.IDLE:
            bridge.start()
        self._bridges.append(bridge)
        return bridge

    async def run_once(self) -> None:
        for bridge in list(self._bridges):
            try:
                live = await bridge.poll_async()
            except asyncio.CancelledError:
                raise
            except Exception:
                logger.error("consumer callback failed; shutting bridge down", exc_info=True)
                await bridge.aclose()
                live = False
            if not live:
                self._bridges.remove(bridge)

    async def run_forever(self) -> None:
        try:
            while not self._stop.is_set():
                await self.run_once()
                await asyncio.sleep(self.config.poll_interval)
        finally:
            await self._shutdown_all()

    async def run_until_complete(self) -> None:
        try:
            while self._bridges and not self._stop.is_set():
                await self.run_once()
                if self._bridges:
                    await asyncio.sleep(self.config.poll_interval)
        finally:
            await self._shutdown_all()

    def stop(self) -> None:
        self._stop.set()

    async def _shutdown_all(self) -> None:
        remaining = list(self._bridges)
        self._bridges = []
        for bridge in remaining:
            await bridge.aclose()
