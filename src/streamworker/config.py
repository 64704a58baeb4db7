from __future__ import annotations

import os
from dataclasses import dataclass

from dotenv import load_dotenv


@dataclass(frozen=True)
class BridgeConfig:
    poll_interval: float = 0.05
    depth_warning_threshold: int = 10000
    thread_name: str = "streamworker"

    def __post_init__(self) -> None:
        if self.poll_interval < 0:
            raise ValueError("poll_interval must be >= 0")
        if self.depth_warning_threshold < 0:
            raise ValueError("depth_warning_threshold must be >= 0")


def load_bridge_config() -> BridgeConfig:
    load_dotenv()
    defaults = BridgeConfig()
    poll_interval = _env_float("STREAMWORKER_POLL_INTERVAL", defaults.poll_interval)
    threshold = _env_int(
        "STREAMWORKER_DEPTH_WARNING", defaults.depth_warning_threshold
    )
    thread_name = os.environ.get("STREAMWORKER_THREAD_NAME") or defaults.thread_name
    return BridgeConfig(
        poll_interval=poll_interval,
        depth_warning_threshold=threshold,
        thread_name=thread_name,
    )


def _env_float(key: str, default: float) -> float:
    raw = os.environ.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return float(raw)
    except ValueError as exc:
        raise ValueError(f"{key} must be a number, got {raw!r}") from exc


def _env_int(key: str, default: int) -> int:
    raw = os.environ.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{key} must be an integer, got {raw!r}") from exc
