import logging
from pathlib import Path

import pytest
from rich.logging import RichHandler

from streamworker.config import BridgeConfig, load_bridge_config
from streamworker.utils import logging as sw_logging


@pytest.fixture
def clean_env(monkeypatch):
    for key in (
        "STREAMWORKER_POLL_INTERVAL",
        "STREAMWORKER_DEPTH_WARNING",
        "STREAMWORKER_THREAD_NAME",
    ):
        monkeypatch.delenv(key, raising=False)
    return monkeypatch


def test_defaults_when_env_is_empty(clean_env):
    config = load_bridge_config()
    assert config == BridgeConfig()


def test_env_overrides(clean_env):
    clean_env.setenv("STREAMWORKER_POLL_INTERVAL", "0.25")
    clean_env.setenv("STREAMWORKER_DEPTH_WARNING", "500")
    clean_env.setenv("STREAMWORKER_THREAD_NAME", "render-worker")
    config = load_bridge_config()
    assert config.poll_interval == 0.25
    assert config.depth_warning_threshold == 500
    assert config.thread_name == "render-worker"


def test_invalid_env_values_raise(clean_env):
    clean_env.setenv("STREAMWORKER_DEPTH_WARNING", "lots")
    with pytest.raises(ValueError):
        load_bridge_config()


def test_negative_poll_interval_rejected():
    with pytest.raises(ValueError):
        BridgeConfig(poll_interval=-1)


def test_default_log_path_follows_env(monkeypatch, tmp_path):
    monkeypatch.delenv("STREAMWORKER_LOG_PATH", raising=False)
    monkeypatch.setenv("STREAMWORKER_LOG_DIR", str(tmp_path))
    assert sw_logging._default_log_path() == tmp_path / "streamworker.log"
    monkeypatch.setenv("STREAMWORKER_LOG_PATH", str(tmp_path / "custom.log"))
    assert sw_logging._default_log_path() == tmp_path / "custom.log"
    monkeypatch.delenv("STREAMWORKER_LOG_PATH")
    monkeypatch.delenv("STREAMWORKER_LOG_DIR")
    assert sw_logging._default_log_path() == Path("logs") / "streamworker.log"


def test_get_logger_is_namespaced():
    logger = sw_logging.get_logger("streamworker.tests")
    assert logger.name == "streamworker.tests"


def test_console_records_carry_thread_name():
    sw_logging.get_logger("streamworker.tests")
    handlers = [
        handler
        for handler in logging.getLogger("streamworker").handlers
        if isinstance(handler, RichHandler)
    ]
    assert handlers
    record = logging.makeLogRecord(
        {"name": "streamworker.tests", "msg": "hello", "threadName": "ingest-worker"}
    )
    assert handlers[0].formatter.format(record) == "[ingest-worker] streamworker.tests: hello"
