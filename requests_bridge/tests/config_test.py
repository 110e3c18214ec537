# requests_bridge/tests/config_test.py
import json
import logging

import pytest

from requests_bridge.config import Settings
from requests_bridge.telemetry import configure_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    bridge = logging.getLogger("requests_bridge")
    handlers, level, bridge_level = list(root.handlers), root.level, bridge.level
    yield
    bridge.setLevel(bridge_level)
    for h in list(root.handlers):
        root.removeHandler(h)
    for h in handlers:
        root.addHandler(h)
    root.setLevel(level)


def test_settings_defaults(monkeypatch):
    for key in ("APP_NAME", "PORT", "LOG_LEVEL", "DEBUG"):
        monkeypatch.delenv(key, raising=False)
    s = Settings(_env_file=None)
    assert s.APP_NAME == "Requests Bridge"
    assert s.PORT == 8097
    assert s.LOG_LEVEL == "INFO"
    assert s.DEBUG is False


def test_settings_from_env(monkeypatch):
    monkeypatch.setenv("PORT", "9100")
    monkeypatch.setenv("LOG_LEVEL", "DEBUG")
    s = Settings(_env_file=None)
    assert s.PORT == 9100
    assert s.LOG_LEVEL == "DEBUG"


def test_json_logging(capsys, restore_root_logger):
    logger = configure_logging("INFO")
    logging.getLogger("requests_bridge.patcher").info("Script tag inserted into %s", "/tmp/index.html")

    line = capsys.readouterr().err.strip().splitlines()[-1]
    record = json.loads(line)
    assert logger.name == "requests_bridge"
    assert record["message"] == "Script tag inserted into /tmp/index.html"
    assert record["level"] == "INFO"
    assert record["logger"] == "requests_bridge.patcher"


def test_debug_flag_forces_debug_level(restore_root_logger):
    logger = configure_logging("WARNING", debug=True)
    assert logger.level == logging.DEBUG
    assert logging.getLogger().level == logging.DEBUG
