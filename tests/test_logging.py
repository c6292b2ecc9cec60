"""Logging configuration tests."""

import logging

from setlist.logging import QUIET_LOGGERS, build_log_config, get_uvicorn_log_config, setup_logging


def test_app_config_has_no_uvicorn_loggers():
    config = build_log_config("INFO")

    assert config["root"]["level"] == "INFO"
    assert "uvicorn.access" not in config["loggers"]
    assert config["handlers"]["default"]["filters"] == ["request_context"]


def test_uvicorn_config_extends_app_config():
    config = get_uvicorn_log_config()

    assert config["loggers"]["uvicorn.access"]["handlers"] == ["access"]
    assert config["loggers"]["uvicorn.error"]["handlers"] == ["default"]
    for name in QUIET_LOGGERS:
        assert config["loggers"][name]["level"] == "WARNING"


def test_setup_logging_applies_level():
    root = logging.getLogger()
    previous_level, previous_handlers = root.level, root.handlers[:]
    try:
        setup_logging("DEBUG")
        assert root.level == logging.DEBUG
        assert logging.getLogger("httpx").level == logging.WARNING
    finally:
        root.handlers[:] = previous_handlers
        root.setLevel(previous_level)
