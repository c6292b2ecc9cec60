"""Logging configuration.

The API server, the worker and the CLI share one dictConfig. Development
logs are terse; elsewhere each line carries a timestamp and the request id
so auth failures can be matched to the request that caused them.
"""

import logging
import logging.config
from typing import Any

from setlist.config import settings

DEV_FORMAT = "%(levelname)s:     %(name)s - %(message)s"
PROD_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - [%(request_id)s] %(message)s"

# Third-party loggers that are chatty at INFO
QUIET_LOGGERS = ("httpx", "httpcore", "aiosqlite", "saq")


def build_log_config(level: str | None = None, *, uvicorn: bool = False) -> dict[str, Any]:
    """dictConfig for the application, optionally with uvicorn's formatters."""
    level = level or settings.log_level
    is_dev = settings.is_development

    config: dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "filters": {
            "request_context": {"()": "setlist.api.middleware.RequestContextFilter"},
        },
        "formatters": {
            "default": {"format": DEV_FORMAT if is_dev else PROD_FORMAT},
        },
        "handlers": {
            "default": {
                "class": "logging.StreamHandler",
                "formatter": "default",
                "filters": ["request_context"],
                "stream": "ext://sys.stdout",
            },
        },
        "loggers": {name: {"level": "WARNING"} for name in QUIET_LOGGERS},
        "root": {"handlers": ["default"], "level": level},
    }

    if uvicorn:
        config["formatters"]["access"] = {
            "()": "uvicorn.logging.AccessFormatter",
            "fmt": '%(levelprefix)s "%(request_line)s" %(status_code)s'
            if is_dev
            else '%(levelprefix)s %(client_addr)s - "%(request_line)s" %(status_code)s',
        }
        config["handlers"]["access"] = {
            "class": "logging.StreamHandler",
            "formatter": "access",
            "stream": "ext://sys.stdout",
        }
        config["loggers"]["uvicorn.access"] = {"handlers": ["access"], "level": "INFO", "propagate": False}
        config["loggers"]["uvicorn.error"] = {"handlers": ["default"], "level": "INFO", "propagate": False}

    return config


def get_uvicorn_log_config() -> dict[str, Any]:
    return build_log_config(uvicorn=True)


def setup_logging(level: str | None = None) -> None:
    """Apply the shared config outside uvicorn (worker, CLI)."""
    logging.config.dictConfig(build_log_config(level))
