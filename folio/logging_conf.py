# folio/logging_conf.py
from __future__ import annotations

import json
import logging
import os
from logging.config import dictConfig
from typing import Any


class JsonFormatter(logging.Formatter):
    """One JSON object per log line on stdout."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "time": self.formatTime(record, datefmt="%Y-%m-%dT%H:%M:%S%z"),
        }
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        for extra_key in ("module", "funcName", "threadName"):
            val = getattr(record, extra_key, None)
            if val:
                payload[extra_key] = val
        return json.dumps(payload, ensure_ascii=False)


def _json_logger(level: str) -> dict[str, Any]:
    return {"level": level, "handlers": ["console"], "propagate": False}


def setup_logging(level: str | None = None) -> None:
    """JSON logging for folio, uvicorn and apscheduler; our middleware replaces access logs."""
    log_level = (level or os.getenv("LOG_LEVEL", "INFO")).upper()

    dict_config: dict[str, Any] = {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "json": {"()": JsonFormatter},
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "json",
                "stream": "ext://sys.stdout",
            },
        },
        "root": {"level": log_level, "handlers": ["console"]},
        "loggers": {
            "uvicorn": _json_logger(log_level),
            "uvicorn.error": _json_logger(log_level),
            "uvicorn.access": _json_logger("WARNING"),
            "fastapi": _json_logger(log_level),
            # job-added/job-executed chatter every sweep
            "apscheduler": _json_logger("WARNING"),
            "folio": _json_logger(log_level),
            # per-request lines from observability.timing_middleware
            "request": _json_logger(log_level),
        },
    }

    dictConfig(dict_config)
