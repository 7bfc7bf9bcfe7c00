"""
fleet_console.observability.logging

Structured logging setup shared by the console and the record-store service.

Responsibilities:
- Configure `structlog` once per process (JSON for services, key/value for local runs).
- Hand out bound loggers to console components and API routers.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog


def configure_logging(*, service_name: str, level: str, json: bool = True) -> None:
    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=getattr(logging, level.upper(), logging.INFO),
    )

    renderer: Any = (
        structlog.processors.JSONRenderer() if json else structlog.dev.ConsoleRenderer(colors=False)
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            _service_field(service_name),
            structlog.processors.dict_tracebacks,
            renderer,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )


def _service_field(service_name: str):
    def processor(_: Any, __: str, event_dict: dict[str, Any]) -> dict[str, Any]:
        event_dict.setdefault("service", service_name)
        return event_dict

    return processor


def get_logger(name: str, **initial: Any) -> structlog.stdlib.BoundLogger:
    log = structlog.get_logger(name)
    return log.bind(**initial) if initial else log


# --- Module Notes -----------------------------------------------------------
# Console components call `get_logger(__name__)` at import time; configuration may
# happen later since structlog resolves processors lazily on first use.
