"""
Centralized logging configuration with request_id context support using loguru.

This module configures loguru to intercept all standard logging calls and
propagates the current request_id through contextvars, so every log line
emitted while handling a request (including fire-and-forget mail dispatches
started by it) carries the same id.
"""

import json
import logging
import sys
import traceback
from contextvars import ContextVar
from types import FrameType
from typing import Optional

from loguru import logger

from portfolio_api.core.config import settings

# Async-safe: every request and every task spawned from it sees its own value
request_id_var: ContextVar[str] = ContextVar("request_id", default="-")


class InterceptHandler(logging.Handler):
    """
    Handler that intercepts standard logging calls and redirects them to loguru.

    Modules keep using logging.getLogger(__name__); third-party libraries
    (uvicorn, aiosmtplib, httpx) are routed through the same sink.
    """

    def emit(self, record: logging.LogRecord):
        """Intercept standard logging record and pass to loguru."""
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller from where the logging call originated
        frame: Optional[FrameType] = sys._getframe(settings.LOGGING_FRAME_DEPTH)
        depth: int = settings.LOGGING_FRAME_DEPTH

        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(
            level, record.getMessage()
        )


def context_filter(record):
    """Add request_id from contextvars to the loguru record."""
    request_id = request_id_var.get()
    if request_id and request_id != "-":
        record["extra"]["request_id"] = request_id

    return record


def build_simplified_json_record(record):
    """
    Build a simplified JSON log record from a loguru record.

    Only includes: timestamp, level, logger name, message, request_id (if
    present) and exception (if present).
    """
    log_record = {
        "timestamp": record["time"].strftime("%Y-%m-%d %H:%M:%S"),
        "level": record["level"].name,
        "logger": record["name"],
        "message": record["message"],
    }

    if "request_id" in record["extra"]:
        log_record["request_id"] = record["extra"]["request_id"]

    if record["exception"]:
        traceback_text = None
        if record["exception"].traceback:
            try:
                traceback_text = "".join(
                    traceback.format_exception(
                        record["exception"].type,
                        record["exception"].value,
                        record["exception"].traceback,
                    )
                ).strip()
            except Exception:
                traceback_text = str(record["exception"].traceback)

        log_record["exception"] = {
            "type": (
                record["exception"].type.__name__ if record["exception"].type else None
            ),
            "value": (
                str(record["exception"].value) if record["exception"].value else None
            ),
            "traceback": traceback_text,
        }
    else:
        log_record["exception"] = None

    return log_record


def custom_json_sink(message):
    """Sink that writes each record to stderr as one line of JSON."""
    record = message.record
    log_record = build_simplified_json_record(record)
    sys.stderr.write(json.dumps(log_record) + "\n")


def configure_logging():
    """
    Configure logging for the application using loguru.

    1. Removes the default loguru handler
    2. Adds the JSON sink filtered through context_filter
    3. Intercepts all standard logging calls
    4. Quiets verbose libraries
    """
    logger.remove()

    logger.add(
        custom_json_sink,
        level=settings.LOG_LEVEL,
        backtrace=True,
        diagnose=not settings.is_production,
        filter=context_filter,
    )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)

    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("aiosmtplib").setLevel(logging.WARNING)
    logging.getLogger("httpx").setLevel(logging.WARNING)

    logger.info("Logging configured successfully with loguru")


def set_request_id(request_id: str):
    """
    Set the request_id for the current context.

    Called at the beginning of each request by RequestIDMiddleware.
    """
    request_id_var.set(request_id)


def clear_request_id():
    """Clear the request_id from the current context."""
    request_id_var.set("-")


def get_request_id() -> str:
    """Get the current request_id from context."""
    return request_id_var.get()
