"""
Log setup for tokenctl invocations.

Every command run gets its own trace_id so that resolver, orchestrator and
ledger lines belonging to one invocation can be grepped together. Records are
written to stderr only; stdout carries the command output.

Usage:
    from tokenops.logging_config import setup_logging, get_logger

    setup_logging(settings)
    logger = get_logger(__name__, trace_id="3f2a9c1b04de")
    logger.info("Token created", extra={"token_id": "0.0.1001"})
"""

import logging
import sys
from typing import Optional

from pythonjsonlogger import jsonlogger

from .config import Settings

MISSING_TRACE = "N/A"

JSON_FIELDS = "%(asctime)s %(name)s %(levelname)s %(message)s %(trace_id)s"
JSON_RENAMES = {"asctime": "timestamp", "name": "logger", "levelname": "level"}
TEXT_FORMAT = "%(asctime)s %(levelname)-7s %(name)s [%(trace_id)s] %(message)s"


class TraceIDFilter(logging.Filter):
    """Stamps records emitted outside a trace adapter with a placeholder trace_id."""

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "trace_id", None) is None:
            record.trace_id = MISSING_TRACE  # type: ignore
        return True


def _formatter(log_format: str) -> logging.Formatter:
    if log_format == "json":
        return jsonlogger.JsonFormatter(JSON_FIELDS, rename_fields=JSON_RENAMES)
    return logging.Formatter(TEXT_FORMAT, datefmt="%H:%M:%S")


def setup_logging(settings: Settings) -> None:
    """
    Point the root logger at a single stderr handler.

    Handlers installed by an earlier call are dropped, so calling this once
    per command invocation is safe.
    """
    level = logging.getLevelName(settings.log_level)
    if not isinstance(level, int):
        level = logging.WARNING

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.addFilter(TraceIDFilter())
    handler.setFormatter(_formatter(settings.log_format))

    root = logging.getLogger()
    for existing in list(root.handlers):
        root.removeHandler(existing)
    root.setLevel(level)
    root.addHandler(handler)


def get_logger(name: str, trace_id: Optional[str] = None) -> logging.LoggerAdapter:
    """Logger adapter that tags every record with the invocation's trace_id."""
    return logging.LoggerAdapter(logging.getLogger(name), {"trace_id": trace_id or MISSING_TRACE})
