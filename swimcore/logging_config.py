"""One-line JSON logs for the generator service.

Call sites attach structured fields as ``extra={"ctx_<name>": value}``; the
formatter strips the prefix and nests them under ``context``. The request id
set by ``api.observability.RequestIdFilter`` is promoted to a top-level field so
every line of one request can be grepped together.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional, TextIO

SERVICE_NAME = "swimgen"
CONTEXT_PREFIX = "ctx_"
QUIET_LOGGERS = ("uvicorn.access", "slowapi")


class JSONFormatter(logging.Formatter):
    def __init__(self, service: str = SERVICE_NAME):
        super().__init__()
        self.service = service

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "service": self.service,
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "where": f"{record.module}.{record.funcName}:{record.lineno}",
        }
        request_id = getattr(record, "request_id", None)
        if request_id:
            entry["request_id"] = request_id
        context = _context_fields(record)
        if context:
            entry["context"] = context
        if record.exc_info and record.exc_info[1]:
            exc = record.exc_info[1]
            entry["exception"] = {"type": type(exc).__name__, "message": str(exc)}
        return json.dumps(entry, default=str)


def _context_fields(record: logging.LogRecord) -> dict:
    return {
        key[len(CONTEXT_PREFIX):]: value
        for key, value in record.__dict__.items()
        if key.startswith(CONTEXT_PREFIX)
    }


def setup_logging(level: str = "INFO", stream: Optional[TextIO] = None) -> None:
    """Install the JSON handler on the root logger once; later calls are no-ops."""
    root = logging.getLogger()
    if root.handlers:
        return

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JSONFormatter())
    root.addHandler(handler)
    root.setLevel(getattr(logging, level.upper(), logging.INFO))

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)
