"""Logging setup for the CLI and HTTP surfaces.

Library modules only create ``logging.getLogger(__name__)`` loggers; handlers
are attached here, once, on the ``scoutlens`` parent logger.
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any, Dict, Optional, TextIO

ROOT_LOGGER = "scoutlens"
LOG_FORMATS = ("text", "json")

_TEXT_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class JsonFormatter(logging.Formatter):
    """Render each record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .replace(microsecond=0)
            .isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "event": record.getMessage(),
        }
        if record.exc_info:
            payload["exc"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


def _resolve_level(level: Any) -> int:
    if isinstance(level, int):
        return level
    resolved = logging.getLevelName(str(level).strip().upper())
    return resolved if isinstance(resolved, int) else logging.INFO


def configure_logging(
    level: Any = "INFO",
    fmt: str = "text",
    *,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """Attach a single stdout handler to the ``scoutlens`` logger.

    Calling this again swaps the formatter and level of the existing handler
    instead of stacking a second one. Unknown ``fmt`` values fall back to
    ``text``.
    """

    fmt = (fmt or "text").strip().lower()
    if fmt not in LOG_FORMATS:
        fmt = "text"

    logger = logging.getLogger(ROOT_LOGGER)
    handler = next((h for h in logger.handlers if getattr(h, "_scoutlens", False)), None)
    if handler is None:
        handler = logging.StreamHandler(stream or sys.stdout)
        handler._scoutlens = True  # type: ignore[attr-defined]
        logger.addHandler(handler)
    elif stream is not None:
        handler.setStream(stream)  # type: ignore[attr-defined]

    handler.setFormatter(JsonFormatter() if fmt == "json" else logging.Formatter(_TEXT_FORMAT))
    logger.setLevel(_resolve_level(level))
    logger.propagate = False
    return logger
