from __future__ import annotations

import logging
import os
import sys
import json
import time
from typing import Optional


class JsonFormatter(logging.Formatter):
    """
    One JSON object per record:
      { "t": 169, "lvl": "INFO", "name": "tilestitch.pipeline", "msg": "Zoom Level: 14", "extra": {...} }
    """

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        payload = {
            "t": int(time.time() * 1000),
            "lvl": record.levelname,
            "name": record.name,
            "msg": record.getMessage(),
        }
        # Structured fields passed as extra={"extra": {...}}
        if isinstance(getattr(record, "extra", None), dict):
            payload["extra"] = record.extra  # type: ignore[attr-defined]
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False)


class DiagnosticFormatter(logging.Formatter):
    """Terse text lines: '==Zoom Level: 14' for INFO, 'ERROR: ...' otherwise."""

    def format(self, record: logging.LogRecord) -> str:  # type: ignore[override]
        msg = record.getMessage()
        if record.levelno == logging.INFO:
            line = f"=={msg}"
        else:
            line = f"{record.levelname}: {msg}"
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


_FORMATTERS = {"json": JsonFormatter, "text": DiagnosticFormatter}


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None, *, force: bool = False) -> None:
    """
    Configure the root logger on stderr (stdout may carry the PNG).

    Level precedence: `level` arg, env LOG_LEVEL, INFO.
    Format precedence: `fmt` arg, env LOG_FORMAT ("json" | "text"), json.
    Idempotent unless `force=True`, which the CLI uses to apply its flags.
    """
    root = logging.getLogger()
    if getattr(root, "_tilestitch_configured", False) and not force:
        return

    lvl_name = (level or os.environ.get("LOG_LEVEL") or "INFO").upper()
    lvl = logging.getLevelName(lvl_name)
    if not isinstance(lvl, int):
        lvl = logging.INFO

    fmt_name = (fmt or os.environ.get("LOG_FORMAT") or "json").lower()
    formatter_cls = _FORMATTERS.get(fmt_name, JsonFormatter)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(formatter_cls())

    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(lvl)
    root._tilestitch_configured = True  # type: ignore[attr-defined]


def get_logger(name: str) -> logging.Logger:
    """Get a module logger; ensures root is configured."""
    setup_logging()
    return logging.getLogger(name)
