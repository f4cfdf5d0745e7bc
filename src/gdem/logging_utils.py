"""Logging setup shared by the gdem CLI and library modules.

Library modules log through ``logging.getLogger(__name__)`` and attach the
raster being processed as ``extra={"raster": path}``; the formatters here
surface that context on the console and in JSON log files.
"""

from __future__ import annotations

import json
import logging
import sys
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

# Attributes every LogRecord carries; anything else arrived through ``extra=``.
_RECORD_FIELDS = frozenset(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

# GDAL environment chatter from rasterio is only shown from -vv upwards.
_NOISY_LOGGERS = ("rasterio",)


@dataclass(frozen=True)
class LogOptions:
    """Console and file logging switches collected from the command line."""

    verbose: int = 0
    quiet: bool = False
    log_file: Path | None = None
    json_console: bool = False

    @property
    def console_level(self) -> int:
        if self.quiet:
            return logging.WARNING
        return logging.DEBUG if self.verbose > 0 else logging.INFO


def _utc_now() -> str:
    return datetime.now(timezone.utc).isoformat(timespec="seconds").replace("+00:00", "Z")


def record_context(record: logging.LogRecord) -> dict[str, Any]:
    """Return the fields a caller passed through ``extra=``."""
    return {key: value for key, value in vars(record).items() if key not in _RECORD_FIELDS}


class JsonFormatter(logging.Formatter):
    """Render each record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": _utc_now(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = record_context(record)
        if context:
            entry["extra"] = context
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        # Paths and numpy scalars are not JSON types.
        return json.dumps(entry, default=str)


class HumanFormatter(logging.Formatter):
    """``LEVEL: message`` lines, prefixed with the raster file name if known."""

    def format(self, record: logging.LogRecord) -> str:
        text = super().format(record)
        raster = getattr(record, "raster", None)
        if not raster:
            return text
        return f"[{Path(str(raster)).name}] {text}"


def _attach(
    root: logging.Logger,
    handler: logging.Handler,
    level: int,
    formatter: logging.Formatter,
) -> None:
    handler.setLevel(level)
    handler.setFormatter(formatter)
    root.addHandler(handler)


def configure_logging(options: LogOptions) -> logging.Logger:
    """Replace the root logger's handlers according to ``options``.

    The console gets human-readable lines (or JSON with ``json_console``);
    ``log_file`` additionally receives every record as JSON lines.
    """
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(logging.DEBUG)

    console_formatter: logging.Formatter
    if options.json_console:
        console_formatter = JsonFormatter()
    else:
        console_formatter = HumanFormatter("%(levelname)s: %(message)s")
    _attach(root, logging.StreamHandler(sys.stderr), options.console_level, console_formatter)

    if options.log_file:
        options.log_file.parent.mkdir(parents=True, exist_ok=True)
        _attach(
            root,
            logging.FileHandler(options.log_file, encoding="utf-8"),
            logging.DEBUG,
            JsonFormatter(),
        )

    third_party_level = logging.NOTSET if options.verbose > 1 else logging.WARNING
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(third_party_level)

    return root
