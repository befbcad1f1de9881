import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from task_api.config import Settings

# Attributes every LogRecord carries; anything else arrived through ``extra``.
_RECORD_ATTRIBUTES = set(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__.keys()
) | {"message", "asctime"}


def record_fields(record: logging.LogRecord) -> dict[str, Any]:
    return {
        key: value
        for key, value in record.__dict__.items()
        if key not in _RECORD_ATTRIBUTES
    }


class ConsoleFormatter(logging.Formatter):
    """Readable single line with structured fields appended as JSON."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        fields = record_fields(record)
        if fields:
            line = f"{line} {json.dumps(fields, default=str)}"
        return line


class JSONFormatter(logging.Formatter):
    """One JSON object per line: timestamp, level, logger, message and extras."""

    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc)
            .isoformat()
            .replace("+00:00", "Z"),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
            **record_fields(record),
        }
        if record.exc_info:
            entry["stack"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(settings: Settings) -> None:
    """
    Configure the root logger with:
    - a console handler for humans
    - error.log receiving ERROR and above as JSON lines
    - combined.log receiving everything as JSON lines

    Call once at startup. Calling again replaces the handlers.
    """
    root = logging.getLogger()
    root.setLevel(settings.LOG_LEVEL)

    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    console_handler = logging.StreamHandler(sys.stderr)
    console_handler.setFormatter(ConsoleFormatter())
    root.addHandler(console_handler)

    if not settings.LOG_FILES_ENABLED:
        return

    log_dir = Path(settings.LOG_DIR)
    log_dir.mkdir(parents=True, exist_ok=True)

    error_handler = logging.FileHandler(log_dir / "error.log", encoding="utf-8")
    error_handler.setLevel(logging.ERROR)
    error_handler.setFormatter(JSONFormatter())
    root.addHandler(error_handler)

    combined_handler = logging.FileHandler(log_dir / "combined.log", encoding="utf-8")
    combined_handler.setFormatter(JSONFormatter())
    root.addHandler(combined_handler)
