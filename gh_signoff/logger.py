"""
Structured logging for gh-signoff.

Records are single-line JSON objects, written to the log file by default so
that normal command output stays clean:

    {"timestamp": "...Z", "level": "error", "message": "Signoff failed",
     "command": "create", "sha": "...", "context": "signoff/macos"}
"""
import json
import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Iterable, Optional, TextIO

from . import __version__

LEVELS = {
    "debug": 10,
    "info": 20,
    "warning": 30,
    "error": 40,
}


class Handler:
    """Base handler for emitting log records."""

    def emit(self, record: dict) -> None:
        raise NotImplementedError


class StreamHandler(Handler):
    """Writes records to a text stream (stdout or stderr)."""

    def __init__(self, stream: Optional[TextIO] = None):
        self.stream = stream or sys.stderr

    def emit(self, record: dict) -> None:
        try:
            self.stream.write(json.dumps(record) + "\n")
            self.stream.flush()
        except (OSError, ValueError):
            # Logging never fails a command
            pass


class FileHandler(Handler):
    """Appends records to a file, creating its directory on first write."""

    def __init__(self, path: Path):
        self.path = path

    def emit(self, record: dict) -> None:
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with self.path.open("a", encoding="utf-8") as f:
                f.write(json.dumps(record) + "\n")
        except OSError:
            pass


class JsonLogger:
    """Level-filtered JSON logger; ``bind`` returns a copy with more context."""

    def __init__(self, level: str = "error", handlers: Optional[Iterable[Handler]] = None,
                 context: Optional[dict] = None) -> None:
        self.level_name = level.lower()
        self.level = LEVELS.get(self.level_name, LEVELS["error"])
        self.handlers = list(handlers or [])
        self.context = dict(context or {})

    def bind(self, **context: object) -> "JsonLogger":
        merged = dict(self.context)
        merged.update({k: v for k, v in context.items() if v is not None})
        return JsonLogger(self.level_name, self.handlers, merged)

    def is_enabled_for(self, level: str) -> bool:
        return LEVELS.get(level, 0) >= self.level

    def debug(self, message: str, **fields: object) -> None:
        self._log("debug", message, fields)

    def info(self, message: str, **fields: object) -> None:
        self._log("info", message, fields)

    def warning(self, message: str, **fields: object) -> None:
        self._log("warning", message, fields)

    def error(self, message: str, **fields: object) -> None:
        self._log("error", message, fields)

    def _log(self, level: str, message: str, fields: dict) -> None:
        if not self.handlers or not self.is_enabled_for(level):
            return

        timestamp = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
        record = {
            "timestamp": timestamp.replace("+00:00", "Z"),
            "level": level,
            "message": message,
            "version": __version__,
        }
        record.update(self.context)
        record.update({k: v for k, v in fields.items() if v is not None})

        for handler in self.handlers:
            handler.emit(record)


def _handler_for(destination: str, logging_config: dict) -> Optional[Handler]:
    dest = (destination or "").lower().strip()
    if dest == "stdout":
        return StreamHandler(sys.stdout)
    if dest == "stderr":
        return StreamHandler(sys.stderr)
    if dest == "file":
        default_file = Path.home() / ".config" / "gh-signoff" / "signoff.log"
        return FileHandler(Path(logging_config.get("file") or default_file))
    return None


def get_logger(logging_config: Optional[dict] = None, base_context: Optional[dict] = None) -> JsonLogger:
    """
    Create a logger from the ``logging`` config section.

    Args:
        logging_config: Dict with optional keys: level, destinations, file
        base_context: Fields included in every record (e.g. command name)
    """
    cfg = logging_config or {}
    destinations = cfg.get("destinations", ["file"])
    if isinstance(destinations, str):
        destinations = [destinations]

    handlers = []
    for destination in destinations or []:
        handler = _handler_for(destination, cfg)
        if handler is not None:
            handlers.append(handler)

    return JsonLogger(level=cfg.get("level", "error"), handlers=handlers, context=base_context)
