"""Room-keyed event logging: readable lines on stdout, JSON plus readable rotating files on disk."""
from __future__ import annotations

import json
import logging
import logging.handlers
import os
import sys
import time
import uuid
from typing import Any, Optional

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
ENABLE_FILE_LOGS = os.getenv("ENABLE_FILE_LOGS", "1") in ("1", "true", "True")
LOG_FILE = os.getenv("LOG_FILE", "logs/interview.log")
LOG_MAX_BYTES = int(os.getenv("LOG_MAX_BYTES", "5242880"))
LOG_BACKUP_COUNT = int(os.getenv("LOG_BACKUP_COUNT", "5"))

HUMAN_FORMAT = logging.Formatter("[%(asctime)s] %(levelname)s %(name)s :: %(message)s", datefmt="%Y-%m-%d %H:%M:%S")
SUMMARY_FIELDS = ("type", "question_number", "node", "method", "path", "status", "ms", "error")
PREVIEW_CHARS = 120

_logger = logging.getLogger("interview")
_logger.setLevel(LOG_LEVEL)
_logger.propagate = False
_files_attached = False


def _only_json(record: logging.LogRecord) -> bool:
    return getattr(record, "is_json", False) is True


def _only_human(record: logging.LogRecord) -> bool:
    return not _only_json(record)


def _handler(
    handler: logging.Handler,
    *,
    json_lines: bool,
    formatter: Optional[logging.Formatter] = None,
) -> logging.Handler:
    handler.setLevel(LOG_LEVEL)
    handler.setFormatter(formatter or (logging.Formatter("%(message)s") if json_lines else HUMAN_FORMAT))
    handler.addFilter(_only_json if json_lines else _only_human)
    return handler


def _rotating(path: str) -> logging.handlers.RotatingFileHandler:
    return logging.handlers.RotatingFileHandler(path, maxBytes=LOG_MAX_BYTES, backupCount=LOG_BACKUP_COUNT)


def _human_log_path(path: str) -> str:  # logs/interview.log -> logs/interview-human.log
    stem, ext = os.path.splitext(path)
    return f"{stem}-human{ext or '.log'}"


def _configure() -> None:
    global _files_attached
    if not _logger.handlers:
        _logger.addHandler(_handler(logging.StreamHandler(stream=sys.stdout), json_lines=False))
    if not ENABLE_FILE_LOGS or _files_attached:
        return
    directory = os.path.dirname(LOG_FILE)
    if directory:
        os.makedirs(directory, exist_ok=True)
    _logger.addHandler(_handler(_rotating(LOG_FILE), json_lines=True))
    _logger.addHandler(_handler(_rotating(_human_log_path(LOG_FILE)), json_lines=False))
    _files_attached = True


def _summary(event: dict[str, Any]) -> str:
    parts = [f"room={event.get('room_name')}", f"kind={event.get('kind')}"]
    parts.extend(f"{key}={event[key]}" for key in SUMMARY_FIELDS if key in event)
    content = event.get("content")
    if isinstance(content, str) and content:
        flat = " ".join(content.split())
        if len(flat) > PREVIEW_CHARS:
            flat = flat[: PREVIEW_CHARS - 3] + "..."
        parts.append(f"content={flat!r}")
    return " ".join(parts)


def _emit(level: int, message: str, *, is_json: bool) -> None:
    record = _logger.makeRecord(_logger.name, level, "", 0, message, (), None)
    record.is_json = is_json  # type: ignore[attr-defined]
    _logger.handle(record)


def log_event(kind: str, room_name: str, *, level: int = logging.INFO, **fields: Any) -> None:
    """Log one session event.

    The readable summary goes to stdout (and the ``-human`` file). When file logs
    are enabled the full event, including ``fields``, is also written as one JSON line.
    """

    _configure()
    event: dict[str, Any] = {"ts": time.time(), "trace": str(uuid.uuid4()), "kind": kind, "room_name": room_name}
    event.update(fields)
    _emit(level, _summary(event), is_json=False)
    if ENABLE_FILE_LOGS:
        _emit(level, json.dumps(event, ensure_ascii=False, default=str), is_json=True)


__all__ = ["log_event"]
