from __future__ import annotations  # Append-only per-session audit trail

import copy
import logging
from datetime import datetime, timezone
from threading import Lock
from typing import Any, Dict, List, Literal

from pydantic import BaseModel, ConfigDict, Field

from observability import log_event

EntryTypeLiteral = Literal[
    "session_started",
    "question_requested",
    "question_produced",
    "response_received",
    "feedback_requested",
    "feedback_produced",
    "final_feedback_requested",
    "final_feedback_produced",
    "error",
    "session_ended",
]


class LogEntry(BaseModel):  # Single timestamped interaction record
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    type: EntryTypeLiteral
    content: str
    question_number: int = Field(ge=0)
    metadata: Dict[str, Any] = Field(default_factory=dict)


class InteractionLog:  # Ordered, append-only sequence of entries
    def __init__(self, room_name: str) -> None:
        self._room_name = room_name
        self._entries: List[LogEntry] = []
        self._lock = Lock()

    def record(self, entry_type: EntryTypeLiteral, content: str, *, question_number: int, **metadata: Any) -> LogEntry:
        entry = LogEntry(
            timestamp=datetime.now(timezone.utc),
            type=entry_type,
            content=content,
            question_number=question_number,
            metadata=copy.deepcopy(metadata),
        )
        with self._lock:
            self._entries.append(entry)
        log_event(
            "interaction",
            self._room_name,
            level=logging.ERROR if entry_type == "error" else logging.INFO,
            type=entry_type,
            question_number=question_number,
            content=content,
            **metadata,
        )
        return entry.model_copy(deep=True)

    def entries(self) -> List[LogEntry]:  # Deep snapshot; callers cannot mutate the trail
        with self._lock:
            return [entry.model_copy(deep=True) for entry in self._entries]

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
