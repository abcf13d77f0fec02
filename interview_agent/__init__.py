from __future__ import annotations  # Re-export interview_agent public API

from .agent import (  # noqa: F401
    DEFAULT_MAX_QUESTIONS,
    FEEDBACK_SAMPLING,
    FINAL_FEEDBACK_SAMPLING,
    FIRST_QUESTION_DELAY_S,
    QUESTION_SAMPLING,
    AgentClosedError,
    ChatMessage,
    CompletionBackend,
    InterviewAgent,
    SamplingProfile,
    SessionParams,
)
from .interaction_log import InteractionLog, LogEntry  # noqa: F401
from .prompts import FEEDBACK_FALLBACK, FINAL_FEEDBACK_FALLBACK  # noqa: F401

__all__ = [
    "DEFAULT_MAX_QUESTIONS",
    "FEEDBACK_SAMPLING",
    "FINAL_FEEDBACK_SAMPLING",
    "FIRST_QUESTION_DELAY_S",
    "QUESTION_SAMPLING",
    "AgentClosedError",
    "ChatMessage",
    "CompletionBackend",
    "InterviewAgent",
    "SamplingProfile",
    "SessionParams",
    "InteractionLog",
    "LogEntry",
    "FEEDBACK_FALLBACK",
    "FINAL_FEEDBACK_FALLBACK",
]
