"""Registry creating, looking up and retiring interview agents by room."""
from __future__ import annotations

import logging
from threading import RLock
from typing import Dict, List, Optional

from interview_agent import (
    DEFAULT_MAX_QUESTIONS,
    FIRST_QUESTION_DELAY_S,
    CompletionBackend,
    InterviewAgent,
    SessionParams,
)

logger = logging.getLogger(__name__)


class SessionNotFoundError(KeyError):  # Raised when a room has no agent
    pass


class SessionExistsError(KeyError):  # Raised when a room is registered twice
    pass


class SessionRegistry:  # Thread-safe in-memory room -> agent mapping
    def __init__(
        self,
        client: CompletionBackend,
        *,
        first_question_delay_s: float = FIRST_QUESTION_DELAY_S,
        max_questions: int = DEFAULT_MAX_QUESTIONS,
    ) -> None:
        self._client = client
        self._first_question_delay_s = first_question_delay_s
        self._max_questions = max_questions
        self._agents: Dict[str, InterviewAgent] = {}
        self._lock = RLock()

    def create(self, params: SessionParams, *, auto_start: bool = True) -> InterviewAgent:
        """Register a new agent for ``params.room_name`` and schedule its opener."""

        agent = InterviewAgent(
            params,
            self._client,
            max_questions=self._max_questions,
            on_terminated=self.remove,
        )
        with self._lock:
            if params.room_name in self._agents:
                raise SessionExistsError(params.room_name)
            self._agents[params.room_name] = agent
        agent.log_interaction(
            "session_started",
            "New interview session created",
            role=params.role,
            room=params.room_name,
        )
        if auto_start:
            agent.schedule_first_question(self._first_question_delay_s)
        logger.info("Interview agent created room=%s role=%s", params.room_name, params.role)
        return agent

    def lookup(self, room_name: str) -> Optional[InterviewAgent]:
        with self._lock:
            return self._agents.get(room_name)

    def get(self, room_name: str) -> InterviewAgent:
        agent = self.lookup(room_name)
        if agent is None:
            raise SessionNotFoundError(room_name)
        return agent

    def remove(self, room_name: str) -> None:
        """Log ``session_ended`` against the agent and evict it; absent rooms are ignored."""

        with self._lock:
            agent = self._agents.pop(room_name, None)
        if agent is None:
            return
        agent.close()
        logger.info("Interview agent removed room=%s", room_name)

    def close_all(self) -> None:
        for room_name in self.room_names():
            self.remove(room_name)

    def room_names(self) -> List[str]:
        with self._lock:
            return list(self._agents)

    def __contains__(self, room_name: object) -> bool:
        with self._lock:
            return room_name in self._agents

    def __len__(self) -> int:
        with self._lock:
            return len(self._agents)


__all__ = ["SessionExistsError", "SessionNotFoundError", "SessionRegistry"]
