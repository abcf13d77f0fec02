from __future__ import annotations  # Per-room interview state machine

import logging
from threading import RLock, Timer
from typing import Any, Callable, Dict, List, Literal, Optional, Protocol, Sequence, Tuple

from pydantic import BaseModel, ConfigDict

from completion_client import CompletionError, CompletionResult

from .interaction_log import EntryTypeLiteral, InteractionLog, LogEntry
from .prompts import (
    FEEDBACK_FALLBACK,
    FINAL_FEEDBACK_FALLBACK,
    FINAL_FEEDBACK_INSTRUCTION,
    build_system_prompt,
    question_instruction,
)


logger = logging.getLogger(__name__)

AgentStateLiteral = Literal[
    "created",
    "awaiting_first_question",
    "in_dialogue",
    "concluding",
    "terminated",
]
RoleLiteral = Literal["system", "user", "assistant"]

FIRST_QUESTION_DELAY_S = 3.0
DEFAULT_MAX_QUESTIONS = 10


class SessionParams(BaseModel):  # Static parameters supplied when a session starts
    model_config = ConfigDict(frozen=True)

    room_name: str
    role: str
    requirements: str
    resume_url: str
    github_url: Optional[str] = None


class ChatMessage(BaseModel):  # Role-tagged conversation message
    model_config = ConfigDict(frozen=True)

    role: RoleLiteral
    content: str

    def as_payload(self) -> Dict[str, str]:
        return {"role": self.role, "content": self.content}


class SamplingProfile(BaseModel):  # Per-call sampling options
    model_config = ConfigDict(frozen=True)

    temperature: float
    max_tokens: int


QUESTION_SAMPLING = SamplingProfile(temperature=0.7, max_tokens=200)
FEEDBACK_SAMPLING = SamplingProfile(temperature=0.6, max_tokens=150)
FINAL_FEEDBACK_SAMPLING = SamplingProfile(temperature=0.5, max_tokens=500)


class CompletionBackend(Protocol):  # Anything that answers chat requests like CompletionClient
    def complete(
        self,
        messages: Sequence[Dict[str, str]],
        *,
        temperature: float,
        max_tokens: int,
        stream: bool = False,
    ) -> CompletionResult: ...


class AgentClosedError(RuntimeError):  # Raised for operations on a concluded agent
    def __init__(self, room_name: str) -> None:
        super().__init__(f"Interview agent for room '{room_name}' is closed")
        self.room_name = room_name


class InterviewAgent:  # Owns one session's conversation, counter and audit trail
    def __init__(
        self,
        params: SessionParams,
        client: CompletionBackend,
        *,
        max_questions: int = DEFAULT_MAX_QUESTIONS,
        on_terminated: Optional[Callable[[str], None]] = None,
    ) -> None:
        self._params = params
        self._client = client
        self._max_questions = max_questions
        self._on_terminated = on_terminated
        self._history: List[ChatMessage] = []
        self._question_count = 0
        self._state: AgentStateLiteral = "created"
        self._log = InteractionLog(params.room_name)
        self._lock = RLock()
        self._timer: Optional[Timer] = None
        self._ended = False
        self._assessed_entries: Optional[int] = None

    @property
    def room_name(self) -> str:
        return self._params.room_name

    @property
    def params(self) -> SessionParams:
        return self._params

    @property
    def state(self) -> AgentStateLiteral:
        return self._state

    @property
    def question_count(self) -> int:
        return self._question_count

    @property
    def max_questions(self) -> int:
        return self._max_questions

    @property
    def conversation_history(self) -> Tuple[ChatMessage, ...]:
        with self._lock:
            return tuple(self._history)

    def system_prompt(self) -> str:
        return build_system_prompt(
            self._params.role,
            self._params.requirements,
            self._params.resume_url,
            self._params.github_url,
        )

    def log_interaction(self, entry_type: EntryTypeLiteral, content: str, **metadata: Any) -> LogEntry:
        return self._log.record(entry_type, content, question_number=self._question_count, **metadata)

    def get_conversation_log(self) -> List[LogEntry]:
        return self._log.entries()

    def assessment_log(self) -> List[LogEntry]:  # Trail as it stood once the final assessment was written
        entries = self._log.entries()
        if self._assessed_entries is None:
            return entries
        return entries[: self._assessed_entries]

    # ------------------------------------------------------------------
    # First question timer
    # ------------------------------------------------------------------
    def schedule_first_question(self, delay_s: float = FIRST_QUESTION_DELAY_S) -> None:
        """Ask the opening question after ``delay_s`` unless one already exists."""

        with self._lock:
            self._ensure_open()
            self.cancel_first_question()
            timer = Timer(delay_s, self._run_first_question)
            timer.daemon = True
            self._timer = timer
            self._state = "awaiting_first_question"
            timer.start()

    def cancel_first_question(self) -> bool:
        with self._lock:
            timer, self._timer = self._timer, None
        if timer is None:
            return False
        timer.cancel()
        return True

    def _run_first_question(self) -> None:
        with self._lock:
            self._timer = None
            if self._state in ("concluding", "terminated") or self._question_count > 0:
                logger.info("Skipping automatic first question room=%s state=%s", self.room_name, self._state)
                return
            try:
                question = self._ask_locked()
            except Exception as exc:  # noqa: BLE001
                logger.error("Failed to start interview room=%s: %s", self.room_name, exc)
                return
        logger.info("First question room=%s: %s", self.room_name, question)

    # ------------------------------------------------------------------
    # Interview operations
    # ------------------------------------------------------------------
    def ask_question(self) -> str:
        """Generate the next question; failures propagate to the caller."""

        self.cancel_first_question()
        with self._lock:
            self._ensure_open()
            return self._ask_locked()

    def provide_feedback(self, candidate_text: str) -> str:
        """Record the candidate reply and return a short interviewer remark."""

        with self._lock:
            self._ensure_open()
            self.log_interaction("response_received", candidate_text, response_length=len(candidate_text))
            candidate_turn = ChatMessage(role="user", content=candidate_text)
            messages = self._request_messages(candidate_turn)
            self.log_interaction("feedback_requested", "Requesting feedback from AI")
            try:
                result = self._complete(messages, FEEDBACK_SAMPLING)
            except Exception as exc:  # noqa: BLE001
                self.log_interaction("error", "Failed to generate feedback", error=_error_detail(exc))
                logger.warning("Feedback generation failed room=%s: %s", self.room_name, exc)
                return FEEDBACK_FALLBACK
            self._history.append(candidate_turn)
            self._history.append(ChatMessage(role="assistant", content=result.text))
            self._state = "in_dialogue"
            self.log_interaction("feedback_produced", result.text, tokens=result.usage)
            return result.text

    def generate_final_feedback(self) -> str:
        """Produce the closing assessment and terminate the agent."""

        self.cancel_first_question()
        with self._lock:
            self._ensure_open()
            self._state = "concluding"
            try:
                return self._final_feedback_locked()
            finally:
                self._assessed_entries = len(self._log)
                self._state = "terminated"
                if self._on_terminated is not None:
                    self._on_terminated(self.room_name)

    def close(self, reason: str = "Interview session terminated") -> None:
        """Cancel pending work and mark the session ended; safe to call twice."""

        self.cancel_first_question()
        with self._lock:
            self._state = "terminated"
            if self._ended:
                return
            self._ended = True
            self.log_interaction("session_ended", reason)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------
    def _ask_locked(self) -> str:
        instruction = ChatMessage(role="user", content=question_instruction(self._question_count))
        messages = self._request_messages(instruction)
        self.log_interaction(
            "question_requested",
            "Requesting next question from AI",
            conversation_length=len(self._history),
        )
        try:
            result = self._complete(messages, QUESTION_SAMPLING, stream=False)
        except Exception as exc:
            self.log_interaction("error", "Failed to generate question", error=_error_detail(exc))
            logger.error("Question generation failed room=%s: %s", self.room_name, exc)
            raise
        self._history.append(ChatMessage(role="assistant", content=result.text))
        self._question_count += 1
        self._state = "in_dialogue"
        reached = self._question_count >= self._max_questions
        if reached:
            logger.info(
                "Question ceiling reached room=%s count=%d max=%d",
                self.room_name,
                self._question_count,
                self._max_questions,
            )
        self.log_interaction(
            "question_produced",
            result.text,
            model=result.model,
            tokens=result.usage,
            max_questions_reached=reached,
        )
        return result.text

    def _final_feedback_locked(self) -> str:
        self.log_interaction("final_feedback_requested", "Generating final interview assessment")
        messages = self._request_messages(ChatMessage(role="user", content=FINAL_FEEDBACK_INSTRUCTION))
        try:
            result = self._complete(messages, FINAL_FEEDBACK_SAMPLING)
        except Exception as exc:  # noqa: BLE001
            self.log_interaction("error", "Failed to generate final feedback", error=_error_detail(exc))
            logger.warning("Final feedback generation failed room=%s: %s", self.room_name, exc)
            return FINAL_FEEDBACK_FALLBACK
        self.log_interaction(
            "final_feedback_produced",
            result.text,
            total_questions=self._question_count,
            total_interactions=len(self._log),
            tokens=result.usage,
        )
        return result.text

    def _request_messages(self, trailing: ChatMessage) -> List[Dict[str, str]]:
        messages = [ChatMessage(role="system", content=self.system_prompt())]
        messages.extend(self._history)
        messages.append(trailing)
        return [message.as_payload() for message in messages]

    def _complete(self, messages: List[Dict[str, str]], sampling: SamplingProfile, *, stream: bool = False) -> CompletionResult:
        return self._client.complete(
            messages,
            temperature=sampling.temperature,
            max_tokens=sampling.max_tokens,
            stream=stream,
        )

    def _ensure_open(self) -> None:
        if self._state in ("concluding", "terminated"):
            raise AgentClosedError(self.room_name)


def _error_detail(exc: Exception) -> Any:
    if isinstance(exc, CompletionError):
        return exc.detail()
    return str(exc)
