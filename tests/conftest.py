import os
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional, Sequence, Union

import pytest

os.environ.setdefault("ENABLE_FILE_LOGS", "0")

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from completion_client import CompletionError, CompletionResult
from interview_agent import SessionParams
from observability import logger as observability_logger


class ScriptedCompletion:
    """Completion backend replaying queued texts or exceptions."""

    def __init__(self, *replies: Union[str, Exception]) -> None:
        self.replies: List[Union[str, Exception]] = list(replies)
        self.calls: List[Dict[str, Any]] = []

    def queue(self, *replies: Union[str, Exception]) -> None:
        self.replies.extend(replies)

    def complete(
        self,
        messages: Sequence[Dict[str, str]],
        *,
        temperature: float,
        max_tokens: int,
        stream: bool = False,
    ) -> CompletionResult:
        self.calls.append(
            {
                "messages": [dict(message) for message in messages],
                "temperature": temperature,
                "max_tokens": max_tokens,
                "stream": stream,
            }
        )
        if not self.replies:
            raise CompletionError("No scripted reply left", status_code=503, body={"error": "exhausted"})
        reply = self.replies.pop(0)
        if isinstance(reply, Exception):
            raise reply
        return CompletionResult(
            text=reply,
            model="llama3.1-8b",
            usage={"prompt_tokens": 10, "completion_tokens": 5, "total_tokens": 15},
        )


@pytest.fixture(autouse=True)
def no_file_logs(monkeypatch):
    monkeypatch.setattr(observability_logger, "ENABLE_FILE_LOGS", False)


@pytest.fixture
def completion() -> ScriptedCompletion:
    return ScriptedCompletion()


@pytest.fixture
def session_params() -> SessionParams:
    return SessionParams(
        room_name="R1",
        role="Backend Engineer",
        requirements="Python, distributed systems",
        resume_url="/uploads/1700000000000-resume.pdf",
        github_url="https://github.com/example",
    )


@pytest.fixture
def make_params():
    def _make(room_name: str, github_url: Optional[str] = None) -> SessionParams:
        return SessionParams(
            room_name=room_name,
            role="Backend Engineer",
            requirements="Python, distributed systems",
            resume_url="/uploads/resume.pdf",
            github_url=github_url,
        )

    return _make
