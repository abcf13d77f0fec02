"""FastAPI routes driving interview agents by room."""
from __future__ import annotations

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException

from api.dependencies import get_registry
from api.schemas import (
    CandidateResponseReq,
    ConversationLogResp,
    FeedbackResp,
    FinalFeedbackReq,
    FinalFeedbackResp,
    InterviewStatistics,
    QuestionResp,
    RoomReq,
)
from completion_client import CompletionConfigError, CompletionError
from interview_agent import AgentClosedError, InterviewAgent
from observability import log_event, span
from services.sessions import SessionRegistry


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/agent")

AGENT_NOT_FOUND = "Agent not found"


def _agent_or_404(registry: SessionRegistry, room_name: str) -> InterviewAgent:
    agent = registry.lookup(room_name)
    if agent is None:
        logger.warning("Agent not found for room: %s", room_name)
        raise HTTPException(status_code=404, detail=AGENT_NOT_FOUND)
    return agent


def _now() -> datetime:
    return datetime.now(timezone.utc)


@router.post("/question", response_model=QuestionResp)
def ask_question(payload: RoomReq, registry: SessionRegistry = Depends(get_registry)) -> QuestionResp:
    agent = _agent_or_404(registry, payload.roomName)
    with span("question", payload.roomName):
        try:
            question = agent.ask_question()
        except AgentClosedError as exc:
            raise HTTPException(status_code=404, detail=AGENT_NOT_FOUND) from exc
        except CompletionConfigError as exc:
            logger.exception("Completion endpoint is not configured")
            raise HTTPException(status_code=500, detail="Failed to generate question") from exc
        except CompletionError as exc:
            logger.exception("Question generation failed room=%s", payload.roomName)
            raise HTTPException(status_code=502, detail="Failed to generate question") from exc
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected error while generating question room=%s", payload.roomName)
            raise HTTPException(status_code=500, detail="Failed to generate question") from exc
    return QuestionResp(question=question, questionNumber=agent.question_count, timestamp=_now())


@router.post("/response", response_model=FeedbackResp)
def submit_response(
    payload: CandidateResponseReq,
    registry: SessionRegistry = Depends(get_registry),
) -> FeedbackResp:
    agent = _agent_or_404(registry, payload.roomName)
    with span("response", payload.roomName):
        try:
            feedback = agent.provide_feedback(payload.response)
        except AgentClosedError as exc:
            raise HTTPException(status_code=404, detail=AGENT_NOT_FOUND) from exc
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected error while processing response room=%s", payload.roomName)
            raise HTTPException(status_code=500, detail="Failed to process response") from exc
    logger.info(
        "Feedback generated room=%s conversation_length=%d",
        payload.roomName,
        len(agent.conversation_history),
    )
    return FeedbackResp(feedback=feedback, timestamp=_now())


@router.post("/final-feedback", response_model=FinalFeedbackResp)
def request_final_feedback(
    payload: FinalFeedbackReq,
    registry: SessionRegistry = Depends(get_registry),
) -> FinalFeedbackResp:
    agent = _agent_or_404(registry, payload.roomName)
    logger.info(
        "Generating final assessment room=%s participant=%s questions=%d turns=%d",
        payload.roomName,
        payload.participantIdentity,
        agent.question_count,
        len(agent.conversation_history),
    )
    with span("final_feedback", payload.roomName) as timing:
        try:
            feedback = agent.generate_final_feedback()
        except AgentClosedError as exc:
            raise HTTPException(status_code=404, detail=AGENT_NOT_FOUND) from exc
        except Exception as exc:  # noqa: BLE001
            logger.exception("Unexpected error while generating final feedback room=%s", payload.roomName)
            raise HTTPException(status_code=500, detail="Failed to generate feedback") from exc
    conversation_log = agent.assessment_log()
    log_event(
        "session_summary",
        payload.roomName,
        participant=payload.participantIdentity,
        total_questions=agent.question_count,
        total_interactions=len(conversation_log),
        ms=timing["ms"],
        log=[entry.model_dump(mode="json") for entry in conversation_log],
    )
    return FinalFeedbackResp(
        feedback=feedback,
        statistics=InterviewStatistics(
            totalQuestions=agent.question_count,
            totalInteractions=len(conversation_log),
            interviewDuration=timing["ms"],
        ),
        timestamp=_now(),
    )


@router.get("/conversation-log/{room_name}", response_model=ConversationLogResp)
def fetch_conversation_log(
    room_name: str,
    registry: SessionRegistry = Depends(get_registry),
) -> ConversationLogResp:
    agent = _agent_or_404(registry, room_name)
    entries = agent.get_conversation_log()
    return ConversationLogResp(roomName=room_name, totalEntries=len(entries), log=entries)
