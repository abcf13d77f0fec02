"""Pydantic schemas for the interview agent API."""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from interview_agent import LogEntry


class RoomReq(BaseModel):
    roomName: str


class CandidateResponseReq(BaseModel):
    roomName: str
    response: str


class FinalFeedbackReq(BaseModel):
    roomName: str
    participantIdentity: Optional[str] = None


class QuestionResp(BaseModel):
    question: str
    questionNumber: int
    timestamp: datetime


class FeedbackResp(BaseModel):
    feedback: str
    timestamp: datetime


class InterviewStatistics(BaseModel):
    totalQuestions: int
    totalInteractions: int
    interviewDuration: int


class FinalFeedbackResp(BaseModel):
    feedback: str
    statistics: InterviewStatistics
    timestamp: datetime


class ConversationLogResp(BaseModel):
    roomName: str
    totalEntries: int
    log: List[LogEntry] = Field(default_factory=list)


class TokenReq(BaseModel):
    role: Optional[str] = None
    requirements: Optional[str] = None
    resumeUrl: Optional[str] = None
    githubUrl: Optional[str] = None


class TokenResp(BaseModel):
    token: str
    roomUrl: str
    room: str


class UploadResp(BaseModel):
    resumeUrl: str
    filename: str


class HealthResp(BaseModel):
    status: str
    timestamp: datetime
