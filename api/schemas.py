"""Pydantic schemas for the interview session API."""
from __future__ import annotations

from typing import Optional

from interview.models import CamelModel, InterviewAnalysis, InterviewPlan, Session


class StartReq(CamelModel):
    topic: Optional[str] = None
    role: Optional[str] = None


class MessageReq(CamelModel):
    session_id: Optional[str] = None
    message: Optional[str] = None
    is_wrap_up: bool = False


class CompleteReq(CamelModel):
    session_id: Optional[str] = None


class StartResp(CamelModel):
    session_id: str
    session: Session
    plan: InterviewPlan


class MessageResp(CamelModel):
    message: str
    session: Session
    wrap_up: bool
    reason: Optional[str] = None


class CompleteResp(CamelModel):
    analysis: InterviewAnalysis
    session: Session


class SessionResp(CamelModel):
    session: Session


class PacingResp(CamelModel):
    elapsed_ms: int
    user_messages: int
    idle_ms: int
    should_wrap_up: bool
    should_nudge: bool
    reason: Optional[str] = None
    nudge: Optional[str] = None
