"""Interview session domain models."""
from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

SessionStatus = Literal["planning", "interviewing", "analyzing", "completed"]
MessageRole = Literal["user", "assistant", "system"]
EducationRole = Literal["student", "instructor", "researcher", "staff"]
EngagementTier = Literal["none", "minimal", "sufficient"]

STATUS_ORDER: tuple[str, ...] = ("planning", "interviewing", "analyzing", "completed")
ROLES: tuple[str, ...] = ("student", "instructor", "researcher", "staff")


class CamelModel(BaseModel):
    """Base model serialised with camelCase keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class Message(CamelModel):
    role: MessageRole
    content: str
    timestamp: datetime

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


def _clean_items(value: object) -> object:
    if isinstance(value, list):
        return [item.strip() for item in value if isinstance(item, str) and item.strip()]
    return value


class InterviewPlan(CamelModel):
    """Objectives, seed questions and focus areas guiding one session."""

    objectives: List[str] = Field(min_length=1)
    questions: List[str] = Field(min_length=1)
    focus_areas: List[str] = Field(min_length=1)

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    @field_validator("objectives", "questions", "focus_areas", mode="before")
    @classmethod
    def _clean_lists(cls, value: object) -> object:
        return _clean_items(value)

    @property
    def opening_question(self) -> str:
        return self.questions[0]


class GeneratedPlan(InterviewPlan):
    """Plan emitted by the model: 3-5 objectives, 8-12 questions, 3-5 focus areas.

    Surplus items are trimmed before the bounds are checked so a slightly
    over-eager reply still validates.
    """

    objectives: List[str] = Field(min_length=3, max_length=5)
    questions: List[str] = Field(min_length=8, max_length=12)
    focus_areas: List[str] = Field(min_length=3, max_length=5)

    @field_validator("objectives", "focus_areas", mode="before")
    @classmethod
    def _cap_short_lists(cls, value: object) -> object:
        cleaned = _clean_items(value)
        return cleaned[:5] if isinstance(cleaned, list) else cleaned

    @field_validator("questions", mode="before")
    @classmethod
    def _cap_questions(cls, value: object) -> object:
        cleaned = _clean_items(value)
        return cleaned[:12] if isinstance(cleaned, list) else cleaned

    def as_plan(self) -> InterviewPlan:
        return InterviewPlan(
            objectives=self.objectives,
            questions=self.questions,
            focus_areas=self.focus_areas,
        )


class InterviewAnalysis(CamelModel):
    summary: str = Field(min_length=1)
    key_insights: List[str] = Field(default_factory=list)
    depth_score: int = Field(ge=0, le=5)
    completion_rate: float = Field(ge=0.0, le=1.0)
    recommendations: Optional[List[str]] = None

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    @field_validator("depth_score", mode="before")
    @classmethod
    def _round_depth(cls, value: object) -> object:
        if isinstance(value, float):
            return round(value)
        return value


class CostTotals(CamelModel):
    tokens: int = Field(default=0, ge=0)
    cost: float = Field(default=0.0, ge=0.0)


class Session(CamelModel):
    """Snapshot of one interview as read from the transcript store."""

    id: str
    topic: str
    role: Optional[EducationRole] = None
    status: SessionStatus
    created_at: datetime
    updated_at: datetime
    interview_started_at: Optional[datetime] = None
    transcript: List[Message] = Field(default_factory=list)
    plan: Optional[InterviewPlan] = None
    analysis: Optional[InterviewAnalysis] = None
    cost: CostTotals = Field(default_factory=CostTotals)

    def user_messages(self) -> List[Message]:
        return [message for message in self.transcript if message.role == "user"]


__all__ = [
    "CamelModel",
    "CostTotals",
    "EducationRole",
    "EngagementTier",
    "GeneratedPlan",
    "InterviewAnalysis",
    "InterviewPlan",
    "Message",
    "MessageRole",
    "ROLES",
    "STATUS_ORDER",
    "Session",
    "SessionStatus",
]
