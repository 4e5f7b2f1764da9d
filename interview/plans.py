"""Interview plan providers: model-generated per topic, or fixed per role."""
from __future__ import annotations

import logging
from pathlib import Path
from typing import Dict, List, Literal, Optional, Protocol

import yaml
from pydantic import BaseModel, Field

from config import PLAN_PURPOSE
from llm_gateway import Completion, Gateway

from .errors import InvalidInput
from .models import ROLES, GeneratedPlan, InterviewPlan
from .parsing import parse_reply
from .prompts import plan_prompt

logger = logging.getLogger(__name__)

DEFAULT_ROLE_PLANS_PATH = Path(__file__).resolve().parents[1] / "config" / "role_plans.yaml"

PlanMode = Literal["topic", "role"]


class PlanResult(BaseModel):
    """Plan plus the details the controller needs to open the interview."""

    topic: str
    plan: InterviewPlan
    greeting: str
    prompt: Optional[str] = None
    completion: Optional[Completion] = None
    fallback: bool = False


class PlanProvider(Protocol):
    mode: PlanMode

    def plan_for(self, key: str) -> PlanResult: ...


def fallback_plan(topic: str) -> InterviewPlan:
    return InterviewPlan(
        objectives=[f"Explore {topic} in depth"],
        questions=[
            f"What is your experience with {topic}?",
            f"Can you tell me more about {topic}?",
            f"What are the key aspects of {topic}?",
        ],
        focus_areas=["Understanding", "Experience", "Perspectives"],
    )


def topic_greeting(topic: str) -> str:
    return f"Hello! I'd like to interview you about {topic}."


class GeneratedPlanProvider:
    """Asks the model for a plan; never fails on a malformed reply."""

    mode: PlanMode = "topic"

    def __init__(self, gateway: Gateway) -> None:
        self._gateway = gateway

    def plan_for(self, key: str) -> PlanResult:
        topic = key.strip()
        if not topic:
            raise InvalidInput("Topic is required")
        prompt = plan_prompt(topic)
        completion = self._gateway.invoke(prompt, purpose=PLAN_PURPOSE)
        generated = parse_reply(completion.text, GeneratedPlan)
        if generated is None:
            logger.debug("Plan reply did not validate; using fallback plan for topic=%r", topic)
            plan, fallback = fallback_plan(topic), True
        else:
            plan, fallback = generated.as_plan(), False
        return PlanResult(
            topic=topic,
            plan=plan,
            greeting=topic_greeting(topic),
            prompt=prompt,
            completion=completion,
            fallback=fallback,
        )


class RolePlan(BaseModel):  # Pre-authored plan entry from the role table
    topic: str
    greeting: str
    objectives: List[str] = Field(min_length=1)
    questions: List[str] = Field(min_length=1)
    focus_areas: List[str] = Field(min_length=1)

    def as_plan(self) -> InterviewPlan:
        return InterviewPlan(
            objectives=self.objectives,
            questions=self.questions,
            focus_areas=self.focus_areas,
        )


def load_role_plans(path: Optional[Path] = None) -> Dict[str, RolePlan]:
    """Load and validate the static role plan table."""

    source = path or DEFAULT_ROLE_PLANS_PATH
    with open(source, "r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
    roles = data.get("roles") or {}
    plans = {name: RolePlan.model_validate(entry) for name, entry in roles.items()}
    missing = [role for role in ROLES if role not in plans]
    if missing:
        raise ValueError(f"Role plan table missing roles: {', '.join(missing)}")
    return plans


class FixedPlanProvider:
    """Looks plans up by role; no model call."""

    mode: PlanMode = "role"

    def __init__(self, plans: Optional[Dict[str, RolePlan]] = None) -> None:
        self._plans = plans if plans is not None else load_role_plans()

    def plan_for(self, key: str) -> PlanResult:
        role = key.strip().lower()
        if role not in ROLES or role not in self._plans:
            raise InvalidInput(f"Role must be one of: {', '.join(ROLES)}")
        entry = self._plans[role]
        return PlanResult(topic=entry.topic, plan=entry.as_plan(), greeting=entry.greeting)


__all__ = [
    "DEFAULT_ROLE_PLANS_PATH",
    "FixedPlanProvider",
    "GeneratedPlanProvider",
    "PlanMode",
    "PlanProvider",
    "PlanResult",
    "RolePlan",
    "fallback_plan",
    "load_role_plans",
    "topic_greeting",
]
