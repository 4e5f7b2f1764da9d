"""Build a fully wired interview controller from configuration."""
from __future__ import annotations

from pathlib import Path
from typing import Optional

from config import AppConfig, Settings, load_or_default, resolve_routes, settings
from interview.controller import InterviewController
from interview.plans import FixedPlanProvider, GeneratedPlanProvider, PlanProvider, load_role_plans
from llm_gateway import Gateway, LlmGateway
from services.pacing import PacingPolicy
from storage.sessions import SessionStore


def build_plan_provider(env: Settings, gateway: Gateway) -> PlanProvider:
    """Generated plans in topic mode, the static role table in role mode."""

    if env.INTERVIEW_MODE == "role":
        path = Path(env.ROLE_PLANS_PATH) if env.ROLE_PLANS_PATH else None
        return FixedPlanProvider(load_role_plans(path))
    return GeneratedPlanProvider(gateway)


def build_controller(
    env: Optional[Settings] = None,
    *,
    app_config: Optional[AppConfig] = None,
    gateway: Optional[Gateway] = None,
) -> InterviewController:
    """Create the store, gateway and plan provider once and inject them."""

    env = env or settings
    cfg = app_config or load_or_default(env)
    if gateway is None:
        gateway = LlmGateway(resolve_routes(cfg))
    return InterviewController(
        SessionStore(env.DB_PATH),
        gateway,
        build_plan_provider(env, gateway),
        policy=PacingPolicy.from_settings(cfg.interview),
    )


__all__ = ["build_controller", "build_plan_provider"]
