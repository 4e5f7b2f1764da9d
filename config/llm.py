from __future__ import annotations  # Configuration schema for LLM routing and interview pacing

from pathlib import Path
from typing import Dict, Iterable

from pydantic import BaseModel, Field

from .settings import Settings


PLAN_PURPOSE = "interview.plan"
FOLLOWUP_PURPOSE = "interview.followup"
WRAPUP_PURPOSE = "interview.wrapup"
ANALYSIS_PURPOSE = "interview.analysis"

PURPOSES = (PLAN_PURPOSE, FOLLOWUP_PURPOSE, WRAPUP_PURPOSE, ANALYSIS_PURPOSE)


class LlmRoute(BaseModel):  # LLM endpoint configuration
    name: str
    base_url: str
    endpoint: str
    model: str
    timeout_s: float = Field(ge=0.1)
    api_key_env: str | None = None
    temperature: float | None = Field(default=None, ge=0.0, le=2.0)
    response_format: str | None = None
    extra_headers: Dict[str, str] = Field(default_factory=dict)
    sequential: bool = False


class PacingSettings(BaseModel):  # Interview pacing configuration
    target_duration_minutes: float = Field(default=10, gt=0)
    min_exchanges: int = Field(default=8, ge=1)
    idle_nudge_minutes: float = Field(default=2, gt=0)
    history_window: int = Field(default=10, ge=1)
    honor_client_wrap_up: bool = True


class AppConfig(BaseModel):  # Application configuration root
    llm_routes: Dict[str, LlmRoute]
    registry: Dict[str, str]
    interview: PacingSettings = Field(default_factory=PacingSettings)


def load_config(path: Path) -> AppConfig:  # Load configuration from disk
    data = path.read_text(encoding="utf-8")
    return AppConfig.model_validate_json(data)


def default_config(env: Settings) -> AppConfig:  # Single-route config built from environment settings
    route = LlmRoute(
        name="default",
        base_url=env.LLM_BASE_URL,
        endpoint=env.LLM_ENDPOINT,
        model=env.LLM_MODEL,
        timeout_s=env.LLM_TIMEOUT_S,
        api_key_env=env.LLM_API_KEY_ENV,
        temperature=env.LLM_TEMPERATURE,
    )
    return AppConfig(
        llm_routes={route.name: route},
        registry={purpose: route.name for purpose in PURPOSES},
    )


def load_or_default(env: Settings) -> AppConfig:  # Prefer the JSON app config when present
    path = Path(env.APP_CONFIG_PATH)
    if path.is_file():
        return load_config(path)
    return default_config(env)


def resolve_routes(cfg: AppConfig, purposes: Iterable[str] = PURPOSES) -> Dict[str, LlmRoute]:  # Map each purpose to its route
    resolved: Dict[str, LlmRoute] = {}
    for purpose in purposes:
        if purpose not in cfg.registry:
            raise KeyError(f"Registry entry missing for '{purpose}'")
        route_id = cfg.registry[purpose]
        if route_id not in cfg.llm_routes:
            raise KeyError(f"Route '{route_id}' missing for '{purpose}'")
        resolved[purpose] = cfg.llm_routes[route_id]
    return resolved
