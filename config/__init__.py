"""Configuration package for the interview service."""
from .llm import (
    ANALYSIS_PURPOSE,
    FOLLOWUP_PURPOSE,
    PLAN_PURPOSE,
    PURPOSES,
    WRAPUP_PURPOSE,
    AppConfig,
    LlmRoute,
    PacingSettings,
    default_config,
    load_config,
    load_or_default,
    resolve_routes,
)
from .settings import Settings, settings

__all__ = [
    "ANALYSIS_PURPOSE",
    "FOLLOWUP_PURPOSE",
    "PLAN_PURPOSE",
    "PURPOSES",
    "WRAPUP_PURPOSE",
    "AppConfig",
    "LlmRoute",
    "PacingSettings",
    "default_config",
    "load_config",
    "load_or_default",
    "resolve_routes",
    "Settings",
    "settings",
]
