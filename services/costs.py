"""Approximate token and USD cost accounting for model calls."""
from __future__ import annotations

import math
from typing import Dict, Optional

DEFAULT_MODEL = "gpt-4o"

# USD per 1K tokens
PRICING: Dict[str, Dict[str, float]] = {
    "gpt-4o": {"input": 0.005, "output": 0.015},
    "gpt-4o-mini": {"input": 0.00015, "output": 0.0006},
    "gpt-4-turbo": {"input": 0.01, "output": 0.03},
    "gpt-4": {"input": 0.03, "output": 0.06},
    "gpt-3.5-turbo": {"input": 0.0015, "output": 0.002},
}


def estimate_tokens(prompt: str, response: str) -> int:
    """Approximate token count as (prompt chars + response chars) / 4, halves rounded up."""

    return math.floor((len(prompt) + len(response)) / 4 + 0.5)


def rates_for(model_name: str) -> Dict[str, float]:
    """Exact match first, then the longest known prefix (dated model names)."""

    if model_name in PRICING:
        return PRICING[model_name]
    matches = [name for name in PRICING if model_name.startswith(name)]
    if matches:
        return PRICING[max(matches, key=len)]
    return PRICING[DEFAULT_MODEL]


def calculate_cost(tokens: int, model_name: str = DEFAULT_MODEL) -> float:
    """Estimated USD cost assuming a 50/50 input/output split."""

    if tokens < 0:
        raise ValueError("tokens must be non-negative")
    rates = rates_for(model_name)
    input_rate = rates["input"] / 1000
    output_rate = rates["output"] / 1000
    return (tokens / 2) * input_rate + (tokens / 2) * output_rate


def usage_for(prompt: str, response: str, model_name: str, reported_tokens: Optional[int] = None) -> tuple[int, float]:
    """Return (tokens, cost), preferring provider-reported usage over the estimate."""

    tokens = reported_tokens if reported_tokens is not None else estimate_tokens(prompt, response)
    return tokens, calculate_cost(tokens, model_name)


__all__ = ["DEFAULT_MODEL", "PRICING", "calculate_cost", "estimate_tokens", "rates_for", "usage_for"]
