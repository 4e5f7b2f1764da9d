"""Recover typed objects from free-form model replies.

Candidates are tried in a fixed order: the body of a fenced block labelled
``json``, the first balanced top-level ``{...}`` span, then the raw text.
The first candidate that validates against the schema wins.
"""
from __future__ import annotations

import logging
import re
from typing import Iterator, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

logger = logging.getLogger(__name__)

T = TypeVar("T", bound=BaseModel)

JSON_FENCE_PATTERN = re.compile(r"```json[ \t]*\n(.*?)\n?[ \t]*```", re.DOTALL | re.IGNORECASE)


def fenced_json(text: str) -> Optional[str]:
    match = JSON_FENCE_PATTERN.search(text)
    if match is None:
        return None
    return match.group(1).strip()


def first_brace_span(text: str) -> Optional[str]:
    """Return the first balanced ``{...}`` span, ignoring braces inside strings."""

    start = text.find("{")
    if start < 0:
        return None
    depth = 0
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
            continue
        if char == '"':
            in_string = True
        elif char == "{":
            depth += 1
        elif char == "}":
            depth -= 1
            if depth == 0:
                return text[start : index + 1]
    end = text.rfind("}")
    if end > start:
        return text[start : end + 1]
    return None


def candidates(text: str) -> Iterator[str]:
    seen: set[str] = set()
    for candidate in (fenced_json(text), first_brace_span(text), text.strip()):
        if candidate and candidate not in seen:
            seen.add(candidate)
            yield candidate


def parse_reply(text: str, schema: Type[T]) -> Optional[T]:
    """Return the first candidate that validates as ``schema``, else None."""

    for candidate in candidates(text):
        try:
            return schema.model_validate_json(candidate)
        except ValidationError as exc:
            logger.debug("Candidate rejected for %s: %s", schema.__name__, exc.errors()[:1])
    return None


__all__ = ["candidates", "fenced_json", "first_brace_span", "parse_reply"]
