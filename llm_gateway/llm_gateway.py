from __future__ import annotations  # LLM request gateway module

import logging
import os
import threading
from typing import Any, Callable, Dict, Mapping, Optional, Protocol, Tuple

import httpx
from pydantic import BaseModel

from config import LlmRoute


logger = logging.getLogger(__name__)  # Module logger setup


_MODEL_LOCKS: Dict[str, threading.Lock] = {}
_MODEL_LOCKS_GUARD = threading.Lock()


class HttpClient(Protocol):  # Minimal HTTP client protocol
    def post(self, url: str, *, json: Dict[str, Any], headers: Dict[str, str], timeout: float) -> "HttpResponse": ...


class HttpResponse(Protocol):  # Minimal HTTP response protocol
    @property
    def status_code(self) -> int: ...

    def json(self) -> Any: ...

    @property
    def text(self) -> str: ...


class LlmGatewayError(RuntimeError):  # Base gateway error
    pass


class Completion(BaseModel):  # Generated text plus provider usage metadata when reported
    text: str
    model: str
    total_tokens: Optional[int] = None


class Gateway(Protocol):  # Interface consumed by the interview core
    def invoke(self, prompt: str, *, purpose: str) -> Completion: ...


class LlmGateway:  # Routes each prompt purpose to its configured LLM endpoint
    def __init__(self, routes: Mapping[str, LlmRoute], *, client: Optional[HttpClient] = None) -> None:
        if not routes:
            raise ValueError("At least one LLM route is required")
        self._routes = dict(routes)
        self._client = client

    def route_for(self, purpose: str) -> LlmRoute:
        route = self._routes.get(purpose)
        if route is None:
            raise KeyError(f"No LLM route configured for '{purpose}'")
        return route

    def invoke(self, prompt: str, *, purpose: str) -> Completion:
        return complete(prompt, cfg=self.route_for(purpose), client=self._client)


def _lock_for(cfg: LlmRoute) -> threading.Lock:
    key = cfg.name or f"{cfg.base_url}{cfg.endpoint}"
    with _MODEL_LOCKS_GUARD:
        lock = _MODEL_LOCKS.get(key)
        if lock is None:
            lock = threading.Lock()
            _MODEL_LOCKS[key] = lock
    return lock


def complete(
    prompt: str,
    *,
    cfg: LlmRoute,
    client: Optional[HttpClient] = None,
) -> Completion:  # Send a single-turn prompt and return the generated text
    def _execute() -> Completion:
        payload: Dict[str, Any] = {
            "model": cfg.model,
            "messages": [{"role": "user", "content": prompt}],
        }
        if cfg.temperature is not None:
            payload["temperature"] = cfg.temperature
        if cfg.response_format:
            payload["response_format"] = {"type": cfg.response_format}
        headers = {"Content-Type": "application/json"}
        if cfg.api_key_env:
            api_key = os.getenv(cfg.api_key_env)
            if api_key:
                headers["Authorization"] = f"Bearer {api_key}"
        headers.update(cfg.extra_headers)
        logger.info(
            "LLM request send route=%s model=%s preview=%s",
            cfg.name,
            cfg.model,
            _preview(prompt),
        )
        try:
            response, close_cb = _post(f"{cfg.base_url}{cfg.endpoint}", payload, headers, cfg.timeout_s, client)
        except Exception as exc:  # noqa: BLE001
            logger.error("LLM transport failure: %s", exc)
            raise LlmGatewayError("LLM transport failed") from exc
        try:
            if response.status_code >= 400:
                logger.error("LLM error status: %s", response.status_code)
                raise LlmGatewayError(f"LLM returned status {response.status_code}")
            try:
                data = response.json()
            except Exception as exc:  # noqa: BLE001
                logger.error("Invalid JSON payload from LLM: %s", exc)
                raise LlmGatewayError("LLM payload was not JSON") from exc
            text = _extract_content(data)
        finally:
            _close_safely(close_cb)
        completion = Completion(
            text=text,
            model=_extract_model(data, cfg.model),
            total_tokens=_extract_total_tokens(data),
        )
        logger.info(
            "LLM request done route=%s model=%s tokens=%s",
            cfg.name,
            completion.model,
            completion.total_tokens,
        )
        return completion

    if cfg.sequential:
        with _lock_for(cfg):
            return _execute()
    return _execute()


def _post(url: str, payload: Dict[str, Any], headers: Dict[str, str], timeout: float, client: Optional[HttpClient]) -> Tuple[HttpResponse, Optional[Callable[[], None]]]:  # Dispatch HTTP request
    if client is not None:
        return client.post(url, json=payload, headers=headers, timeout=timeout), None
    http_client = httpx.Client(timeout=timeout)
    try:
        response = http_client.post(url, json=payload, headers=headers)
    except Exception:
        http_client.close()
        raise
    return response, http_client.close


def _close_safely(close_cb: Optional[Callable[[], None]]) -> None:  # Close HTTP client callback when provided
    if close_cb is not None:
        close_cb()


def _preview(prompt: str) -> str:  # Build preview string for logging
    for line in prompt.splitlines():
        text = line.strip()
        if text:
            return text[:117] + "..." if len(text) > 120 else text
    return ""


def _extract_content(data: Any) -> str:  # Extract message content from LLM response
    if isinstance(data, dict):
        choices = data.get("choices")
        if isinstance(choices, list) and choices:
            message = choices[0].get("message") if isinstance(choices[0], dict) else None
            content = message.get("content") if isinstance(message, dict) else None
            if isinstance(content, str):
                return content
        if isinstance(data.get("content"), str):
            return data["content"]
    raise LlmGatewayError("LLM response missing content")


def _extract_model(data: Any, default: str) -> str:  # Prefer the model name echoed by the provider
    model = data.get("model") if isinstance(data, dict) else None
    return model if isinstance(model, str) and model else default


def _extract_total_tokens(data: Any) -> Optional[int]:  # Read usage.total_tokens when the provider reports it
    usage = data.get("usage") if isinstance(data, dict) else None
    if not isinstance(usage, dict):
        return None
    total = usage.get("total_tokens")
    if isinstance(total, int) and not isinstance(total, bool) and total >= 0:
        return total
    return None
