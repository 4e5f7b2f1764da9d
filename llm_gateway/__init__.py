from __future__ import annotations  # Re-export llm_gateway public API

from .llm_gateway import Completion, Gateway, HttpClient, HttpResponse, LlmGateway, LlmGatewayError, complete

__all__ = ["Completion", "Gateway", "HttpClient", "HttpResponse", "LlmGateway", "LlmGatewayError", "complete"]
