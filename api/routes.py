"""FastAPI routes for interview session control."""
from __future__ import annotations

import logging
import threading
from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, Request

from api.schemas import (
    CompleteReq,
    CompleteResp,
    MessageReq,
    MessageResp,
    PacingResp,
    SessionResp,
    StartReq,
    StartResp,
)
from interview.controller import InterviewController
from interview.errors import InvalidInput, InvalidState, MissingPlan, NotFound, PersistenceFailure
from llm_gateway import LlmGatewayError
from services.pacing import NUDGE_TEXT
from services.sessions import build_controller


logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/interview")

_CONTROLLER_LOCK = threading.Lock()


def get_controller(request: Request) -> InterviewController:
    controller = getattr(request.app.state, "controller", None)
    if controller is not None:
        return controller
    with _CONTROLLER_LOCK:
        controller = getattr(request.app.state, "controller", None)
        if controller is None:
            controller = build_controller()
            request.app.state.controller = controller
    return controller


def _raise_http(exc: Exception, action: str) -> NoReturn:
    if isinstance(exc, InvalidInput):
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if isinstance(exc, NotFound):
        raise HTTPException(status_code=404, detail="Session not found") from exc
    if isinstance(exc, InvalidState):
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    if isinstance(exc, MissingPlan):
        raise HTTPException(status_code=500, detail="Interview plan not found") from exc
    if isinstance(exc, LlmGatewayError):
        logger.exception("LLM request failed while trying to %s", action)
        raise HTTPException(status_code=500, detail=f"LLM request failed: {exc}") from exc
    if isinstance(exc, PersistenceFailure):
        logger.exception("Storage failure while trying to %s", action)
        raise HTTPException(status_code=500, detail=f"Failed to {action}") from exc
    logger.exception("Unexpected error while trying to %s", action)
    raise HTTPException(status_code=500, detail=f"Failed to {action}") from exc


@router.post("/start", response_model=StartResp)
def start(req: StartReq, controller: InterviewController = Depends(get_controller)) -> StartResp:
    try:
        result = controller.start(topic=req.topic, role=req.role)
    except Exception as exc:  # noqa: BLE001
        _raise_http(exc, "start interview")
    return StartResp(session_id=result.session_id, session=result.session, plan=result.plan)


@router.post("/message", response_model=MessageResp)
def message(req: MessageReq, controller: InterviewController = Depends(get_controller)) -> MessageResp:
    try:
        result = controller.message(req.session_id or "", req.message or "", is_wrap_up=req.is_wrap_up)
    except Exception as exc:  # noqa: BLE001
        _raise_http(exc, "process message")
    return MessageResp(message=result.reply, session=result.session, wrap_up=result.wrap_up, reason=result.reason)


@router.post("/complete", response_model=CompleteResp)
def complete(req: CompleteReq, controller: InterviewController = Depends(get_controller)) -> CompleteResp:
    try:
        result = controller.complete(req.session_id or "")
    except Exception as exc:  # noqa: BLE001
        _raise_http(exc, "complete interview")
    return CompleteResp(analysis=result.analysis, session=result.session)


@router.get("/{session_id}", response_model=SessionResp)
def get_session(session_id: str, controller: InterviewController = Depends(get_controller)) -> SessionResp:
    try:
        session = controller.get_session(session_id)
    except Exception as exc:  # noqa: BLE001
        _raise_http(exc, "fetch session")
    return SessionResp(session=session)


@router.get("/{session_id}/pacing", response_model=PacingResp)
def pacing(session_id: str, controller: InterviewController = Depends(get_controller)) -> PacingResp:
    try:
        snapshot = controller.pacing(session_id)
    except Exception as exc:  # noqa: BLE001
        _raise_http(exc, "fetch pacing")
    return PacingResp(
        elapsed_ms=snapshot.elapsed_ms,
        user_messages=snapshot.user_messages,
        idle_ms=snapshot.idle_ms,
        should_wrap_up=snapshot.should_wrap_up,
        should_nudge=snapshot.should_nudge,
        reason=snapshot.reason,
        nudge=NUDGE_TEXT if snapshot.should_nudge else None,
    )
