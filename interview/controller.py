"""Interview lifecycle controller.

Sequences planning -> interviewing -> analyzing -> completed for one session,
decides between probing follow-ups and wrap-up replies, and keeps the
transcript and cost accumulator consistent across model calls. Mutations of
a single session are serialised with a per-session lock.
"""
from __future__ import annotations

import datetime as dt
import threading
from contextlib import contextmanager
from typing import Callable, Dict, Iterator, List, Optional, Protocol, Sequence, Tuple

from pydantic import BaseModel

from config import ANALYSIS_PURPOSE, FOLLOWUP_PURPOSE, PLAN_PURPOSE, WRAPUP_PURPOSE
from llm_gateway import Completion, Gateway, LlmGatewayError
from observability import log_event, span
from services.costs import usage_for
from services.pacing import PacingPolicy, PacingSnapshot, evaluate

from .analysis import AnalysisGenerator
from .errors import InvalidInput, InvalidState, MissingPlan, NotFound
from .models import (
    ROLES,
    EducationRole,
    InterviewAnalysis,
    InterviewPlan,
    Message,
    MessageRole,
    Session,
    SessionStatus,
)
from .plans import PlanProvider, PlanResult
from .prompts import followup_prompt, wrapup_prompt


class TranscriptStore(Protocol):
    def create_session(self, topic: str, role: Optional[EducationRole] = None) -> Session: ...

    def get_session(self, session_id: str) -> Optional[Session]: ...

    def update_status(self, session_id: str, status: SessionStatus) -> None: ...

    def append_message(self, session_id: str, role: MessageRole, content: str) -> Message: ...

    def save_plan(self, session_id: str, plan: InterviewPlan) -> None: ...

    def save_analysis(self, session_id: str, analysis: InterviewAnalysis) -> None: ...

    def increment_cost(self, session_id: str, tokens: int, cost: float) -> None: ...


class StartResult(BaseModel):
    session_id: str
    session: Session
    plan: InterviewPlan


class MessageResult(BaseModel):
    reply: str
    session: Session
    wrap_up: bool
    reason: Optional[str] = None


class CompleteResult(BaseModel):
    analysis: InterviewAnalysis
    session: Session


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def recent_history(transcript: Sequence[Message], window: int) -> List[Message]:
    """Most recent ``window`` entries; older context is dropped."""

    if window <= 0:
        return []
    return list(transcript[-window:])


def system_message(topic: str, plan: InterviewPlan) -> str:
    return f'You are conducting an interview about "{topic}". Your objectives are: {", ".join(plan.objectives)}'


def opening_message(greeting: str, plan: InterviewPlan) -> str:
    return f"{greeting} Let's start with: {plan.opening_question}"


class InterviewController:
    def __init__(
        self,
        store: TranscriptStore,
        gateway: Gateway,
        plans: PlanProvider,
        *,
        policy: Optional[PacingPolicy] = None,
        analyzer: Optional[AnalysisGenerator] = None,
        clock: Callable[[], dt.datetime] = _utcnow,
    ) -> None:
        self._store = store
        self._gateway = gateway
        self._plans = plans
        self._policy = policy or PacingPolicy()
        self._analyzer = analyzer or AnalysisGenerator(gateway)
        self._clock = clock
        self._locks: Dict[str, Tuple[threading.Lock, int]] = {}
        self._locks_guard = threading.Lock()

    @property
    def mode(self) -> str:
        return self._plans.mode

    @property
    def policy(self) -> PacingPolicy:
        return self._policy

    @contextmanager
    def _session_lock(self, session_id: str) -> Iterator[None]:
        """Serialise work on one session; the entry is dropped once no caller holds it."""

        with self._locks_guard:
            entry = self._locks.get(session_id)
            lock, users = entry if entry is not None else (threading.Lock(), 0)
            self._locks[session_id] = (lock, users + 1)
        try:
            with lock:
                yield
        finally:
            with self._locks_guard:
                _, users = self._locks[session_id]
                if users <= 1:
                    del self._locks[session_id]
                else:
                    self._locks[session_id] = (lock, users - 1)

    def _addressing_key(self, topic: Optional[str], role: Optional[str]) -> str:
        if self._plans.mode == "role":
            value = role.strip().lower() if isinstance(role, str) else ""
            if value not in ROLES:
                raise InvalidInput(f"Role must be one of: {', '.join(ROLES)}")
            return value
        value = topic.strip() if isinstance(topic, str) else ""
        if not value:
            raise InvalidInput("Topic is required")
        return value

    def _record_usage(self, session_id: str, prompt: str, completion: Completion) -> int:
        tokens, cost = usage_for(prompt, completion.text, completion.model, completion.total_tokens)
        self._store.increment_cost(session_id, tokens, cost)
        return tokens

    def _load(self, session_id: str) -> Session:
        session = self._store.get_session(session_id)
        if session is None:
            raise NotFound(f"Session {session_id} not found")
        return session

    def get_session(self, session_id: str) -> Session:
        if not session_id:
            raise InvalidInput("Session ID is required")
        return self._load(session_id)

    def pacing(self, session_id: str) -> PacingSnapshot:
        return evaluate(self._policy, self.get_session(session_id), self._clock())

    def start(self, *, topic: Optional[str] = None, role: Optional[str] = None) -> StartResult:
        key = self._addressing_key(topic, role)
        if self._plans.mode == "role":
            result = self._plans.plan_for(key)
            session = self._store.create_session(result.topic, role=key)  # type: ignore[arg-type]
            log_event("session.created", session.id, status=session.status)
        else:
            session = self._store.create_session(key)
            log_event("session.created", session.id, status=session.status)
            with span(session.id, PLAN_PURPOSE):
                result = self._plans.plan_for(key)
        return self._open_interview(session, result)

    def _open_interview(self, session: Session, result: PlanResult) -> StartResult:
        if result.completion is not None and result.prompt is not None:
            self._record_usage(session.id, result.prompt, result.completion)
        self._store.save_plan(session.id, result.plan)
        log_event("plan.ready", session.id, fallback=result.fallback)
        self._store.append_message(session.id, "system", system_message(result.topic, result.plan))
        self._store.append_message(session.id, "assistant", opening_message(result.greeting, result.plan))
        self._store.update_status(session.id, "interviewing")
        log_event("session.status", session.id, status="interviewing")
        return StartResult(session_id=session.id, session=self._load(session.id), plan=result.plan)

    def message(self, session_id: str, text: str, *, is_wrap_up: bool = False) -> MessageResult:
        content = text.strip() if isinstance(text, str) else ""
        if not session_id or not content:
            raise InvalidInput("Session ID and message are required")
        self._load(session_id)
        with self._session_lock(session_id):
            session = self._load(session_id)
            if session.status != "interviewing":
                raise InvalidState(f"Session is not in interviewing state (status={session.status})")
            if session.plan is None:
                raise MissingPlan("Interview plan not found")

            history = recent_history(session.transcript, self._policy.history_window)
            self._store.append_message(session_id, "user", content)

            pacing = evaluate(self._policy, session, self._clock(), pending_user_messages=1)
            requested = is_wrap_up and self._policy.honor_client_wrap_up
            wrap_up = pacing.should_wrap_up or requested
            reason = pacing.reason or ("client" if requested else None)

            if wrap_up:
                purpose = WRAPUP_PURPOSE
                prompt = wrapup_prompt(session.topic, session.plan, history, content)
            else:
                purpose = FOLLOWUP_PURPOSE
                prompt = followup_prompt(session.topic, session.plan, history, content)
            with span(session_id, purpose):
                completion = self._gateway.invoke(prompt, purpose=purpose)
            reply = completion.text.strip()
            if not reply:
                raise LlmGatewayError("LLM returned an empty reply")

            self._store.append_message(session_id, "assistant", reply)
            tokens = self._record_usage(session_id, prompt, completion)
            log_event("message.reply", session_id, purpose=purpose, wrap_up=wrap_up, reason=reason, tokens=tokens)
            return MessageResult(reply=reply, session=self._load(session_id), wrap_up=wrap_up, reason=reason)

    def complete(self, session_id: str) -> CompleteResult:
        if not session_id:
            raise InvalidInput("Session ID is required")
        self._load(session_id)
        with self._session_lock(session_id):
            session = self._load(session_id)
            if session.status == "completed":
                raise InvalidState("Interview already completed")
            if session.plan is None:
                raise MissingPlan("Interview plan not found")
            if session.status == "planning":
                raise InvalidState("Interview has not started")

            self._store.update_status(session_id, "analyzing")
            log_event("session.status", session_id, status="analyzing")

            analysis = session.analysis
            if analysis is None:
                with span(session_id, ANALYSIS_PURPOSE):
                    outcome = self._analyzer.analyze(session.topic, session.plan, session.transcript)
                if outcome.completion is not None and outcome.prompt is not None:
                    self._record_usage(session_id, outcome.prompt, outcome.completion)
                analysis = outcome.analysis
                self._store.save_analysis(session_id, analysis)
                log_event("analysis.ready", session_id, tier=outcome.tier, fallback=outcome.fallback)

            self._store.update_status(session_id, "completed")
            log_event("session.status", session_id, status="completed")
            return CompleteResult(analysis=analysis, session=self._load(session_id))


__all__ = [
    "CompleteResult",
    "InterviewController",
    "MessageResult",
    "StartResult",
    "TranscriptStore",
    "opening_message",
    "recent_history",
    "system_message",
]
