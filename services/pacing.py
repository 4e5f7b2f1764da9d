"""Server-side pacing: when to wrap up and when to nudge an idle interviewee."""
from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

from config import PacingSettings
from interview.models import Session

NUDGE_TEXT = "Take your time. Whenever you're ready, share whatever comes to mind."


def _as_utc(dt: datetime) -> datetime:
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def _elapsed_ms(start: Optional[datetime], now: datetime) -> int:
    if start is None:
        return 0
    return max(0, int((_as_utc(now) - _as_utc(start)).total_seconds() * 1000))


@dataclass(frozen=True)
class PacingPolicy:
    target_duration_ms: int = 10 * 60 * 1000
    min_exchanges: int = 8
    idle_nudge_ms: int = 2 * 60 * 1000
    history_window: int = 10
    honor_client_wrap_up: bool = True

    @classmethod
    def from_settings(cls, cfg: PacingSettings) -> "PacingPolicy":
        return cls(
            target_duration_ms=int(cfg.target_duration_minutes * 60 * 1000),
            min_exchanges=cfg.min_exchanges,
            idle_nudge_ms=int(cfg.idle_nudge_minutes * 60 * 1000),
            history_window=cfg.history_window,
            honor_client_wrap_up=cfg.honor_client_wrap_up,
        )


@dataclass(frozen=True)
class PacingSnapshot:
    elapsed_ms: int
    user_messages: int
    idle_ms: int
    should_wrap_up: bool
    should_nudge: bool
    reason: Optional[str] = None


def wrap_up_reason(policy: PacingPolicy, *, elapsed_ms: int, user_messages: int) -> Optional[str]:
    """Return why the interview should wrap up, or None to keep probing."""

    if elapsed_ms >= policy.target_duration_ms:
        return "duration"
    if user_messages >= policy.min_exchanges:
        return "exchanges"
    return None


def evaluate(policy: PacingPolicy, session: Session, now: Optional[datetime] = None, *, pending_user_messages: int = 0) -> PacingSnapshot:
    """Evaluate pacing for ``session``.

    ``pending_user_messages`` counts user messages accepted in the current
    request that are not yet in the snapshot. The idle nudge is advisory only.
    """

    current = _as_utc(now) if now else datetime.now(timezone.utc)
    elapsed = _elapsed_ms(session.interview_started_at, current)
    user_count = len(session.user_messages()) + pending_user_messages
    last_activity = session.transcript[-1].timestamp if session.transcript else session.interview_started_at
    idle = _elapsed_ms(last_activity, current)
    reason = None
    if session.status == "interviewing":
        reason = wrap_up_reason(policy, elapsed_ms=elapsed, user_messages=user_count)
    should_nudge = (
        session.status == "interviewing"
        and pending_user_messages == 0
        and bool(session.transcript)
        and session.transcript[-1].role == "assistant"
        and idle >= policy.idle_nudge_ms
    )
    return PacingSnapshot(
        elapsed_ms=elapsed,
        user_messages=user_count,
        idle_ms=idle,
        should_wrap_up=reason is not None,
        should_nudge=should_nudge,
        reason=reason,
    )


__all__ = ["NUDGE_TEXT", "PacingPolicy", "PacingSnapshot", "evaluate", "wrap_up_reason"]
