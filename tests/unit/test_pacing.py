from __future__ import annotations

import datetime as dt

from config import PacingSettings
from interview.models import Message, Session
from services.pacing import PacingPolicy, evaluate, wrap_up_reason


START = dt.datetime(2024, 5, 1, 9, 0, tzinfo=dt.timezone.utc)


def _session(user_count: int = 0, *, status: str = "interviewing", last_role: str = "assistant") -> Session:
    transcript = [Message(role="system", content="sys", timestamp=START)]
    for index in range(user_count):
        stamp = START + dt.timedelta(seconds=10 * (index + 1))
        transcript.append(Message(role="assistant", content="q", timestamp=stamp))
        transcript.append(Message(role="user", content="a", timestamp=stamp))
    transcript.append(Message(role=last_role, content="last", timestamp=START + dt.timedelta(minutes=1)))
    return Session(
        id="s1",
        topic="AI",
        status=status,
        created_at=START,
        updated_at=START,
        interview_started_at=START,
        transcript=transcript,
    )


def test_policy_from_settings():
    policy = PacingPolicy.from_settings(PacingSettings(target_duration_minutes=5, min_exchanges=4, idle_nudge_minutes=1))
    assert policy.target_duration_ms == 300_000
    assert policy.min_exchanges == 4
    assert policy.idle_nudge_ms == 60_000


def test_wrap_up_reason_thresholds():
    policy = PacingPolicy()
    assert wrap_up_reason(policy, elapsed_ms=0, user_messages=0) is None
    assert wrap_up_reason(policy, elapsed_ms=600_000, user_messages=0) == "duration"
    assert wrap_up_reason(policy, elapsed_ms=1_000, user_messages=8) == "exchanges"


def test_evaluate_counts_pending_message():
    policy = PacingPolicy()
    snapshot = evaluate(policy, _session(7), START + dt.timedelta(minutes=2), pending_user_messages=1)
    assert snapshot.user_messages == 8
    assert snapshot.should_wrap_up is True
    assert snapshot.reason == "exchanges"


def test_evaluate_elapsed_from_interview_start():
    policy = PacingPolicy()
    snapshot = evaluate(policy, _session(1), START + dt.timedelta(minutes=11))
    assert snapshot.elapsed_ms == 660_000
    assert snapshot.reason == "duration"


def test_nudge_after_idle_assistant_turn():
    policy = PacingPolicy()
    quiet = evaluate(policy, _session(1), START + dt.timedelta(minutes=2))
    assert quiet.should_nudge is False
    idle = evaluate(policy, _session(1), START + dt.timedelta(minutes=3))
    assert idle.idle_ms == 120_000
    assert idle.should_nudge is True
    # nudge is advisory and never forces wrap-up
    assert idle.should_wrap_up is False


def test_no_nudge_when_user_spoke_last_or_not_interviewing():
    policy = PacingPolicy()
    later = START + dt.timedelta(minutes=30)
    assert evaluate(policy, _session(1, last_role="user"), later).should_nudge is False
    completed = evaluate(policy, _session(1, status="completed"), later)
    assert completed.should_nudge is False
    assert completed.should_wrap_up is False
