from __future__ import annotations  # Transcript store for interview sessions

import datetime as dt
import json
import sqlite3
from pathlib import Path
from typing import Callable, List, Optional, Union
from uuid import uuid4

from interview.errors import InvalidState, NotFound
from interview.models import (
    STATUS_ORDER,
    CostTotals,
    EducationRole,
    InterviewAnalysis,
    InterviewPlan,
    Message,
    MessageRole,
    Session,
    SessionStatus,
)

from .migrate import migrate
from .sqlite import get_conn


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


def _as_utc(value: dt.datetime) -> dt.datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc)


class SessionStore:  # SQLite-backed sessions and append-only messages
    def __init__(self, path: Union[str, Path], *, clock: Callable[[], dt.datetime] = _utcnow) -> None:
        self._path = Path(path)
        self._clock = clock
        migrate(str(self._path))

    @property
    def path(self) -> Path:
        return self._path

    def _now(self) -> str:
        return _as_utc(self._clock()).isoformat()

    def create_session(self, topic: str, role: Optional[EducationRole] = None) -> Session:  # Insert a new session in planning
        session_id = uuid4().hex
        now = self._now()
        with get_conn(self._path) as conn:
            conn.execute(
                """
                INSERT INTO sessions (id, topic, role, status, created_at, updated_at)
                VALUES (?, ?, ?, 'planning', ?, ?)
                """,
                (session_id, topic, role, now, now),
            )
        return self.require_session(session_id)

    def get_session(self, session_id: str) -> Optional[Session]:  # Load session with ordered transcript
        with get_conn(self._path) as conn:
            row = conn.execute("SELECT * FROM sessions WHERE id = ?", (session_id,)).fetchone()
            if row is None:
                return None
            messages = conn.execute(
                """
                SELECT role, content, timestamp
                FROM messages
                WHERE session_id = ?
                ORDER BY id ASC
                """,
                (session_id,),
            ).fetchall()
        return _session_from_row(row, messages)

    def require_session(self, session_id: str) -> Session:
        session = self.get_session(session_id)
        if session is None:
            raise NotFound(f"Session {session_id} not found")
        return session

    def recent_sessions(self, limit: int = 20) -> List[Session]:  # Most recently updated sessions first
        with get_conn(self._path) as conn:
            rows = conn.execute(
                "SELECT id FROM sessions ORDER BY updated_at DESC, id DESC LIMIT ?",
                (limit,),
            ).fetchall()
        sessions = [self.get_session(row["id"]) for row in rows]
        return [session for session in sessions if session is not None]

    def update_status(self, session_id: str, status: SessionStatus) -> None:  # Forward-only status transition
        target = STATUS_ORDER.index(status)
        now = self._now()
        with get_conn(self._path) as conn:
            current = _current_status(conn, session_id)
            index = STATUS_ORDER.index(current)
            if index == target:
                return
            if index > target:
                raise InvalidState(f"Cannot move session from {current} back to {status}")
            started_sql = ", interview_started_at = ?" if status == "interviewing" else ""
            params: tuple = (status, now) + ((now,) if started_sql else ()) + (session_id, current)
            cur = conn.execute(
                f"UPDATE sessions SET status = ?, updated_at = ?{started_sql} WHERE id = ? AND status = ?",
                params,
            )
            if cur.rowcount == 0:
                raise InvalidState(f"Session {session_id} changed status concurrently")

    def append_message(self, session_id: str, role: MessageRole, content: str) -> Message:  # Append to the transcript
        now = _as_utc(self._clock())
        with get_conn(self._path) as conn:
            _current_status(conn, session_id)
            last = conn.execute(
                "SELECT timestamp FROM messages WHERE session_id = ? ORDER BY id DESC LIMIT 1",
                (session_id,),
            ).fetchone()
            if last is not None:
                previous = _as_utc(dt.datetime.fromisoformat(last["timestamp"]))
                if previous > now:
                    now = previous
            stamp = now.isoformat()
            conn.execute(
                "INSERT INTO messages (session_id, role, content, timestamp) VALUES (?, ?, ?, ?)",
                (session_id, role, content, stamp),
            )
            conn.execute("UPDATE sessions SET updated_at = ? WHERE id = ?", (self._now(), session_id))
        return Message(role=role, content=content, timestamp=now)

    def save_plan(self, session_id: str, plan: InterviewPlan) -> None:  # Attach plan once
        self._write_once(session_id, "plan", plan.model_dump_json(by_alias=True))

    def save_analysis(self, session_id: str, analysis: InterviewAnalysis) -> None:  # Attach analysis once
        self._write_once(session_id, "analysis", analysis.model_dump_json(by_alias=True))

    def increment_cost(self, session_id: str, tokens: int, cost: float) -> None:  # Additive cost update
        if tokens < 0 or cost < 0:
            raise ValueError("Cost increments must be non-negative")
        with get_conn(self._path) as conn:
            cur = conn.execute(
                """
                UPDATE sessions
                SET cost_tokens = cost_tokens + ?, cost_amount = cost_amount + ?, updated_at = ?
                WHERE id = ?
                """,
                (tokens, cost, self._now(), session_id),
            )
            if cur.rowcount == 0:
                raise NotFound(f"Session {session_id} not found")

    def _write_once(self, session_id: str, column: str, payload: str) -> None:
        with get_conn(self._path) as conn:
            cur = conn.execute(
                f"UPDATE sessions SET {column} = ?, updated_at = ? WHERE id = ? AND {column} IS NULL",
                (payload, self._now(), session_id),
            )
            if cur.rowcount == 0:
                _current_status(conn, session_id)
                raise InvalidState(f"Session {session_id} already has a {column}")


def _current_status(conn: sqlite3.Connection, session_id: str) -> str:
    row = conn.execute("SELECT status FROM sessions WHERE id = ?", (session_id,)).fetchone()
    if row is None:
        raise NotFound(f"Session {session_id} not found")
    return row["status"]


def _session_from_row(row: sqlite3.Row, messages: List[sqlite3.Row]) -> Session:
    return Session(
        id=row["id"],
        topic=row["topic"],
        role=row["role"],
        status=row["status"],
        created_at=row["created_at"],
        updated_at=row["updated_at"],
        interview_started_at=row["interview_started_at"],
        transcript=[
            Message(role=message["role"], content=message["content"], timestamp=message["timestamp"])
            for message in messages
        ],
        plan=InterviewPlan.model_validate(json.loads(row["plan"])) if row["plan"] else None,
        analysis=InterviewAnalysis.model_validate(json.loads(row["analysis"])) if row["analysis"] else None,
        cost=CostTotals(tokens=row["cost_tokens"], cost=row["cost_amount"]),
    )


__all__ = ["SessionStore"]
