"""Lightweight CLI helpers for inspecting stored interview sessions."""
from __future__ import annotations

import argparse
from typing import Optional, Sequence

from config.settings import settings
from storage.sessions import SessionStore


def tail_sessions(store: SessionStore, limit: int = 20) -> None:
    for session in store.recent_sessions(limit):
        print(
            f"[{session.updated_at.isoformat()}] {session.id} status={session.status} "
            f"topic={session.topic!r} messages={len(session.transcript)} "
            f"tokens={session.cost.tokens} cost=${session.cost.cost:.4f}"
        )


def show_session(store: SessionStore, session_id: str) -> int:
    session = store.get_session(session_id)
    if session is None:
        print(f"session {session_id} not found")
        return 1
    print(f"{session.id} status={session.status} topic={session.topic!r} role={session.role}")
    print(f"tokens={session.cost.tokens} cost=${session.cost.cost:.4f}")
    for message in session.transcript:
        print(f"[{message.timestamp.isoformat()}] {message.role}: {message.content}")
    if session.analysis is not None:
        print(
            f"analysis depth={session.analysis.depth_score} "
            f"completion={session.analysis.completion_rate:.2f} :: {session.analysis.summary}"
        )
    return 0


def main(argv: Optional[Sequence[str]] = None) -> int:
    parser = argparse.ArgumentParser()
    parser.add_argument("--db", default=settings.DB_PATH, help="SQLite database path")
    parser.add_argument("--tail-sessions", type=int, help="Show the most recently updated sessions")
    parser.add_argument("--show", metavar="SESSION_ID", help="Print one session transcript")
    args = parser.parse_args(argv)

    store = SessionStore(args.db)
    status = 0
    if args.tail_sessions:
        tail_sessions(store, args.tail_sessions)
    if args.show:
        status = show_session(store, args.show)
    return status


if __name__ == "__main__":
    raise SystemExit(main())
