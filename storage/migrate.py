"""SQLite schema migrations."""
from __future__ import annotations

import os
import sqlite3
from typing import Iterable

SCHEMA: Iterable[str] = [
    """
CREATE TABLE IF NOT EXISTS sessions (
  id TEXT PRIMARY KEY,
  topic TEXT NOT NULL,
  role TEXT CHECK (role IS NULL OR role IN ('student', 'instructor', 'researcher', 'staff')),
  status TEXT NOT NULL CHECK (status IN ('planning', 'interviewing', 'analyzing', 'completed')),
  created_at TEXT NOT NULL,
  updated_at TEXT NOT NULL,
  interview_started_at TEXT,
  plan TEXT,
  analysis TEXT,
  cost_tokens INTEGER NOT NULL DEFAULT 0,
  cost_amount REAL NOT NULL DEFAULT 0
);
""",
    """
CREATE TABLE IF NOT EXISTS messages (
  id INTEGER PRIMARY KEY AUTOINCREMENT,
  session_id TEXT NOT NULL REFERENCES sessions(id) ON DELETE CASCADE,
  role TEXT NOT NULL CHECK (role IN ('user', 'assistant', 'system')),
  content TEXT NOT NULL,
  timestamp TEXT NOT NULL
);
""",
    "CREATE INDEX IF NOT EXISTS idx_messages_session ON messages(session_id, id);",
    "CREATE INDEX IF NOT EXISTS idx_sessions_status ON sessions(status);",
]


def migrate(db_path: str = "data/interviews.db") -> None:
    """Apply schema migrations to the SQLite database."""

    directory = os.path.dirname(db_path) or "."
    os.makedirs(directory, exist_ok=True)
    conn = sqlite3.connect(db_path)
    try:
        cur = conn.cursor()
        for stmt in SCHEMA:
            cur.execute(stmt)
        conn.commit()
    finally:
        conn.close()


if __name__ == "__main__":
    from config.settings import settings

    migrate(settings.DB_PATH)
