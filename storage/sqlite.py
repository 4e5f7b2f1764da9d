"""SQLite helpers for the persistence layer."""
from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from pathlib import Path
from typing import Iterator, Union

from interview.errors import PersistenceFailure


@contextmanager
def get_conn(db_path: Union[str, Path]) -> Iterator[sqlite3.Connection]:
    """Yield a SQLite connection in one transaction, ensuring the data directory exists.

    Driver errors surface as ``PersistenceFailure``.
    """

    path = Path(db_path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        conn = sqlite3.connect(path)
    except (OSError, sqlite3.Error) as exc:
        raise PersistenceFailure(f"Unable to open database {path}") from exc
    conn.row_factory = sqlite3.Row
    try:
        conn.execute("PRAGMA foreign_keys = ON")
        yield conn
        conn.commit()
    except sqlite3.Error as exc:
        conn.rollback()
        raise PersistenceFailure(str(exc)) from exc
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
