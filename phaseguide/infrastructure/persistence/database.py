"""SQLite storage for conversation state and the interaction audit trail."""

import contextlib
import logging
import sqlite3
from collections.abc import Iterator
from pathlib import Path

logger = logging.getLogger(__name__)

SCHEMA_VERSION = 1

# foreign_keys stays off: reset deletes the conversation row while its
# soft-deleted interaction rows remain queryable by conversation_id.
SCHEMA = """\
CREATE TABLE IF NOT EXISTS conversation_states (
    conversation_id TEXT PRIMARY KEY,
    project_path TEXT NOT NULL,
    git_branch TEXT NOT NULL,
    current_phase TEXT NOT NULL,
    workflow_name TEXT NOT NULL,
    plan_file_path TEXT NOT NULL,
    created_at TEXT NOT NULL,
    updated_at TEXT NOT NULL
);

CREATE INDEX IF NOT EXISTS idx_project_branch
    ON conversation_states(project_path, git_branch);

CREATE TABLE IF NOT EXISTS interaction_logs (
    id INTEGER PRIMARY KEY AUTOINCREMENT,
    conversation_id TEXT NOT NULL REFERENCES conversation_states(conversation_id),
    tool_name TEXT NOT NULL,
    input_params TEXT NOT NULL,
    response_data TEXT NOT NULL,
    current_phase TEXT NOT NULL,
    timestamp TEXT NOT NULL,
    reset_at TEXT,
    reset_reason TEXT
);

CREATE INDEX IF NOT EXISTS idx_interaction_conversation_id
    ON interaction_logs(conversation_id);
"""


def get_connection(db_path: Path) -> sqlite3.Connection:
    """Open the database, creating file and schema on first use."""
    db_path.parent.mkdir(parents=True, exist_ok=True)
    conn = sqlite3.connect(str(db_path))
    conn.row_factory = sqlite3.Row
    conn.execute("PRAGMA busy_timeout=5000")
    conn.executescript(SCHEMA)
    current_version = conn.execute("PRAGMA user_version").fetchone()[0]
    if current_version < SCHEMA_VERSION:
        logger.info("Initialized conversation database %s (schema v%d)", db_path, SCHEMA_VERSION)
        conn.execute(f"PRAGMA user_version = {SCHEMA_VERSION}")
        conn.commit()
    return conn


@contextlib.contextmanager
def connect(db_path: Path) -> Iterator[sqlite3.Connection]:
    """Connection scoped to one unit of work: commit on success, always close."""
    conn = get_connection(db_path)
    try:
        yield conn
        conn.commit()
    except Exception:
        conn.rollback()
        raise
    finally:
        conn.close()
