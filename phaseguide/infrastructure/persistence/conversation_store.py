"""Conversation store - one SQLite database per project.

Lives at ``<project>/<state_dir>/<database_file>``. Every method opens a short
connection scoped to a single unit of work.
"""

import json
import logging
import sqlite3
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from phaseguide.domain.entities.conversation import (
    Conversation,
    InteractionLog,
    derive_conversation_id,
    plan_file_name,
)
from phaseguide.domain.errors import ResetNotConfirmedError
from phaseguide.domain.ports.config import PersistenceConfig
from phaseguide.infrastructure.persistence.database import connect

logger = logging.getLogger(__name__)

_UPDATABLE_FIELDS = frozenset({"current_phase", "workflow_name", "plan_file_path"})


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _to_conversation(row: sqlite3.Row) -> Conversation:
    return Conversation(**dict(row))


def _to_log(row: sqlite3.Row) -> InteractionLog:
    return InteractionLog(**dict(row))


class ConversationStore:
    """Conversation rows and the append-only interaction log of one project."""

    def __init__(self, project_path: str, config: PersistenceConfig | None = None) -> None:
        config = config or PersistenceConfig()
        self._project_path = project_path
        self._state_dir = Path(project_path) / config.state_dir
        self._db_path = self._state_dir / config.database_file

    @property
    def project_path(self) -> str:
        return self._project_path

    @property
    def db_path(self) -> Path:
        return self._db_path

    def plan_file_path(self, git_branch: str) -> str:
        return str(self._state_dir / plan_file_name(git_branch))

    def get(self, git_branch: str) -> Conversation | None:
        """Conversation for (this project, branch), or None."""
        with connect(self._db_path) as conn:
            row = conn.execute(
                "SELECT * FROM conversation_states WHERE project_path = ? AND git_branch = ?",
                (self._project_path, git_branch),
            ).fetchone()
        return _to_conversation(row) if row else None

    def get_by_id(self, conversation_id: str) -> Conversation | None:
        with connect(self._db_path) as conn:
            row = conn.execute(
                "SELECT * FROM conversation_states WHERE conversation_id = ?",
                (conversation_id,),
            ).fetchone()
        return _to_conversation(row) if row else None

    def get_or_create(
        self, git_branch: str, workflow_name: str, initial_phase: str
    ) -> tuple[Conversation, bool]:
        """Existing conversation for the branch, or a new one at initial_phase.

        Returns (conversation, created). Creation is INSERT OR IGNORE on the
        derived id, so concurrent first calls converge on a single row.
        """
        conversation_id = derive_conversation_id(self._project_path, git_branch)
        now = _now()
        with connect(self._db_path) as conn:
            cursor = conn.execute(
                "INSERT OR IGNORE INTO conversation_states "
                "(conversation_id, project_path, git_branch, current_phase, workflow_name, "
                "plan_file_path, created_at, updated_at) VALUES (?, ?, ?, ?, ?, ?, ?, ?)",
                (
                    conversation_id,
                    self._project_path,
                    git_branch,
                    initial_phase,
                    workflow_name,
                    self.plan_file_path(git_branch),
                    now,
                    now,
                ),
            )
            created = cursor.rowcount == 1
            row = conn.execute(
                "SELECT * FROM conversation_states WHERE conversation_id = ?",
                (conversation_id,),
            ).fetchone()
        if created:
            logger.info("Created conversation %s (workflow %s)", conversation_id, workflow_name)
        return _to_conversation(row), created

    def update(self, conversation_id: str, /, **patch: Any) -> Conversation:
        """Apply a partial update and refresh updated_at.

        Only current_phase, workflow_name and plan_file_path may change.
        """
        unknown = set(patch) - _UPDATABLE_FIELDS
        if unknown:
            raise ValueError(f"cannot update conversation fields: {', '.join(sorted(unknown))}")
        patch["updated_at"] = _now()
        assignments = ", ".join(f"{column} = ?" for column in patch)
        with connect(self._db_path) as conn:
            cursor = conn.execute(
                f"UPDATE conversation_states SET {assignments} WHERE conversation_id = ?",
                (*patch.values(), conversation_id),
            )
            if cursor.rowcount == 0:
                raise LookupError(f"conversation {conversation_id} does not exist")
            row = conn.execute(
                "SELECT * FROM conversation_states WHERE conversation_id = ?",
                (conversation_id,),
            ).fetchone()
        return _to_conversation(row)

    def has_prior_interactions(self, conversation_id: str) -> bool:
        """True if any non-reset interaction row exists for the conversation."""
        with connect(self._db_path) as conn:
            row = conn.execute(
                "SELECT COUNT(*) FROM interaction_logs WHERE conversation_id = ? AND reset_at IS NULL",
                (conversation_id,),
            ).fetchone()
        return row[0] > 0

    def log_interaction(
        self,
        conversation_id: str,
        tool_name: str,
        input_params: dict[str, Any],
        response_data: dict[str, Any],
        current_phase: str,
    ) -> InteractionLog:
        entry = InteractionLog(
            conversation_id=conversation_id,
            tool_name=tool_name,
            input_params=json.dumps(input_params, default=str),
            response_data=json.dumps(response_data, default=str),
            current_phase=current_phase,
            timestamp=_now(),
        )
        with connect(self._db_path) as conn:
            cursor = conn.execute(
                "INSERT INTO interaction_logs "
                "(conversation_id, tool_name, input_params, response_data, current_phase, timestamp) "
                "VALUES (?, ?, ?, ?, ?, ?)",
                (
                    entry.conversation_id,
                    entry.tool_name,
                    entry.input_params,
                    entry.response_data,
                    entry.current_phase,
                    entry.timestamp,
                ),
            )
            entry.id = cursor.lastrowid
        return entry

    def list_interactions(self, conversation_id: str, include_reset: bool = False) -> list[InteractionLog]:
        """Interaction rows in insertion order; soft-deleted rows only on request."""
        query = "SELECT * FROM interaction_logs WHERE conversation_id = ?"
        if not include_reset:
            query += " AND reset_at IS NULL"
        with connect(self._db_path) as conn:
            rows = conn.execute(query + " ORDER BY id", (conversation_id,)).fetchall()
        return [_to_log(row) for row in rows]

    def reset(
        self, conversation_id: str, reason: str | None = None, *, confirm: bool = False
    ) -> tuple[int, bool]:
        """Soft-delete interaction rows and delete the conversation row.

        Both happen in one transaction. Returns (soft_deleted_rows, conversation_deleted).
        Raises ResetNotConfirmedError unless confirm is true.
        """
        if not confirm:
            raise ResetNotConfirmedError()
        with connect(self._db_path) as conn:
            marked = conn.execute(
                "UPDATE interaction_logs SET reset_at = ?, reset_reason = ? "
                "WHERE conversation_id = ? AND reset_at IS NULL",
                (_now(), reason, conversation_id),
            ).rowcount
            deleted = conn.execute(
                "DELETE FROM conversation_states WHERE conversation_id = ?",
                (conversation_id,),
            ).rowcount
        logger.info(
            "Reset conversation %s: %d interaction rows soft-deleted", conversation_id, marked
        )
        return marked, deleted > 0
