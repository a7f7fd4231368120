from __future__ import annotations

import math

from .database import SQLiteMemoryDB
from .time_utils import to_iso, utc_now

ROLE_PREFIXES = {"user": "User", "assistant": "Assistant"}


def estimate_tokens(text: str) -> int:
    # Roughly four characters per token for English text.
    return max(1, math.ceil(len(text) / 4))


class ConversationStore:
    """Per conversation log of ``User:`` / ``Assistant:`` lines."""

    def __init__(self, db: SQLiteMemoryDB) -> None:
        self._db = db

    def append_line(self, *, conversation_id: str, role: str, text: str) -> None:
        if role not in ROLE_PREFIXES:
            raise ValueError(f"Unknown history role: {role}")
        with self._db.connection() as conn:
            conn.execute(
                """
                INSERT INTO conversation_history (conversation_id, role, text, created_at)
                VALUES (?, ?, ?, ?)
                """,
                (conversation_id, role, text, to_iso(utc_now())),
            )

    def recent_lines(self, conversation_id: str, limit: int | None = None) -> list[str]:
        sql = """
            SELECT role, text
            FROM conversation_history
            WHERE conversation_id = ?
            ORDER BY seq DESC
        """
        params: tuple = (conversation_id,)
        if limit is not None:
            sql += " LIMIT ?"
            params = (conversation_id, max(0, limit))
        with self._db.connection() as conn:
            rows = conn.execute(sql, params).fetchall()
        return [f"{ROLE_PREFIXES[row['role']]}: {row['text']}" for row in reversed(rows)]

    def history_text(self, conversation_id: str, max_tokens: int = 1000, separator: str = "\n") -> str:
        kept: list[str] = []
        tokens = 0
        for line in reversed(self.recent_lines(conversation_id)):
            line_tokens = estimate_tokens(line)
            if kept and tokens + line_tokens > max_tokens:
                break
            kept.append(line)
            tokens += line_tokens
        return separator.join(reversed(kept))

    def trim(self, *, conversation_id: str, max_turns: int) -> None:
        keep = max(0, max_turns) * 2
        with self._db.connection() as conn:
            conn.execute(
                """
                DELETE FROM conversation_history
                WHERE conversation_id = ?
                  AND seq NOT IN (
                    SELECT seq FROM conversation_history
                    WHERE conversation_id = ?
                    ORDER BY seq DESC
                    LIMIT ?
                  )
                """,
                (conversation_id, conversation_id, keep),
            )

