from typing import Any

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from app.database.connection import get_connection
from app.database.models import PrequalRecord


class PrequalRepository:
    """Database operations for the prequal table (one document per user)."""

    def find(self, user_id: str) -> PrequalRecord | None:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    "SELECT user_id, data, updated_at FROM prequal WHERE user_id = %s",
                    (user_id,),
                )
                row = cur.fetchone()

        if row is None:
            return None
        return PrequalRecord(
            user_id=row["user_id"],
            data=row["data"] or {},
            updated_at=row["updated_at"],
        )

    def merge(self, user_id: str, fields: dict[str, Any]) -> None:
        """Create the prequal document or merge top-level fields into it."""
        with get_connection() as conn:
            conn.execute(
                """
                INSERT INTO prequal (user_id, data, updated_at)
                VALUES (%s, %s, NOW())
                ON CONFLICT (user_id) DO UPDATE
                SET data = prequal.data || EXCLUDED.data,
                    updated_at = NOW()
                """,
                (user_id, Jsonb(fields)),
            )
            conn.commit()
