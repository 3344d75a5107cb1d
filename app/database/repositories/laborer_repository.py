from datetime import datetime, timezone
from typing import Any

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from app.database.connection import get_connection
from app.database.models import LaborerRecord
from app.processor.exceptions import LaborerNotFoundError
from app.processor.models import OcrStatus


class LaborerRepository:
    """Document-style operations for the laborers table.

    Each laborer row holds a JSON document; updates merge top-level keys
    (``data || patch``) so untouched fields survive.
    """

    def find(self, user_id: str, laborer_id: str) -> LaborerRecord | None:
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT user_id, laborer_id, data, updated_at
                    FROM laborers
                    WHERE user_id = %s AND laborer_id = %s
                    """,
                    (user_id, laborer_id),
                )
                row = cur.fetchone()

        if row is None:
            return None

        return LaborerRecord(
            user_id=row["user_id"],
            laborer_id=row["laborer_id"],
            data=row["data"] or {},
            updated_at=row["updated_at"],
        )

    def merge_update(self, user_id: str, laborer_id: str, fields: dict[str, Any]) -> None:
        """Overwrite the given top-level fields of a laborer document.

        Raises:
            LaborerNotFoundError: if the laborer does not exist.
        """
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE laborers
                    SET data = COALESCE(data, '{}'::jsonb) || %s,
                        updated_at = NOW()
                    WHERE user_id = %s AND laborer_id = %s
                    """,
                    (Jsonb(fields), user_id, laborer_id),
                )
                if cur.rowcount == 0:
                    raise LaborerNotFoundError(
                        f"Laborer {laborer_id} not found for user {user_id}"
                    )
            conn.commit()

    def update_ocr_status(
        self,
        user_id: str,
        laborer_id: str,
        status: OcrStatus,
        error: str | None = None,
    ) -> None:
        """Set the W-9 OCR status (and error message, when given)."""
        now = datetime.now(timezone.utc).isoformat()
        fields: dict[str, Any] = {
            "w9OcrStatus": status.value,
            "w9OcrUpdatedAt": now,
            "updatedAt": now,
        }
        if error:
            fields["w9OcrError"] = error
        self.merge_update(user_id, laborer_id, fields)
