from typing import Any

from psycopg.rows import dict_row
from psycopg.types.json import Jsonb

from conformity.database.connection import get_connection
from conformity.database.models import ExtractionRecord


class ExtractionRepository:
    """Database operations for the extractions table."""

    def create(
        self,
        file_name: str,
        extracted_data: dict[str, Any],
        *,
        success: bool,
        error_message: str | None = None,
    ) -> str:
        """Insert a persisted extraction result and return its generated id."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    INSERT INTO extractions (file_name, extracted_data, success, error_message)
                    VALUES (%s, %s, %s, %s)
                    RETURNING id
                    """,
                    (file_name, Jsonb(extracted_data), success, error_message),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            raise RuntimeError("INSERT into extractions returned no row")
        return str(row[0])

    def update(
        self,
        extraction_id: str,
        file_name: str,
        extracted_data: dict[str, Any],
        *,
        success: bool,
        error_message: str | None = None,
    ) -> bool:
        """Overwrite an existing extraction in place. Returns False if it is gone."""
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE extractions
                    SET file_name = %s, extracted_data = %s, success = %s,
                        error_message = %s, updated_at = NOW()
                    WHERE id = %s
                    """,
                    (file_name, Jsonb(extracted_data), success, error_message, extraction_id),
                )
                updated = cur.rowcount
            conn.commit()
        return updated == 1

    def save(
        self,
        extraction_id: str | None,
        file_name: str,
        extracted_data: dict[str, Any],
        *,
        success: bool,
        error_message: str | None = None,
    ) -> str:
        """Update the given extraction when it exists, otherwise insert a new one."""
        if extraction_id is not None and self.update(
            extraction_id,
            file_name,
            extracted_data,
            success=success,
            error_message=error_message,
        ):
            return extraction_id
        return self.create(
            file_name,
            extracted_data,
            success=success,
            error_message=error_message,
        )

    def find_by_id(self, extraction_id: str) -> ExtractionRecord | None:
        """Find a persisted extraction by ID."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT id, file_name, extracted_data, success, error_message,
                           created_at, updated_at
                    FROM extractions
                    WHERE id = %s
                    """,
                    (extraction_id,),
                )
                row = cur.fetchone()

        if row is None:
            return None

        return ExtractionRecord(
            id=str(row["id"]),
            file_name=row["file_name"],
            extracted_data=row["extracted_data"],
            success=row["success"],
            error_message=row["error_message"],
            created_at=row["created_at"],
            updated_at=row["updated_at"],
        )
