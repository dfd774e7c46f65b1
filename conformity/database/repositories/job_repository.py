from typing import Any

import psycopg
from psycopg.rows import dict_row

from conformity.database.connection import get_connection
from conformity.database.models import JobRecord
from conformity.logging.logger import Log

_JOB_COLUMNS = """
    id, file_reference, file_name, state, progress_percent, attempts,
    force_recovery, extraction_id, error_message, next_attempt_at,
    locked_at, created_at, updated_at
"""

CLAIMED_PROGRESS_PERCENT = 10
STALE_JOB_ERROR = "Worker stopped responding before the job finished"


def _row_to_job(row: dict[str, Any]) -> JobRecord:
    extraction_id = row.get("extraction_id")
    return JobRecord(
        id=str(row["id"]),
        file_reference=row["file_reference"],
        file_name=row["file_name"],
        state=row["state"],
        attempts=row["attempts"],
        progress_percent=row.get("progress_percent", 0),
        force_recovery=row.get("force_recovery", False),
        extraction_id=str(extraction_id) if extraction_id is not None else None,
        error_message=row.get("error_message"),
        next_attempt_at=row.get("next_attempt_at"),
        locked_at=row.get("locked_at"),
        created_at=row.get("created_at"),
        updated_at=row.get("updated_at"),
    )


class JobRepository:
    """Database operations for the processing_jobs table."""

    def __init__(self, max_attempts: int, stale_after_seconds: int = 900) -> None:
        self._max_attempts = max_attempts
        self._stale_after_seconds = stale_after_seconds

    def create(
        self,
        file_reference: str,
        file_name: str,
        *,
        force_recovery: bool = False,
        extraction_id: str | None = None,
    ) -> JobRecord:
        """Insert a new pending job and return it."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    INSERT INTO processing_jobs
                        (file_reference, file_name, force_recovery, extraction_id)
                    VALUES (%s, %s, %s, %s)
                    RETURNING {_JOB_COLUMNS}
                    """,
                    (file_reference, file_name, force_recovery, extraction_id),
                )
                row = cur.fetchone()
            conn.commit()

        if row is None:
            raise RuntimeError("INSERT into processing_jobs returned no row")
        return _row_to_job(row)

    def claim_next_job(self, conn: psycopg.Connection[Any]) -> JobRecord | None:
        """Claim the next due job using SELECT FOR UPDATE SKIP LOCKED.

        Jobs left in processing by a crashed worker are reclaimed once their
        lock is older than stale_after_seconds. A reclaim counts as a spent
        attempt; a stale job with no attempts left is marked failed instead.
        """
        with conn.cursor(row_factory=dict_row) as cur:
            cur.execute(
                f"""
                SELECT {_JOB_COLUMNS}
                FROM processing_jobs
                WHERE (state = 'pending'
                       AND attempts < %s
                       AND next_attempt_at <= NOW())
                   OR (state = 'processing'
                       AND locked_at < NOW() - make_interval(secs => %s))
                ORDER BY created_at
                LIMIT 1
                FOR UPDATE SKIP LOCKED
                """,
                (self._max_attempts, self._stale_after_seconds),
            )
            row = cur.fetchone()

        if row is None:
            conn.commit()
            return None

        attempts = row["attempts"]
        if row["state"] == "processing":
            attempts += 1
            if attempts >= self._max_attempts:
                conn.execute(
                    """
                    UPDATE processing_jobs
                    SET state = 'failed', attempts = %s, error_message = %s,
                        locked_at = NULL, updated_at = NOW()
                    WHERE id = %s
                    """,
                    (attempts, STALE_JOB_ERROR, row["id"]),
                )
                conn.commit()
                Log.error(f"Job {row['id']} failed permanently: {STALE_JOB_ERROR}")
                return None
            Log.warning(f"Reclaiming stale job {row['id']} (attempt {attempts + 1})")

        conn.execute(
            """
            UPDATE processing_jobs
            SET state = 'processing', attempts = %s, progress_percent = %s,
                locked_at = NOW(), updated_at = NOW()
            WHERE id = %s
            """,
            (attempts, CLAIMED_PROGRESS_PERCENT, row["id"]),
        )
        conn.commit()

        job = _row_to_job(row)
        job.state = "processing"
        job.attempts = attempts
        job.progress_percent = CLAIMED_PROGRESS_PERCENT
        return job

    def update_progress(self, job_id: str, progress_percent: int) -> None:
        """Record a progress milestone and refresh the job's lock."""
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE processing_jobs
                SET progress_percent = %s, locked_at = NOW(), updated_at = NOW()
                WHERE id = %s
                """,
                (progress_percent, job_id),
            )
            conn.commit()

    def mark_completed(self, job_id: str, extraction_id: str) -> None:
        """Mark a job as completed and link its persisted extraction."""
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE processing_jobs
                SET state = 'completed', progress_percent = 100,
                    extraction_id = %s, error_message = NULL,
                    locked_at = NULL, updated_at = NOW()
                WHERE id = %s
                """,
                (extraction_id, job_id),
            )
            conn.commit()

    def mark_failed(
        self,
        job_id: str,
        error: str,
        extraction_id: str | None = None,
    ) -> None:
        """Mark a job as permanently failed."""
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE processing_jobs
                SET state = 'failed', error_message = %s,
                    extraction_id = COALESCE(%s, extraction_id),
                    locked_at = NULL, updated_at = NOW()
                WHERE id = %s
                """,
                (error, extraction_id, job_id),
            )
            conn.commit()

    def schedule_retry(self, job_id: str, delay_seconds: float, error: str) -> None:
        """Increment attempt count and return the job to pending after a delay."""
        with get_connection() as conn:
            conn.execute(
                """
                UPDATE processing_jobs
                SET attempts = attempts + 1, state = 'pending',
                    error_message = %s,
                    next_attempt_at = NOW() + make_interval(secs => %s),
                    locked_at = NULL, updated_at = NOW()
                WHERE id = %s
                """,
                (error, delay_seconds, job_id),
            )
            conn.commit()

    def reset_for_reprocess(self, job_id: str, force_recovery: bool) -> bool:
        """Send a terminal job back to pending, keeping its id and extraction link.

        Returns False when the job does not exist or is not in a terminal state.
        """
        with get_connection() as conn:
            with conn.cursor() as cur:
                cur.execute(
                    """
                    UPDATE processing_jobs
                    SET state = 'pending', attempts = 0, progress_percent = 0,
                        force_recovery = %s, error_message = NULL,
                        next_attempt_at = NOW(), locked_at = NULL,
                        updated_at = NOW()
                    WHERE id = %s
                      AND state IN ('completed', 'failed')
                    """,
                    (force_recovery, job_id),
                )
                updated = cur.rowcount
            conn.commit()
        return updated == 1

    def find_by_id(self, job_id: str) -> JobRecord | None:
        """Find a job by ID."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    f"""
                    SELECT {_JOB_COLUMNS}
                    FROM processing_jobs
                    WHERE id = %s
                    """,
                    (job_id,),
                )
                row = cur.fetchone()

        if row is None:
            return None
        return _row_to_job(row)
