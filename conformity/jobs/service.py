from dataclasses import dataclass
from pathlib import PurePosixPath
from typing import Any

from conformity.database.repositories.extraction_repository import ExtractionRepository
from conformity.database.repositories.job_repository import JobRepository
from conformity.logging.logger import Log
from conformity.processor.exceptions import JobNotFoundError

TERMINAL_STATES = ("completed", "failed")


@dataclass
class JobStatus:
    """What a polling client sees for one job."""

    job_id: str
    state: str
    progress_percent: int
    result: dict[str, Any] | None = None
    error_message: str | None = None


class JobService:
    """Submission and polling surface for the processing queue."""

    def __init__(
        self,
        job_repo: JobRepository,
        extraction_repo: ExtractionRepository,
    ) -> None:
        self._job_repo = job_repo
        self._extraction_repo = extraction_repo

    def submit(
        self,
        file_reference: str,
        file_name: str | None = None,
        *,
        force_recovery: bool = False,
        existing_job_id: str | None = None,
    ) -> str:
        """Queue a document and return its job id.

        With existing_job_id the existing job is sent back through the
        pipeline instead of creating a new one.
        """
        if existing_job_id is not None:
            return self.reprocess(existing_job_id, force_recovery=force_recovery)

        name = file_name or PurePosixPath(file_reference).name or file_reference
        job = self._job_repo.create(file_reference, name, force_recovery=force_recovery)
        Log.info(f"Submitted job {job.id} for {file_reference}")
        return job.id

    def reprocess(self, job_id: str, force_recovery: bool = False) -> str:
        """Reset a finished job to pending, keeping its id and extraction record."""
        job = self._job_repo.find_by_id(job_id)
        if job is None:
            raise JobNotFoundError(f"Job not found: {job_id}")

        if self._job_repo.reset_for_reprocess(job_id, force_recovery):
            Log.info(f"Job {job_id} queued for reprocessing (force_recovery={force_recovery})")
        else:
            Log.warning(f"Job {job_id} is still {job.state}, reprocess request ignored")
        return job_id

    def poll(self, job_id: str) -> JobStatus:
        job = self._job_repo.find_by_id(job_id)
        if job is None:
            raise JobNotFoundError(f"Job not found: {job_id}")

        result: dict[str, Any] | None = None
        if job.state in TERMINAL_STATES and job.extraction_id is not None:
            extraction = self._extraction_repo.find_by_id(job.extraction_id)
            if extraction is not None:
                result = extraction.extracted_data

        return JobStatus(
            job_id=job.id,
            state=job.state,
            progress_percent=job.progress_percent,
            result=result,
            error_message=job.error_message,
        )
