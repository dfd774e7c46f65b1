from conformity.config.settings import Settings
from conformity.database.models import JobRecord
from conformity.database.repositories.extraction_repository import ExtractionRepository
from conformity.database.repositories.job_repository import JobRepository
from conformity.logging.logger import Log
from conformity.pdf.exceptions import PdfExtractionError
from conformity.processor.exceptions import ProcessorError
from conformity.processor.processor import Processor
from conformity.processor.result_serializer import ResultSerializer

# Failures that no retry can fix: missing or unreadable input documents.
PERMANENT_ERRORS: tuple[type[Exception], ...] = (ProcessorError, PdfExtractionError)


class JobRunner:
    """Run one job, catch exceptions, and apply retry logic."""

    def __init__(
        self,
        processor: Processor,
        job_repo: JobRepository,
        extraction_repo: ExtractionRepository,
        settings: Settings,
        serializer: ResultSerializer | None = None,
    ) -> None:
        self._processor = processor
        self._job_repo = job_repo
        self._extraction_repo = extraction_repo
        self._settings = settings
        self._serializer = serializer or ResultSerializer()

    def run(self, job: JobRecord) -> None:
        """Execute a single job with error handling."""
        Log.info(f"Running job {job.id} (attempt {job.attempts + 1})")
        try:
            context = self._processor.process(job)
            if context.extraction_id is None:
                raise RuntimeError("Pipeline finished without persisting an extraction")
            self._job_repo.mark_completed(job.id, context.extraction_id)
            Log.info(f"Job {job.id} completed successfully")
        except Exception as exc:
            self._handle_failure(job, exc)

    def backoff_seconds(self, attempts: int) -> float:
        """Exponential delay before the next attempt."""
        return float(self._settings.job_backoff_base_seconds * 2**attempts)

    def _handle_failure(self, job: JobRecord, exc: Exception) -> None:
        """Retry transient errors with backoff; record permanent ones as failed."""
        message = str(exc) or exc.__class__.__name__
        Log.error(f"Job {job.id} failed: {message}")

        if isinstance(exc, PERMANENT_ERRORS):
            self._fail(job, message)
            Log.error(f"Job {job.id} failed permanently: {exc.__class__.__name__}")
        elif job.attempts + 1 >= self._settings.max_job_attempts:
            self._fail(job, message)
            Log.error(f"Job {job.id} permanently failed after {job.attempts + 1} attempts")
        else:
            delay = self.backoff_seconds(job.attempts)
            self._job_repo.schedule_retry(job.id, delay, message)
            Log.warning(
                f"Job {job.id} will be retried in {delay:g}s (attempt {job.attempts + 2})"
            )

    def _fail(self, job: JobRecord, message: str) -> None:
        extraction_id: str | None = None
        try:
            extraction_id = self._extraction_repo.save(
                job.extraction_id,
                job.file_name,
                self._serializer.failure(job.file_reference, message),
                success=False,
                error_message=message,
            )
        except Exception:
            Log.exception(f"Could not persist failure record for job {job.id}")
        self._job_repo.mark_failed(job.id, message, extraction_id)
