from conformity.config.settings import Settings
from conformity.database.connection import close_pool, init_pool
from conformity.database.repositories.extraction_repository import ExtractionRepository
from conformity.database.repositories.job_repository import JobRepository
from conformity.logging.logger import Log
from conformity.processor.processor import build_processor
from conformity.worker.job_runner import JobRunner
from conformity.worker.rate_limiter import RateLimiter
from conformity.worker.worker import Worker


def main() -> None:
    """Entry point: initialize pool -> build dependencies -> start worker loop."""
    settings = Settings()
    Log.configure(settings.log_level)
    init_pool(settings)

    try:
        job_repo = JobRepository(
            settings.max_job_attempts,
            stale_after_seconds=settings.job_stale_after_seconds,
        )
        processor = build_processor(settings, job_repo)
        job_runner = JobRunner(processor, job_repo, ExtractionRepository(), settings)
        worker = Worker(
            job_repo,
            job_runner,
            settings,
            rate_limiter=RateLimiter(settings.worker_max_jobs_per_second),
        )
        worker.run()
    finally:
        close_pool()


if __name__ == "__main__":
    main()
