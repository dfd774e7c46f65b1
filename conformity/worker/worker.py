import time
from concurrent.futures import FIRST_COMPLETED, Future, ThreadPoolExecutor, wait

from conformity.config.settings import Settings
from conformity.database.connection import get_connection
from conformity.database.models import JobRecord
from conformity.database.repositories.job_repository import JobRepository
from conformity.logging.logger import Log
from conformity.worker.job_runner import JobRunner
from conformity.worker.rate_limiter import RateLimiter


class Worker:
    """Poll loop: throttle -> claim -> dispatch to a bounded thread pool."""

    def __init__(
        self,
        job_repo: JobRepository,
        job_runner: JobRunner,
        settings: Settings,
        rate_limiter: RateLimiter | None = None,
    ) -> None:
        self._job_repo = job_repo
        self._job_runner = job_runner
        self._settings = settings
        self._concurrency = max(1, int(settings.worker_concurrency))
        self._rate_limiter = rate_limiter or RateLimiter(settings.worker_max_jobs_per_second)

    def run(self, max_jobs: int | None = None) -> None:
        """Main poll loop. Runs forever until interrupted.

        If max_jobs is set, stop after dispatching that many jobs (for testing).
        In-flight jobs always run to completion before this returns.
        """
        Log.info(f"Worker started with {self._concurrency} slots, polling for jobs")
        jobs_done = 0
        in_flight: set[Future[None]] = set()
        with ThreadPoolExecutor(
            max_workers=self._concurrency, thread_name_prefix="job"
        ) as pool:
            try:
                while max_jobs is None or jobs_done < max_jobs:
                    in_flight = {f for f in in_flight if not f.done()}
                    if len(in_flight) >= self._concurrency:
                        wait(in_flight, return_when=FIRST_COMPLETED)
                        continue
                    self._rate_limiter.acquire()
                    job = self._try_claim_job()
                    if job:
                        future = pool.submit(self._job_runner.run, job)
                        future.add_done_callback(self._log_crash)
                        in_flight.add(future)
                        jobs_done += 1
                    else:
                        Log.debug("No jobs available, sleeping")
                        time.sleep(self._settings.job_poll_interval_seconds)
            except KeyboardInterrupt:
                Log.info("Worker shutting down gracefully, waiting for running jobs")

    def _try_claim_job(self) -> JobRecord | None:
        """Attempt to claim the next pending job. Gracefully handle DB errors."""
        try:
            with get_connection() as conn:
                return self._job_repo.claim_next_job(conn)
        except Exception as exc:
            Log.warning(f"Database error, will retry: {exc}")
            return None

    @staticmethod
    def _log_crash(future: "Future[None]") -> None:
        exc = future.exception()
        if exc is not None:
            Log.error(f"Job runner crashed outside its error handling: {exc}")
