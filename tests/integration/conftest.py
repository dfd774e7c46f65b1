import os
from collections.abc import Generator
from pathlib import Path
from typing import Any

import psycopg
import pytest

from conformity.config.settings import Settings
from conformity.database.connection import close_pool, get_connection, init_pool
from conformity.database.models import JobRecord
from conformity.database.repositories.job_repository import JobRepository

PROJECT_ROOT = Path(__file__).resolve().parents[2]
SCHEMA_PATH = PROJECT_ROOT / "conformity" / "database" / "schema.sql"
CATALOG_PATH = PROJECT_ROOT / "dataset" / "regulatory_catalog.json"


def _test_settings() -> Settings:
    os.environ.setdefault("DB_DATABASE", "conformity_test")
    return Settings(
        llm_provider="example",
        ocr_enabled=False,
        regulatory_catalog_path=str(CATALOG_PATH),
        job_backoff_base_seconds=0,
        worker_concurrency=1,
        worker_max_jobs_per_second=0,
    )


@pytest.fixture(scope="session")
def test_settings() -> Settings:
    return _test_settings()


@pytest.fixture(scope="session")
def integration_pool(test_settings: Settings) -> Generator[None, None, None]:
    try:
        init_pool(test_settings)
        with get_connection() as conn:
            conn.execute(SCHEMA_PATH.read_text(encoding="utf-8"))  # type: ignore[arg-type]
            conn.commit()
    except Exception as e:
        close_pool()
        pytest.skip(
            f"PostgreSQL test DB not available: {e}. "
            "Set DB_* env to point at a disposable database"
        )
    try:
        yield
    finally:
        close_pool()


@pytest.fixture
def db_conn(integration_pool: None) -> Generator[psycopg.Connection[Any], None, None]:
    with get_connection() as conn:
        yield conn


@pytest.fixture
def integration_cleanup(
    integration_pool: None,
) -> Generator[list[tuple[str, str]], None, None]:
    cleanup: list[tuple[str, str]] = []
    yield cleanup
    if not cleanup:
        return
    with get_connection() as conn:
        with conn.cursor() as cur:
            for table, row_id in cleanup:
                if table == "processing_jobs":
                    cur.execute("DELETE FROM processing_jobs WHERE id = %s", (row_id,))
            for table, row_id in cleanup:
                if table == "extractions":
                    cur.execute("DELETE FROM extractions WHERE id = %s", (row_id,))
            for table, row_id in cleanup:
                if table == "custom_categories":
                    cur.execute("DELETE FROM custom_categories WHERE id = %s", (row_id,))
        conn.commit()


@pytest.fixture
def job_repo(test_settings: Settings) -> JobRepository:
    return JobRepository(
        max_attempts=test_settings.max_job_attempts,
        stale_after_seconds=test_settings.job_stale_after_seconds,
    )


@pytest.fixture
def seed_job(
    job_repo: JobRepository,
    integration_cleanup: list[tuple[str, str]],
) -> JobRecord:
    job = job_repo.create("reports/report.pdf", "report.pdf")
    integration_cleanup.append(("processing_jobs", job.id))
    return job


@pytest.fixture
def files_root(tmp_path: Path) -> Path:
    return tmp_path


@pytest.fixture
def report_on_disk(files_root: Path, report_pdf_bytes: bytes) -> Path:
    path = files_root / "reports" / "report.pdf"
    path.parent.mkdir(parents=True)
    path.write_bytes(report_pdf_bytes)
    return path
