from pathlib import Path

import pytest

from conformity.config.settings import Settings
from conformity.database.models import JobRecord
from conformity.database.repositories.extraction_repository import ExtractionRepository
from conformity.database.repositories.job_repository import JobRepository
from conformity.processor.exceptions import DocumentNotFoundError
from conformity.processor.processor import build_processor


@pytest.mark.integration
class TestProcessorIntegration:
    def test_processes_report_and_persists_extraction(
        self,
        seed_job: JobRecord,
        report_on_disk: Path,
        files_root: Path,
        job_repo: JobRepository,
        test_settings: Settings,
        integration_cleanup: list[tuple[str, str]],
    ) -> None:
        processor = build_processor(test_settings, job_repo, files_root=files_root)

        context = processor.process(seed_job)

        assert context.extraction_id is not None
        integration_cleanup.append(("extractions", context.extraction_id))
        record = ExtractionRepository().find_by_id(context.extraction_id)
        assert record is not None
        assert record.success is True
        assert record.file_name == "report.pdf"
        assert "Enterobatteriacee" in record.extracted_data["corpus"]
        assert record.extracted_data["used_recovery"] is False
        assert record.extracted_data["profile"] is not None

        job = job_repo.find_by_id(seed_job.id)
        assert job is not None
        assert job.progress_percent == 80

    def test_missing_document_raises_not_found(
        self,
        seed_job: JobRecord,
        files_root: Path,
        job_repo: JobRepository,
        test_settings: Settings,
    ) -> None:
        processor = build_processor(test_settings, job_repo, files_root=files_root)

        with pytest.raises(DocumentNotFoundError, match="was not found"):
            processor.process(seed_job)
