from dataclasses import dataclass
from datetime import datetime
from typing import Any


@dataclass
class JobRecord:
    """Represents a row from the processing_jobs table."""

    id: str
    file_reference: str
    file_name: str
    state: str
    attempts: int
    progress_percent: int = 0
    force_recovery: bool = False
    extraction_id: str | None = None
    error_message: str | None = None
    next_attempt_at: datetime | None = None
    locked_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None


@dataclass
class ExtractionRecord:
    """Represents a row from the extractions table."""

    id: str
    file_name: str
    extracted_data: dict[str, Any]
    success: bool
    error_message: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
