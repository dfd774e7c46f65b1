from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from conformity.catalog.models import RuleCategory
from conformity.classification.models import SampleProfile
from conformity.decision.models import ComplianceVerdict
from conformity.extraction.models import ParameterReading
from conformity.pdf.models import TextFragment
from conformity.recovery.stage import RecoveryOutcome


@dataclass(slots=True)
class PipelineContext:
    job_id: str
    file_reference: str
    file_name: str
    force_recovery: bool = False
    existing_extraction_id: str | None = None
    raw_bytes: bytes = b""
    fragments: list[TextFragment] = field(default_factory=list)
    recovery: RecoveryOutcome | None = None
    corpus: str = ""
    profile: SampleProfile | None = None
    readings: list[ParameterReading] = field(default_factory=list)
    rule_set: RuleCategory | None = None
    verdicts: list[ComplianceVerdict] = field(default_factory=list)
    extraction_id: str | None = None


class PipelineStep(ABC):
    # Progress reported once the step finishes; None for no milestone.
    progress_percent: int | None = None

    @abstractmethod
    def run(self, context: PipelineContext) -> PipelineContext:
        raise NotImplementedError
