from dataclasses import dataclass, field
from enum import Enum


class Band(str, Enum):
    """Compliance band a result falls into."""

    SATISFACTORY = "satisfactory"
    ACCEPTABLE = "acceptable"
    UNSATISFACTORY = "unsatisfactory"
    UNDETERMINED = "undetermined"

    @property
    def is_compliant(self) -> bool | None:
        if self in (Band.SATISFACTORY, Band.ACCEPTABLE):
            return True
        if self is Band.UNSATISFACTORY:
            return False
        return None


DECIDED_DETERMINISTIC = "deterministic"
DECIDED_SEMANTIC = "semantic"
DECIDED_NONE = "none"

# Why the engine reached its band; only LIMITS_UNPARSEABLE allows a semantic retry.
REASON_EMPTY_RESULT = "empty_result"
REASON_QUALITATIVE = "qualitative"
REASON_UNIT_MISMATCH = "unit_mismatch"
REASON_NO_LIMITS = "no_limits"
REASON_LIMITS_UNPARSEABLE = "limits_unparseable"
REASON_NON_NUMERIC_RESULT = "non_numeric_result"
REASON_BANDED = "banded"
REASON_OUT_OF_BANDS = "out_of_bands"


@dataclass(frozen=True)
class Decision:
    """Outcome of the deterministic threshold engine for one reading."""

    band: Band
    applied_limit: str
    rationale: str
    reason: str

    @property
    def is_compliant(self) -> bool | None:
        return self.band.is_compliant


@dataclass(frozen=True)
class Evidence:
    """A source backing a verdict, normally the limits that were applied."""

    id: str
    title: str
    excerpt: str
    url: str | None = None

    def to_dict(self) -> dict[str, object]:
        return {"id": self.id, "title": self.title, "url": self.url, "excerpt": self.excerpt}


@dataclass(frozen=True)
class ComplianceVerdict:
    """Final per-parameter outcome. is_compliant is always derived from band."""

    parameter_name: str
    applied_limit_text: str
    band: Band
    rationale: str
    evidence: tuple[Evidence, ...] = field(default_factory=tuple)
    reference_parameter: str | None = None
    result_text: str = ""
    unit_text: str = ""
    decided_by: str = DECIDED_DETERMINISTIC

    @property
    def is_compliant(self) -> bool | None:
        return self.band.is_compliant

    def to_dict(self) -> dict[str, object]:
        return {
            "parameter_name": self.parameter_name,
            "reference_parameter": self.reference_parameter,
            "result_text": self.result_text,
            "unit_text": self.unit_text,
            "applied_limit_text": self.applied_limit_text,
            "band": self.band.value,
            "is_compliant": self.is_compliant,
            "rationale": self.rationale,
            "decided_by": self.decided_by,
            "evidence": [item.to_dict() for item in self.evidence],
        }
