from dataclasses import dataclass, field

from conformity.classification.models import SampleKind

REGULATORY = "regulatory"
CUSTOM = "custom"


@dataclass(frozen=True)
class LimitSet:
    """Free-text limit expressions for the three compliance bands."""

    satisfactory: str | None = None
    acceptable: str | None = None
    unsatisfactory: str | None = None

    def is_empty(self) -> bool:
        return not any(
            (v or "").strip() for v in (self.satisfactory, self.acceptable, self.unsatisfactory)
        )

    def describe(self) -> str:
        """Human-readable summary, e.g. 'Satisfactory: <10^2 | Unsatisfactory: >=10^3'."""
        parts = [
            f"{label}: {value.strip()}"
            for label, value in (
                ("Satisfactory", self.satisfactory),
                ("Acceptable", self.acceptable),
                ("Unsatisfactory", self.unsatisfactory),
            )
            if value and value.strip()
        ]
        return " | ".join(parts)


@dataclass(frozen=True)
class RuleEntry:
    """One parameter definition inside a rule category."""

    parameter_name: str
    limits: LimitSet
    method: str | None = None
    notes: str | None = None
    criterion: str | None = None
    bibliographic_references: str | None = None


@dataclass(frozen=True)
class RuleCategory:
    """A named set of parameter limit definitions."""

    id: str
    name: str
    source: str
    entries: tuple[RuleEntry, ...] = field(default_factory=tuple)
    sample_kind: SampleKind | None = None
    description: str | None = None

    @property
    def is_regulatory(self) -> bool:
        return self.source == REGULATORY
