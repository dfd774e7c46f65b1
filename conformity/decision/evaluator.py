import re

from conformity.catalog.models import RuleCategory, RuleEntry
from conformity.classification.models import SampleProfile
from conformity.decision.beverage import DEFAULT_BEVERAGE_TYPE, BeverageComplianceCheck
from conformity.decision.engine import decide
from conformity.decision.fallback import SemanticDecisionFallback
from conformity.decision.models import (
    DECIDED_DETERMINISTIC,
    DECIDED_NONE,
    DECIDED_SEMANTIC,
    REASON_LIMITS_UNPARSEABLE,
    Band,
    ComplianceVerdict,
    Evidence,
)
from conformity.extraction.models import ParameterReading
from conformity.logging.logger import Log
from conformity.matching.matcher import ParameterMatcher

SWAB_RATIONALE = (
    "Surface and personnel swab results are expressed per area (UFC/cm²) and cannot be "
    "compared with food limits expressed per mass or volume (UFC/g, UFC/ml); "
    "surface-specific limits are required."
)
NO_RULE_SET_RATIONALE = "No regulatory or custom category applies to this sample."


def _slug(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")


def build_evidence(category: RuleCategory, entry: RuleEntry) -> tuple[Evidence, ...]:
    base_id = f"{category.source}-{_slug(category.id)}-{_slug(entry.parameter_name)}"
    evidence = [
        Evidence(
            id=base_id,
            title=f"{category.name}: limits for {entry.parameter_name}",
            excerpt=entry.limits.describe(),
        )
    ]
    extra = " ".join(
        part.strip()
        for part in (entry.notes, entry.bibliographic_references)
        if part and part.strip()
    )
    if extra:
        evidence.append(
            Evidence(
                id=f"{base_id}-notes",
                title=f"{category.name}: notes for {entry.parameter_name}",
                excerpt=extra,
            )
        )
    return tuple(evidence)


class ComplianceEvaluator:
    """Matches readings to rule entries and decides a verdict for each match."""

    def __init__(
        self,
        matcher: ParameterMatcher,
        fallback: SemanticDecisionFallback | None = None,
        beverage_check: BeverageComplianceCheck | None = None,
    ) -> None:
        self._matcher = matcher
        self._fallback = fallback
        self._beverage_check = beverage_check

    def evaluate(
        self,
        readings: list[ParameterReading],
        profile: SampleProfile,
        category: RuleCategory | None,
        corpus: str,
    ) -> list[ComplianceVerdict]:
        if category is None:
            if profile.is_beverage and self._beverage_check is not None:
                Log.info("No category for beverage sample, running the beverage check")
                check = self._beverage_check
                return [
                    self._evaluate_beverage(check, reading, profile, corpus)
                    for reading in readings
                ]
            return [self._without_rule_set(reading, profile) for reading in readings]

        verdicts: list[ComplianceVerdict] = []
        for reading in readings:
            entry = self._matcher.match(reading.parameter_name, category)
            if entry is None:
                Log.debug(f"No entry in '{category.name}' for '{reading.parameter_name}'")
                continue
            verdicts.append(self._evaluate_entry(reading, entry, category, corpus))

        Log.info(
            f"Evaluated {len(readings)} readings against '{category.name}': "
            f"{len(verdicts)} verdicts"
        )
        return verdicts

    def _evaluate_entry(
        self,
        reading: ParameterReading,
        entry: RuleEntry,
        category: RuleCategory,
        corpus: str,
    ) -> ComplianceVerdict:
        decision = decide(reading.result_text, reading.unit_text, entry.limits)
        decided_by = DECIDED_DETERMINISTIC

        if decision.reason == REASON_LIMITS_UNPARSEABLE and self._fallback is not None:
            semantic = self._fallback.decide(reading, entry, category, corpus, hint=decision)
            if semantic is not None:
                decision = semantic
                decided_by = DECIDED_SEMANTIC

        return ComplianceVerdict(
            parameter_name=reading.parameter_name,
            applied_limit_text=decision.applied_limit,
            band=decision.band,
            rationale=decision.rationale,
            evidence=build_evidence(category, entry),
            reference_parameter=entry.parameter_name,
            result_text=reading.result_text,
            unit_text=reading.unit_text,
            decided_by=decided_by,
        )

    def _evaluate_beverage(
        self,
        check: BeverageComplianceCheck,
        reading: ParameterReading,
        profile: SampleProfile,
        corpus: str,
    ) -> ComplianceVerdict:
        """Ask the beverage check for a band; undetermined when it has no answer."""
        beverage_type = profile.product_label or profile.matrix_label or DEFAULT_BEVERAGE_TYPE
        decision = check.decide(reading, beverage_type, corpus)
        if decision is None:
            return self._without_rule_set(reading, profile)

        return ComplianceVerdict(
            parameter_name=reading.parameter_name,
            applied_limit_text=decision.applied_limit,
            band=decision.band,
            rationale=decision.rationale,
            evidence=(
                Evidence(
                    id=f"beverage-{_slug(reading.parameter_name)}",
                    title=f"{beverage_type}: limit for {reading.parameter_name}",
                    excerpt=decision.applied_limit,
                ),
            ),
            result_text=reading.result_text,
            unit_text=reading.unit_text,
            decided_by=DECIDED_SEMANTIC,
        )

    @staticmethod
    def _without_rule_set(reading: ParameterReading, profile: SampleProfile) -> ComplianceVerdict:
        return ComplianceVerdict(
            parameter_name=reading.parameter_name,
            applied_limit_text="",
            band=Band.UNDETERMINED,
            rationale=SWAB_RATIONALE if profile.sample_kind.is_swab else NO_RULE_SET_RATIONALE,
            result_text=reading.result_text,
            unit_text=reading.unit_text,
            decided_by=DECIDED_NONE,
        )
