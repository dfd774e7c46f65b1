from typing import Any

from conformity.catalog.models import RuleCategory, RuleEntry
from conformity.decision.models import Band, Decision
from conformity.extraction.models import ParameterReading
from conformity.llm.classifier import SemanticClassifier
from conformity.llm.exceptions import LlmError
from conformity.llm.prompt_loader import load_json_schema, load_prompt_template
from conformity.logging.logger import Log

EXCERPT_MAX_CHARS = 4000
_VALID_BANDS = {band.value: band for band in Band}


class SemanticDecisionFallback:
    """Asks the classifier for a band when the limits are free text.

    The deterministic decision is passed along as an authoritative hint and
    the reply is accepted only when it names a known band and a limit.
    """

    def __init__(self, classifier: SemanticClassifier) -> None:
        self._classifier = classifier
        self._template = load_prompt_template("compliance_decision_prompt.txt")
        self._schema = load_json_schema("compliance_decision_schema.json")

    def decide(
        self,
        reading: ParameterReading,
        entry: RuleEntry,
        category: RuleCategory,
        corpus: str,
        hint: Decision,
    ) -> Decision | None:
        """Return the semantic decision, or None to keep the deterministic one."""
        prompt = self._template.format(
            parameter=reading.parameter_name,
            result=reading.result_text,
            unit=reading.unit_text,
            method=reading.method_text or "not stated",
            reference_parameter=entry.parameter_name,
            category_name=category.name,
            limits=entry.limits.describe() or "none",
            criterion=entry.criterion or "not stated",
            notes=entry.notes or "none",
            auto_band=hint.band.value,
            auto_rationale=hint.rationale,
            excerpt=corpus[:EXCERPT_MAX_CHARS],
        )
        try:
            reply = self._classifier.classify_json(prompt, json_schema=self._schema)
        except LlmError as exc:
            Log.warning(f"Semantic decision for '{reading.parameter_name}' failed: {exc}")
            return None
        return parse_decision_reply(reply, reading.parameter_name)


def parse_decision_reply(reply: Any, parameter_name: str) -> Decision | None:
    """Accept a reply only when it names a known band and a limit."""
    if isinstance(reply, list) and len(reply) == 1:
        reply = reply[0]
    if not isinstance(reply, dict):
        Log.warning(f"Semantic decision for '{parameter_name}' is not an object")
        return None

    band = _VALID_BANDS.get(str(reply.get("band", "")).strip().lower())
    applied_limit = str(reply.get("applied_limit") or "").strip()
    if band is None or not applied_limit:
        Log.warning(
            f"Rejected semantic decision for '{parameter_name}': "
            f"band={reply.get('band')!r}, applied_limit={applied_limit!r}"
        )
        return None

    rationale = str(reply.get("rationale") or "").strip() or f"Band: {band.value}."
    return Decision(band, applied_limit, rationale, reason="semantic")
