from conformity.decision.fallback import parse_decision_reply
from conformity.decision.models import Decision
from conformity.extraction.models import ParameterReading
from conformity.llm.classifier import SemanticClassifier
from conformity.llm.exceptions import LlmError
from conformity.llm.prompt_loader import load_json_schema, load_prompt_template
from conformity.logging.logger import Log

EXCERPT_MAX_CHARS = 4000
DEFAULT_BEVERAGE_TYPE = "bevanda"


class BeverageComplianceCheck:
    """Semantic per-reading check for beverages with no catalog category."""

    def __init__(self, classifier: SemanticClassifier) -> None:
        self._classifier = classifier
        self._template = load_prompt_template("beverage_check_prompt.txt")
        self._schema = load_json_schema("compliance_decision_schema.json")

    def decide(
        self,
        reading: ParameterReading,
        beverage_type: str | None,
        corpus: str,
    ) -> Decision | None:
        """Return the classifier's decision, or None when it gives no usable answer."""
        prompt = self._template.format(
            parameter=reading.parameter_name,
            result=reading.result_text,
            unit=reading.unit_text,
            method=reading.method_text or "not stated",
            beverage_type=beverage_type or DEFAULT_BEVERAGE_TYPE,
            excerpt=corpus[:EXCERPT_MAX_CHARS],
        )
        try:
            reply = self._classifier.classify_json(prompt, json_schema=self._schema)
        except LlmError as exc:
            Log.warning(f"Beverage check for '{reading.parameter_name}' failed: {exc}")
            return None
        return parse_decision_reply(reply, reading.parameter_name)
