"""Turns a report corpus into ParameterReading records via structured extraction."""

from typing import Any

from conformity.extraction.exceptions import ParameterExtractionError
from conformity.extraction.models import ParameterReading
from conformity.llm.classifier import SemanticClassifier
from conformity.llm.exceptions import LlmError
from conformity.llm.prompt_loader import load_json_schema, load_prompt_template
from conformity.logging.logger import Log

# Closed alias table: canonical field -> accepted source keys.
FIELD_ALIASES: dict[str, tuple[str, ...]] = {
    "parameter_name": ("parameter_name", "parameter", "Parametro", "parametro"),
    "result_text": ("result_text", "result", "Risultato", "risultato"),
    "unit_text": ("unit_text", "unit", "um_result", "U.M.", "UM", "u.m."),
    "method_text": ("method_text", "method", "Metodo", "metodo"),
}


def normalize_record(raw: dict[str, Any]) -> ParameterReading | None:
    """Map a raw record onto ParameterReading; None when every field is empty.

    Unknown keys are dropped.
    """
    values: dict[str, str] = {}
    for field_name, aliases in FIELD_ALIASES.items():
        values[field_name] = ""
        for alias in aliases:
            value = raw.get(alias)
            if value is not None and str(value).strip():
                values[field_name] = str(value).strip()
                break
    if not any(values.values()):
        return None
    return ParameterReading(**values)


class ParameterExtractor:
    """Delegates to the structured-extraction capability and normalizes its output."""

    def __init__(self, classifier: SemanticClassifier) -> None:
        self._classifier = classifier
        self._template = load_prompt_template("parameter_readings_prompt.txt")
        self._schema = load_json_schema("parameter_readings_schema.json")

    def extract(self, corpus: str) -> list[ParameterReading]:
        """Extract every reading, duplicates included, in document order.

        Raises:
            ParameterExtractionError: if the capability fails or replies with
                something that is not a list of records.
        """
        if not corpus.strip():
            Log.info("Empty corpus, no parameters to extract")
            return []

        prompt = self._template.format(corpus=corpus)
        try:
            parsed = self._classifier.classify_json(prompt, json_schema=self._schema)
        except LlmError as exc:
            raise ParameterExtractionError(f"Parameter extraction failed: {exc}") from exc

        records = self._records(parsed)
        readings = [
            reading
            for reading in (normalize_record(r) for r in records if isinstance(r, dict))
            if reading is not None
        ]
        Log.info(f"Extracted {len(readings)} parameter readings")
        return readings

    @staticmethod
    def _records(parsed: object) -> list[Any]:
        if isinstance(parsed, list):
            return parsed
        if isinstance(parsed, dict):
            for key in ("readings", "analyses", "parameters"):
                records = parsed.get(key)
                if isinstance(records, list):
                    return records
        raise ParameterExtractionError("Extraction reply must be a list of records")
