from unittest.mock import MagicMock

import pytest

from conformity.extraction.exceptions import ParameterExtractionError
from conformity.extraction.extractor import ParameterExtractor, normalize_record
from conformity.extraction.models import ParameterReading
from conformity.llm.classifier import SemanticClassifier
from conformity.llm.exceptions import LlmNetworkError, LlmResponseError


def _make_extractor(reply: object = None, error: Exception | None = None) -> tuple[
    ParameterExtractor, MagicMock
]:
    classifier = MagicMock(spec=SemanticClassifier)
    if error is not None:
        classifier.classify_json.side_effect = error
    else:
        classifier.classify_json.return_value = reply
    return ParameterExtractor(classifier), classifier


class TestNormalizeRecord:
    def test_canonical_fields(self) -> None:
        reading = normalize_record(
            {"parameter": "Salmonella", "result": "Assente", "unit": "", "method": "ISO 6579"}
        )
        assert reading == ParameterReading("Salmonella", "Assente", "", "ISO 6579")

    def test_italian_aliases(self) -> None:
        reading = normalize_record(
            {"Parametro": "Enterobatteriacee", "Risultato": "< 10", "U.M.": "UFC/g"}
        )
        assert reading == ParameterReading("Enterobatteriacee", "< 10", "UFC/g", "")

    def test_um_result_alias(self) -> None:
        reading = normalize_record({"parameter": "Muffe", "result": "12", "um_result": "UFC/g"})
        assert reading is not None
        assert reading.unit_text == "UFC/g"

    def test_unknown_fields_are_dropped(self) -> None:
        reading = normalize_record({"parameter": "Muffe", "result": "12", "lab": "X"})
        assert reading is not None
        assert not hasattr(reading, "lab")

    def test_numbers_become_text(self) -> None:
        reading = normalize_record({"parameter": "pH", "result": 6.5})
        assert reading is not None
        assert reading.result_text == "6.5"

    def test_empty_record(self) -> None:
        assert normalize_record({"parameter": " ", "result": None, "other": "x"}) is None


class TestParameterExtractor:
    def test_extracts_readings_in_order(self) -> None:
        extractor, classifier = _make_extractor(
            {
                "readings": [
                    {"parameter": "Enterobatteriacee", "result": "< 10", "unit": "UFC/g", "method": ""},
                    {"parameter": "Salmonella", "result": "Assente", "unit": "", "method": ""},
                    {"parameter": "Salmonella", "result": "Assente", "unit": "", "method": ""},
                ]
            }
        )

        readings = extractor.extract("report text")

        assert [r.parameter_name for r in readings] == [
            "Enterobatteriacee",
            "Salmonella",
            "Salmonella",
        ]
        prompt = classifier.classify_json.call_args.args[0]
        assert "report text" in prompt
        schema = classifier.classify_json.call_args.kwargs["json_schema"]
        assert schema["title"] == "parameter_readings"

    def test_accepts_bare_list(self) -> None:
        extractor, _classifier = _make_extractor([{"Parametro": "Muffe", "Risultato": "12"}])
        assert extractor.extract("text") == [ParameterReading("Muffe", "12")]

    def test_accepts_analyses_key(self) -> None:
        extractor, _classifier = _make_extractor({"analyses": [{"parameter": "Muffe"}]})
        assert len(extractor.extract("text")) == 1

    def test_skips_non_object_records(self) -> None:
        extractor, _classifier = _make_extractor(
            {"readings": ["noise", {"parameter": "Muffe", "result": "12"}, {}]}
        )
        assert extractor.extract("text") == [ParameterReading("Muffe", "12")]

    def test_empty_corpus_skips_capability(self) -> None:
        extractor, classifier = _make_extractor({"readings": []})
        assert extractor.extract("  \n") == []
        classifier.classify_json.assert_not_called()

    def test_capability_failure_raises(self) -> None:
        extractor, _classifier = _make_extractor(error=LlmNetworkError("timeout"))
        with pytest.raises(ParameterExtractionError, match="timeout"):
            extractor.extract("text")

    def test_invalid_json_raises(self) -> None:
        extractor, _classifier = _make_extractor(error=LlmResponseError("Invalid JSON"))
        with pytest.raises(ParameterExtractionError):
            extractor.extract("text")

    def test_unexpected_shape_raises(self) -> None:
        extractor, _classifier = _make_extractor({"foo": "bar"})
        with pytest.raises(ParameterExtractionError, match="list of records"):
            extractor.extract("text")
