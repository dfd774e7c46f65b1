from unittest.mock import MagicMock

import pytest

from conformity.llm.classifier import SemanticClassifier, strip_code_fences
from conformity.llm.client_base import BaseLlmClient
from conformity.llm.exceptions import LlmNetworkError, LlmResponseError


def _make_classifier(reply: str = "", temperature: float = 0.0) -> tuple[SemanticClassifier, MagicMock]:
    client = MagicMock(spec=BaseLlmClient)
    client.create_chat_completion.return_value = reply
    return SemanticClassifier(client=client, model="m", temperature=temperature), client


class TestStripCodeFences:
    def test_plain_text_unchanged(self) -> None:
        assert strip_code_fences('  {"a": 1} ') == '{"a": 1}'

    def test_removes_json_fence(self) -> None:
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_removes_bare_fence(self) -> None:
        assert strip_code_fences("```\nnone\n```") == "none"


class TestClassify:
    def test_forwards_prompt_and_returns_raw_reply(self) -> None:
        classifier, client = _make_classifier("Sì")

        assert classifier.classify("Are these equal?", system_prompt="sys") == "Sì"
        client.create_chat_completion.assert_called_once_with(
            model="m",
            temperature=0.0,
            system_prompt="sys",
            user_prompt="Are these equal?",
            json_schema=None,
        )

    @pytest.mark.parametrize(
        ("configured", "expected"),
        [(-1.0, 0.0), (0.1, 0.1), (0.9, 0.2)],
    )
    def test_temperature_is_kept_low(self, configured: float, expected: float) -> None:
        classifier, client = _make_classifier("x", temperature=configured)
        classifier.classify("p")
        assert client.create_chat_completion.call_args.kwargs["temperature"] == expected

    def test_provider_errors_propagate(self) -> None:
        classifier, client = _make_classifier()
        client.create_chat_completion.side_effect = LlmNetworkError("down")
        with pytest.raises(LlmNetworkError):
            classifier.classify("p")

    def test_calls_are_independent(self) -> None:
        classifier, client = _make_classifier("none")
        classifier.classify("first")
        classifier.classify("second")
        prompts = [c.kwargs["user_prompt"] for c in client.create_chat_completion.call_args_list]
        assert prompts == ["first", "second"]


class TestClassifyJson:
    def test_parses_fenced_json(self) -> None:
        classifier, client = _make_classifier('```json\n{"band": "satisfactory"}\n```')
        schema: dict[str, object] = {"title": "compliance_decision"}

        assert classifier.classify_json("p", json_schema=schema) == {"band": "satisfactory"}
        assert client.create_chat_completion.call_args.kwargs["json_schema"] is schema

    def test_invalid_json_raises_response_error(self) -> None:
        classifier, _ = _make_classifier("not json at all")
        with pytest.raises(LlmResponseError, match="Invalid JSON response"):
            classifier.classify_json("p")
