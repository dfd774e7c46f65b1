from unittest.mock import patch

import pytest

from conformity.config.settings import Settings
from conformity.llm.example_client_adapter import ExampleClientAdapter
from conformity.llm.factory import LlmClientFactory
from conformity.llm.openai_client_adapter import OpenAIClientAdapter

_PATCH_TARGET = "conformity.llm.openai_client_adapter.openai.OpenAI"


class TestCreateClient:
    def test_example_provider(self) -> None:
        client = LlmClientFactory.create_client(Settings(llm_provider="example"))
        assert isinstance(client, ExampleClientAdapter)

    def test_openai_provider_uses_default_base_url(self) -> None:
        settings = Settings(llm_provider="openai", llm_api_key="k")
        with patch(_PATCH_TARGET) as mock_openai:
            client = LlmClientFactory.create_client(settings)
        assert isinstance(client, OpenAIClientAdapter)
        mock_openai.assert_called_once_with(api_key="k", timeout=30, base_url=None)

    def test_timeout_override(self) -> None:
        settings = Settings(llm_provider="openai", llm_api_key="k")
        with patch(_PATCH_TARGET) as mock_openai:
            LlmClientFactory.create_client(settings, timeout_seconds=120)
        assert mock_openai.call_args.kwargs["timeout"] == 120

    def test_known_compatible_provider_gets_its_base_url(self) -> None:
        settings = Settings(llm_provider="Groq", llm_api_key="k")
        with patch(_PATCH_TARGET) as mock_openai:
            LlmClientFactory.create_client(settings)
        assert mock_openai.call_args.kwargs["base_url"] == "https://api.groq.com/openai/v1"

    def test_configured_base_url_wins_for_known_provider(self) -> None:
        settings = Settings(llm_provider="ollama", llm_base_url=" http://gpu:11434/v1 ")
        with patch(_PATCH_TARGET) as mock_openai:
            LlmClientFactory.create_client(settings)
        assert mock_openai.call_args.kwargs["base_url"] == "http://gpu:11434/v1"

    def test_openai_compatible_requires_base_url(self) -> None:
        settings = Settings(llm_provider="openai_compatible", llm_base_url="")
        with pytest.raises(ValueError, match="llm_base_url is required"):
            LlmClientFactory.create_client(settings)

    def test_unknown_provider_raises(self) -> None:
        with pytest.raises(ValueError, match="Unknown LLM provider 'mystery'"):
            LlmClientFactory.create_client(Settings(llm_provider="mystery"))


class TestCreateClassifier:
    def test_example_classifier_answers_with_sentinel(self) -> None:
        classifier = LlmClientFactory.create_classifier(Settings(llm_provider="example"))
        assert classifier.classify("anything") == "none"

    def test_requires_model_name_for_real_provider(self) -> None:
        settings = Settings(llm_provider="openai", llm_model_name="  ")
        with pytest.raises(ValueError, match="llm_model_name is required"):
            LlmClientFactory.create_classifier(settings)

    def test_builds_classifier_for_real_provider(self) -> None:
        settings = Settings(llm_provider="openai", llm_api_key="k", llm_model_name="gpt-4o-mini")
        with patch(_PATCH_TARGET) as mock_openai:
            classifier = LlmClientFactory.create_classifier(settings)
        create = mock_openai.return_value.chat.completions.create
        create.return_value.choices[0].message.content = "ok"

        assert classifier.classify("p") == "ok"
        assert create.call_args.kwargs["model"] == "gpt-4o-mini"
