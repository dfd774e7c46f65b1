from typing import ClassVar

from conformity.config.settings import Settings
from conformity.llm.classifier import SemanticClassifier
from conformity.llm.client_base import BaseLlmClient
from conformity.llm.example_client_adapter import ExampleClientAdapter
from conformity.llm.openai_client_adapter import OpenAIClientAdapter


class LlmClientFactory:
    """Creates the configured LLM client and classifier."""

    OPENAI_COMPATIBLE_BASE_URLS: ClassVar[dict[str, str]] = {
        "openrouter": "https://openrouter.ai/api/v1",
        "groq": "https://api.groq.com/openai/v1",
        "together": "https://api.together.xyz/v1",
        "deepseek": "https://api.deepseek.com/v1",
        "ollama": "http://localhost:11434/v1",
    }

    @classmethod
    def create_client(
        cls,
        settings: Settings,
        timeout_seconds: int | None = None,
    ) -> BaseLlmClient:
        """Create a provider client; timeout defaults to llm_timeout_seconds."""
        provider = settings.llm_provider.lower()
        if provider == "example":
            return ExampleClientAdapter()
        return OpenAIClientAdapter(
            api_key=settings.llm_api_key,
            timeout_seconds=timeout_seconds or settings.llm_timeout_seconds,
            base_url=cls._resolve_base_url(provider, settings),
        )

    @classmethod
    def create_classifier(cls, settings: Settings) -> SemanticClassifier:
        """Create the semantic classifier used by every pipeline stage."""
        provider = settings.llm_provider.lower()
        if provider == "example":
            return SemanticClassifier(
                client=ExampleClientAdapter(),
                model="example",
                temperature=0.0,
            )
        return SemanticClassifier(
            client=cls.create_client(settings),
            model=cls._resolve_model_name(provider, settings),
            temperature=settings.llm_temperature,
        )

    @classmethod
    def _resolve_base_url(cls, provider: str, settings: Settings) -> str | None:
        if provider == "openai":
            return None
        if provider == "openai_compatible":
            url = settings.llm_base_url.strip()
            if not url:
                raise ValueError(
                    "llm_base_url is required for llm_provider=openai_compatible"
                )
            return url
        default_base_url = cls.OPENAI_COMPATIBLE_BASE_URLS.get(provider)
        if default_base_url is not None:
            return settings.llm_base_url.strip() or default_base_url
        supported = [
            "example",
            "openai",
            "openai_compatible",
            *sorted(cls.OPENAI_COMPATIBLE_BASE_URLS),
        ]
        raise ValueError(f"Unknown LLM provider '{provider}'. Choose from: {supported}")

    @classmethod
    def _resolve_model_name(cls, provider: str, settings: Settings) -> str:
        model = settings.llm_model_name.strip()
        if not model:
            raise ValueError(f"llm_model_name is required for llm_provider={provider}")
        return model
