from abc import ABC, abstractmethod


class BaseLlmClient(ABC):
    """Contract for provider-specific chat completion clients."""

    @abstractmethod
    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        json_schema: dict[str, object] | None = None,
    ) -> str:
        """Return provider response as plain text.

        When json_schema is given the provider is asked for a reply that
        conforms to it.
        """

    @abstractmethod
    def create_vision_completion(
        self,
        *,
        model: str,
        system_prompt: str,
        user_prompt: str,
        image_data_url: str,
    ) -> str:
        """Return provider response for a prompt about a single image."""
