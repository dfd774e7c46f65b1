from typing import Any

import httpx
import openai

from conformity.llm.client_base import BaseLlmClient
from conformity.llm.exceptions import LlmNetworkError, LlmResponseError


class OpenAIClientAdapter(BaseLlmClient):
    """Client adapter built on the OpenAI-compatible chat API."""

    def __init__(
        self,
        *,
        api_key: str,
        timeout_seconds: int,
        base_url: str | None = None,
    ) -> None:
        self._client = openai.OpenAI(
            api_key=api_key,
            timeout=timeout_seconds,
            base_url=base_url,
        )

    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        json_schema: dict[str, object] | None = None,
    ) -> str:
        messages: list[dict[str, Any]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append({"role": "user", "content": user_prompt})

        kwargs: dict[str, Any] = {}
        if json_schema is not None:
            kwargs["response_format"] = {
                "type": "json_schema",
                "json_schema": {
                    "name": str(json_schema.get("title", "structured_result")),
                    "strict": True,
                    "schema": json_schema,
                },
            }
        return self._complete(model=model, temperature=temperature, messages=messages, **kwargs)

    def create_vision_completion(
        self,
        *,
        model: str,
        system_prompt: str,
        user_prompt: str,
        image_data_url: str,
    ) -> str:
        messages: list[dict[str, Any]] = []
        if system_prompt:
            messages.append({"role": "system", "content": system_prompt})
        messages.append(
            {
                "role": "user",
                "content": [
                    {"type": "text", "text": user_prompt},
                    {"type": "image_url", "image_url": {"url": image_data_url}},
                ],
            }
        )
        return self._complete(model=model, temperature=0.0, messages=messages)

    def _complete(
        self,
        *,
        model: str,
        temperature: float,
        messages: list[dict[str, Any]],
        **kwargs: Any,
    ) -> str:
        try:
            response = self._client.chat.completions.create(
                model=model,
                temperature=temperature,
                messages=messages,  # type: ignore[arg-type]
                **kwargs,
            )
        except (openai.APIConnectionError, httpx.ConnectError, httpx.TimeoutException) as exc:
            raise LlmNetworkError(f"AI provider network error: {exc}") from exc
        except openai.APIError as exc:
            raise LlmNetworkError(f"AI provider API error: {exc}") from exc

        if not response.choices:
            raise LlmResponseError("AI returned no choices")
        content = response.choices[0].message.content
        if content is None:
            raise LlmResponseError("AI returned empty response")
        return content
