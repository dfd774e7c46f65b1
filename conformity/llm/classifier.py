"""Single-shot text-in/text-out semantic classification."""

import json

from conformity.llm.client_base import BaseLlmClient
from conformity.llm.exceptions import LlmResponseError
from conformity.logging.logger import Log


def strip_code_fences(raw: str) -> str:
    """Remove a surrounding markdown code fence, if any."""
    cleaned = raw.strip()
    if cleaned.startswith("```"):
        lines = cleaned.splitlines()
        if lines and lines[0].startswith("```"):
            lines = lines[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        cleaned = "\n".join(lines)
    return cleaned.strip()


class SemanticClassifier:
    """Stateless wrapper around a chat client.

    Every call is independent; no conversation state is kept between calls.
    """

    def __init__(
        self,
        *,
        client: BaseLlmClient,
        model: str,
        temperature: float = 0.0,
    ) -> None:
        self._client = client
        self._model = model
        self._temperature = max(0.0, min(0.2, temperature))

    def classify(
        self,
        prompt: str,
        *,
        system_prompt: str = "",
        json_schema: dict[str, object] | None = None,
    ) -> str:
        """Send one prompt and return the raw reply text.

        Raises:
            LlmError: if the provider call fails.
        """
        Log.debug(f"Classification prompt:\n{prompt}")
        reply = self._client.create_chat_completion(
            model=self._model,
            temperature=self._temperature,
            system_prompt=system_prompt,
            user_prompt=prompt,
            json_schema=json_schema,
        )
        Log.debug(f"AI raw response:\n{reply}")
        return reply

    def classify_json(
        self,
        prompt: str,
        *,
        system_prompt: str = "",
        json_schema: dict[str, object] | None = None,
    ) -> object:
        """Send one prompt and parse the reply as JSON.

        Raises:
            LlmError: if the provider call fails.
            LlmResponseError: if the reply is not valid JSON.
        """
        reply = self.classify(prompt, system_prompt=system_prompt, json_schema=json_schema)
        try:
            return json.loads(strip_code_fences(reply))
        except json.JSONDecodeError as exc:
            raise LlmResponseError(f"Invalid JSON response: {exc}") from exc
