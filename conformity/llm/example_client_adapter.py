"""Example LLM client adapter.

Use this module as a reference when implementing new provider adapters.
Implement BaseLlmClient and register the provider in LlmClientFactory.
"""

import json
from typing import ClassVar

from conformity.llm.client_base import BaseLlmClient


class ExampleClientAdapter(BaseLlmClient):
    """Example adapter that returns fixed replies.

    No network calls. Structured calls are answered by schema title, free-text
    classification calls with the "none" sentinel, so every fallback path
    stays deterministic in local development.
    """

    STRUCTURED_RESPONSES: ClassVar[dict[str, object]] = {
        "sample_profile": {
            "matrix": "Tampone ambientale",
            "description": None,
            "product": None,
            "category": "other",
            "suggested_category": None,
            "special_features": [],
        },
        "parameter_readings": {"readings": []},
        "compliance_decision": {
            "band": "undetermined",
            "applied_limit": "",
            "rationale": "No provider configured.",
        },
    }
    TEXT_RESPONSE: ClassVar[str] = "none"

    def create_chat_completion(
        self,
        *,
        model: str,
        temperature: float,
        system_prompt: str,
        user_prompt: str,
        json_schema: dict[str, object] | None = None,
    ) -> str:
        _ = model, temperature, system_prompt, user_prompt
        if json_schema is None:
            return self.TEXT_RESPONSE
        title = str(json_schema.get("title", ""))
        return json.dumps(self.STRUCTURED_RESPONSES.get(title, {}))

    def create_vision_completion(
        self,
        *,
        model: str,
        system_prompt: str,
        user_prompt: str,
        image_data_url: str,
    ) -> str:
        _ = model, system_prompt, user_prompt, image_data_url
        return ""
