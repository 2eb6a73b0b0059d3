"""
Client for Google Gemini models.
"""

from typing import Any, Dict, List, Optional

import google.generativeai as genai

from ...exceptions import UpstreamCallFailure
from .model_client import ChatMessage, LLMProvider, LLMProviderConfig, MessageRole, ModelClient


class GeminiModelClient(ModelClient):
    """
    Gemini client built on ``google-generativeai``.

    System messages become the model's system instruction; user and
    assistant turns map to Gemini's ``user`` and ``model`` roles.
    """

    provider = LLMProvider.GEMINI.value

    def __init__(self, config: LLMProviderConfig):
        super().__init__(config)
        genai.configure(api_key=config.api_key)

    def _build_model(self, system_instruction: Optional[str]) -> Any:
        return genai.GenerativeModel(
            model_name=self.config.model,
            system_instruction=system_instruction,
        )

    @staticmethod
    def _split_messages(messages: List[ChatMessage]):
        system_parts = [m.content for m in messages if m.role == MessageRole.SYSTEM]
        contents: List[Dict[str, Any]] = []
        for message in messages:
            if message.role == MessageRole.SYSTEM:
                continue
            role = "model" if message.role == MessageRole.ASSISTANT else "user"
            contents.append({'role': role, 'parts': [message.content]})

        system_instruction = "\n\n".join(system_parts) if system_parts else None
        return system_instruction, contents

    def _complete(self, messages: List[ChatMessage]) -> str:
        system_instruction, contents = self._split_messages(messages)
        if not contents:
            raise UpstreamCallFailure("No user message to send", provider=self.provider)

        model = self._build_model(system_instruction)
        generation_config = genai.types.GenerationConfig(
            max_output_tokens=self.config.max_tokens,
            temperature=self.config.temperature,
        )

        response = model.generate_content(
            contents,
            generation_config=generation_config,
            request_options={'timeout': self.config.timeout_seconds},
        )

        try:
            text = response.text
        except ValueError as e:
            # Raised by the SDK when the candidate was blocked or empty
            raise UpstreamCallFailure(f"Empty response from model: {e}", provider=self.provider) from e

        if not text:
            raise UpstreamCallFailure("Empty response from model", provider=self.provider)

        return text
