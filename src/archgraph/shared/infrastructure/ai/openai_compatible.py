"""
Client for OpenAI-compatible chat completion endpoints.
"""

from typing import List

import requests

from ...exceptions import UpstreamCallFailure
from .model_client import ChatMessage, LLMProvider, LLMProviderConfig, ModelClient


class OpenAICompatibleClient(ModelClient):
    """Calls ``POST <base_url>/chat/completions`` with bearer authentication."""

    provider = LLMProvider.OPENAI_COMPATIBLE.value

    def __init__(self, config: LLMProviderConfig):
        super().__init__(config)
        self.api_key = config.api_key
        self.base_url = config.base_url.rstrip('/')
        self.session = requests.Session()

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/chat/completions"

    def _complete(self, messages: List[ChatMessage]) -> str:
        payload = {
            'model': self.config.model,
            'messages': [{'role': m.role, 'content': m.content} for m in messages],
            'temperature': self.config.temperature,
            'max_tokens': self.config.max_tokens,
        }
        headers = {
            'Content-Type': 'application/json',
            'Authorization': f"Bearer {self.api_key}",
        }

        try:
            response = self.session.post(
                self.endpoint,
                json=payload,
                headers=headers,
                timeout=self.config.timeout_seconds,
            )
        except requests.RequestException as e:
            raise UpstreamCallFailure(f"LLM API request failed: {e}", provider=self.provider) from e

        if not response.ok:
            raise UpstreamCallFailure(
                f"LLM API error ({response.status_code}): {response.text}",
                provider=self.provider,
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamCallFailure(f"LLM API returned invalid JSON: {e}", provider=self.provider) from e

        choices = data.get('choices') or []
        if not choices:
            raise UpstreamCallFailure("No response from LLM", provider=self.provider)

        content = (choices[0].get('message') or {}).get('content')
        if not isinstance(content, str):
            raise UpstreamCallFailure("No response from LLM", provider=self.provider)

        self.logger.debug(f"Received {len(content)} characters from {self.config.model}")
        return content
