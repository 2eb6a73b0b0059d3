"""
Text-generation clients for ArchGraph.

A client turns an ordered list of role-tagged messages into a single string.
The provider set is small and closed: ``create_model_client`` dispatches on
the provider tag and each tag has exactly one implementation.

Clients are built and handed to the graph editor service by the caller.
There is no process-wide client instance.
"""

import time
from abc import ABC, abstractmethod
from enum import Enum
from typing import List, Optional

from pydantic import Field

from ...config.settings import Settings, get_settings
from ...exceptions import ConfigurationError, UpstreamCallFailure
from ...models.base import BaseModel
from ..monitoring.logger import get_logger
from ..monitoring.metrics import get_metrics


class MessageRole(str, Enum):
    """Roles understood by text-generation providers."""
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"


class ChatMessage(BaseModel):
    """One role-tagged message sent to a model."""

    role: MessageRole = Field(..., description="Who is speaking")
    content: str = Field(..., description="Message text")


class LLMProvider(str, Enum):
    """Supported provider tags."""
    OPENAI_COMPATIBLE = "openai-compatible"
    GEMINI = "gemini"


class LLMProviderConfig(BaseModel):
    """Everything needed to build a client for one provider."""

    provider: LLMProvider = Field(default=LLMProvider.OPENAI_COMPATIBLE, description="Provider tag")
    api_key: str = Field(..., min_length=1, description="Provider API key")
    base_url: str = Field(default="https://api.openai.com/v1", description="Base URL (openai-compatible only)")
    model: str = Field(default="gpt-4o-mini", description="Model name")
    temperature: float = Field(default=0.7, ge=0.0, le=2.0, description="Generation temperature")
    max_tokens: int = Field(default=4096, gt=0, description="Maximum response tokens")
    timeout_seconds: float = Field(default=60.0, gt=0, description="Request timeout")


class ModelClient(ABC):
    """
    Base class for text-generation clients.

    Subclasses implement ``_complete``; ``complete`` adds timing, metrics and
    consistent failure wrapping so callers only ever see ``UpstreamCallFailure``.
    """

    provider: str = "unknown"

    def __init__(self, config: LLMProviderConfig):
        self.config = config
        self.logger = get_logger(__name__)
        self.metrics = get_metrics()

    @property
    def model_name(self) -> str:
        return self.config.model

    def complete(self, messages: List[ChatMessage]) -> str:
        """
        Send messages to the model and return its text reply.

        Args:
            messages: Ordered system/user/assistant messages

        Returns:
            Raw model text

        Raises:
            UpstreamCallFailure: The call failed or produced no text
        """
        start_time = time.time()
        try:
            text = self._complete(messages)
        except UpstreamCallFailure as e:
            self._record(start_time, success=False)
            self.logger.error(f"{self.provider} call failed: {e}")
            raise
        except Exception as e:
            self._record(start_time, success=False)
            self.logger.error(f"{self.provider} call failed: {e}")
            raise UpstreamCallFailure(f"Text generation failed: {e}", provider=self.provider) from e

        self._record(start_time, success=True)
        return text

    def _record(self, start_time: float, success: bool) -> None:
        self.metrics.record_model_inference(
            provider=self.provider,
            model_name=self.model_name,
            duration_seconds=time.time() - start_time,
            success=success,
        )

    @abstractmethod
    def _complete(self, messages: List[ChatMessage]) -> str:
        """Provider-specific call."""
        pass


def create_model_client(config: LLMProviderConfig) -> ModelClient:
    """
    Build the client for ``config.provider``.

    Raises:
        ConfigurationError: Unknown provider tag
    """
    provider = LLMProvider(config.provider)

    if provider == LLMProvider.OPENAI_COMPATIBLE:
        from .openai_compatible import OpenAICompatibleClient
        return OpenAICompatibleClient(config)

    if provider == LLMProvider.GEMINI:
        # Imported lazily so the google SDK loads only when it is selected
        from .gemini import GeminiModelClient
        return GeminiModelClient(config)

    raise ConfigurationError(f"Unsupported LLM provider: {config.provider}")


def get_model_client_from_settings(settings: Optional[Settings] = None) -> ModelClient:
    """
    Build a client from environment-backed settings.

    Raises:
        ConfigurationError: No API key for the selected provider
    """
    settings = settings or get_settings()
    ai_config = settings.ai_config

    if not ai_config['api_key']:
        key_name = "GEMINI_API_KEY" if ai_config['provider'] == LLMProvider.GEMINI.value else "LLM_API_KEY"
        raise ConfigurationError(f"{key_name} environment variable is required")

    try:
        config = LLMProviderConfig(**ai_config)
    except ValueError as e:
        raise ConfigurationError(f"Invalid LLM configuration: {e}") from e

    return create_model_client(config)
