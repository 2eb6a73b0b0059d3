"""
AI infrastructure for ArchGraph.
"""

from .model_client import (
    ChatMessage,
    MessageRole,
    LLMProvider,
    LLMProviderConfig,
    ModelClient,
    create_model_client,
    get_model_client_from_settings,
)

__all__ = [
    "ChatMessage",
    "MessageRole",
    "LLMProvider",
    "LLMProviderConfig",
    "ModelClient",
    "create_model_client",
    "get_model_client_from_settings",
]
