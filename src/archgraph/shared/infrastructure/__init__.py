"""
Shared infrastructure components for ArchGraph.

Provides centralized infrastructure services including:
- Text-generation clients with provider dispatch
- Logging configuration
- Metrics collection
"""

from .ai.model_client import (
    ChatMessage, LLMProviderConfig, ModelClient,
    create_model_client, get_model_client_from_settings,
)
from .monitoring.logger import get_logger, setup_logging
from .monitoring.metrics import MetricsCollector, get_metrics

__all__ = [
    # AI Services
    "ChatMessage",
    "LLMProviderConfig",
    "ModelClient",
    "create_model_client",
    "get_model_client_from_settings",

    # Monitoring
    "get_logger",
    "setup_logging",
    "MetricsCollector",
    "get_metrics",
]
