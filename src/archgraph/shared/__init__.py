"""
Shared components for ArchGraph.

Contains common models, utilities, and infrastructure used by the graph
editor service, the API and the CLI:

- Graph data models and structural validation
- Centralized configuration management
- Shared exception hierarchy
- Infrastructure services (model clients, logging, metrics)
"""

from .models import *
from .config import *
from .exceptions import *
from .infrastructure import *

__all__ = [
    # From models
    "BaseModel", "utc_now",
    "NodeKind", "EdgeKind", "Position", "NodeData", "GraphNode", "EdgeData",
    "GraphEdge", "GraphMeta", "GraphState", "NodeUpdate", "GraphDelta", "IntegrityReport",

    # From config
    "Settings", "get_settings",

    # From exceptions
    "ArchGraphError", "ConfigurationError", "SchemaError", "ParseError",
    "GraphIntegrityError", "UpstreamCallFailure", "StorageError",

    # From infrastructure
    "ChatMessage", "LLMProviderConfig", "ModelClient",
    "create_model_client", "get_model_client_from_settings",
    "get_logger", "setup_logging", "MetricsCollector", "get_metrics",
]
