"""
Centralized configuration management for ArchGraph.

All environment variables and settings are managed here so the API, the CLI
and the graph editor service read the same values.
"""

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings


SUPPORTED_LLM_PROVIDERS = {"openai-compatible", "gemini"}
SUPPORTED_STORAGE_BACKENDS = {"memory", "file"}


class Settings(BaseSettings):
    """
    Centralized settings for ArchGraph.

    All configuration is loaded from environment variables with sensible defaults.
    Uses Pydantic for validation and type safety.
    """

    # === Application Settings ===
    app_name: str = Field(default="ArchGraph", description="Application name")
    app_version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")
    log_level: str = Field(default="INFO", description="Logging level")
    log_file: Optional[str] = Field(default=None, description="Optional log file path")

    # === API Settings ===
    api_host: str = Field(default="0.0.0.0", description="API host")
    api_port: int = Field(default=8000, description="API port")
    cors_origins: List[str] = Field(default_factory=lambda: ["*"], description="Allowed CORS origins")

    # === Project Settings ===
    default_project_id: str = Field(default="default-project", description="Project used when none is given")

    # === Language Model Settings ===
    llm_provider: str = Field(default="openai-compatible", description="Model provider tag", validation_alias="LLM_PROVIDER")
    llm_api_key: Optional[str] = Field(default=None, description="API key for the openai-compatible provider", validation_alias="LLM_API_KEY")
    llm_base_url: str = Field(default="https://api.openai.com/v1", description="Base URL for the openai-compatible provider", validation_alias="LLM_BASE_URL")
    llm_model: str = Field(default="gpt-4o-mini", description="Model name", validation_alias="LLM_MODEL")
    gemini_api_key: Optional[str] = Field(default=None, description="Google Gemini API key", validation_alias="GEMINI_API_KEY")
    llm_temperature: float = Field(default=0.7, ge=0.0, le=2.0, description="Generation temperature")
    llm_max_tokens: int = Field(default=4096, gt=0, description="Maximum response tokens")
    llm_timeout_seconds: float = Field(default=60.0, gt=0, description="Upstream call timeout")

    # === Storage Settings ===
    storage_backend: str = Field(default="memory", description="Graph storage backend (memory or file)")
    data_dir: Path = Field(default=Path("data"), description="Directory used by the file backend")

    # === Prompt Settings ===
    prompt_max_nodes: int = Field(default=50, gt=0, description="Max nodes embedded in a prompt")
    prompt_max_edges: int = Field(default=100, gt=0, description="Max edges embedded in a prompt")

    # === Layout Settings ===
    layout_start_x: float = Field(default=100.0, description="X coordinate of the first grid column")
    layout_start_y: float = Field(default=100.0, description="Y coordinate used for an empty graph")
    layout_columns: int = Field(default=4, gt=0, description="Grid columns for new nodes")
    layout_spacing_x: float = Field(default=250.0, description="Horizontal grid spacing")
    layout_spacing_y: float = Field(default=150.0, description="Vertical grid spacing")

    # === Logging Configuration ===
    @property
    def logging_config(self) -> Dict[str, Any]:
        """Get logging configuration."""
        return {
            'level': self.log_level,
            'file': self.log_file,
            'format': '%(asctime)s - %(name)s - %(levelname)s - %(message)s'
        }

    @property
    def ai_config(self) -> Dict[str, Any]:
        """Get language model configuration as dictionary."""
        api_key = self.gemini_api_key if self.llm_provider == "gemini" else self.llm_api_key
        return {
            'provider': self.llm_provider,
            'api_key': api_key,
            'base_url': self.llm_base_url,
            'model': self.llm_model,
            'temperature': self.llm_temperature,
            'max_tokens': self.llm_max_tokens,
            'timeout_seconds': self.llm_timeout_seconds,
        }

    @property
    def layout_config(self) -> Dict[str, Any]:
        """Get grid layout configuration."""
        return {
            'start_x': self.layout_start_x,
            'start_y': self.layout_start_y,
            'columns': self.layout_columns,
            'spacing_x': self.layout_spacing_x,
            'spacing_y': self.layout_spacing_y,
        }

    @property
    def prompt_config(self) -> Dict[str, Any]:
        """Get prompt size caps."""
        return {
            'max_nodes': self.prompt_max_nodes,
            'max_edges': self.prompt_max_edges,
        }

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = {'DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'}
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of {valid_levels}")
        return v.upper()

    @field_validator('llm_provider')
    @classmethod
    def validate_llm_provider(cls, v):
        provider = v.strip().lower()
        if provider not in SUPPORTED_LLM_PROVIDERS:
            raise ValueError(f"LLM provider must be one of {sorted(SUPPORTED_LLM_PROVIDERS)}")
        return provider

    @field_validator('storage_backend')
    @classmethod
    def validate_storage_backend(cls, v):
        backend = v.strip().lower()
        if backend not in SUPPORTED_STORAGE_BACKENDS:
            raise ValueError(f"Storage backend must be one of {sorted(SUPPORTED_STORAGE_BACKENDS)}")
        return backend

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "populate_by_name": True,
        "extra": "ignore",
    }


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    Uses LRU cache to ensure settings are only loaded once per application lifecycle.
    """
    return Settings()
