"""
CiteTrail Configuration System
===============================

Central configuration using Pydantic Settings. Supports:
- Environment variables (CITETRAIL_ prefix)
- .env file loading
- YAML config file overrides

Every component is constructed from an explicit config object that the
caller builds and passes in; there are no process-wide client singletons.

Usage:
    from citetrail.config import get_config
    cfg = get_config()                       # loads from env / .env
    cfg = get_config("configs/viewer.yaml")  # loads with YAML overrides
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from pydantic import BaseModel, Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from citetrail.utils import compute_hash


# ── Sub-configs ────────────────────────────────────────────────────
class MatchingConfig(BaseModel):
    """Configuration for page and fragment matching."""
    prefix_ratio: float = Field(
        default=0.6,
        gt=0.0, le=1.0,
        description="Share of the cleaned citation text retried as a prefix when the full text is absent",
    )
    min_prefix_chars: int = Field(
        default=20,
        ge=1,
        description="Shortest prefix allowed for the fallback search",
    )


class HighlightConfig(BaseModel):
    """Configuration for the bounded highlight retry loop."""
    max_attempts: int = Field(default=10, ge=1, description="Attempts before giving up silently")
    retry_delay_s: float = Field(default=0.2, ge=0.0, description="Fixed delay between attempts")
    initial_delay_s: float = Field(
        default=0.3,
        ge=0.0,
        description="Settle delay before the first attempt (page layout)",
    )


class GenerationConfig(BaseModel):
    """Configuration for the cited-answer model call."""
    model: str = Field(default="gpt-4.1-nano", description="Chat model or Azure deployment name")
    temperature: float = Field(default=0.3, ge=0.0, le=2.0, description="Sampling temperature")
    max_tokens: int = Field(default=2048, description="Completion token cap")
    azure_api_version: str = Field(
        default="2025-01-01-preview",
        description="API version used when an Azure endpoint is configured",
    )


class CitationConfig(BaseModel):
    """Configuration for citation extraction and enrichment defaults."""
    unknown_document_name: str = Field(
        default="Unknown",
        description="Placeholder document name for out-of-range chunk ids",
    )
    no_passages_message: str = Field(
        default="No relevant documents found. Please upload some papers first.",
        description="Answer text returned when retrieval produced no passages",
    )


# ── Main Config ────────────────────────────────────────────────────
class CiteTrailConfig(BaseSettings):
    """
    Root configuration for CiteTrail.

    Loads from environment variables (CITETRAIL_ prefix) and .env file.
    Can be extended with YAML overrides via `get_config(yaml_path)`.

    Example:
        export CITETRAIL_LOG_LEVEL=DEBUG
        export CITETRAIL_OPENAI_API_KEY=sk-...
    """
    model_config = SettingsConfigDict(
        env_prefix="CITETRAIL_",
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        extra="ignore",
    )

    # ── Top-level settings ─────────────────────────────────────────
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="text", description="Log format: 'json' or 'text'")

    # ── Model API ──────────────────────────────────────────────────
    openai_api_key: Optional[str] = Field(default=None, description="OpenAI API key")
    azure_openai_endpoint: Optional[str] = Field(
        default=None,
        description="Azure OpenAI endpoint; when set the Azure client is used",
    )
    azure_openai_api_key: Optional[str] = Field(default=None, description="Azure OpenAI API key")

    # ── Sub-configs ────────────────────────────────────────────────
    matching: MatchingConfig = Field(default_factory=MatchingConfig)
    highlight: HighlightConfig = Field(default_factory=HighlightConfig)
    generation: GenerationConfig = Field(default_factory=GenerationConfig)
    citation: CitationConfig = Field(default_factory=CitationConfig)

    @property
    def uses_azure(self) -> bool:
        """True when the model call should go through Azure OpenAI."""
        return bool(self.azure_openai_endpoint)

    def config_hash(self) -> str:
        """
        Produce a deterministic SHA-256 prefix of the configuration.

        API keys are excluded so the hash can be logged and shared.
        """
        config_dict = self.model_dump(
            mode="json",
            exclude={"openai_api_key", "azure_openai_api_key"},
        )
        return compute_hash(config_dict)


# ── Config Loading ─────────────────────────────────────────────────
def get_config(yaml_path: Optional[str | Path] = None) -> CiteTrailConfig:
    """
    Load CiteTrail configuration.

    Priority (highest to lowest):
        1. Values from the YAML config file (if provided)
        2. Environment variables (CITETRAIL_ prefix)
        3. .env file
        4. Default values

    Args:
        yaml_path: Optional path to a YAML config file for overrides.

    Returns:
        Fully resolved CiteTrailConfig instance.
    """
    if yaml_path:
        import yaml
        with open(yaml_path, encoding="utf-8") as f:
            overrides = yaml.safe_load(f) or {}
        return CiteTrailConfig(**overrides)
    return CiteTrailConfig()
