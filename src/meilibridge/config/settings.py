"""Application settings — Pydantic-based configuration with YAML and env var support.

Configuration is loaded from (in order of precedence):
  1. Environment variables (MEILIBRIDGE_ prefix)
  2. YAML config file (if specified)
  3. Default values
"""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

from meilibridge.engine.credentials import CredentialSet


class SearchEngineSettings(BaseModel):
    """Meilisearch connection configuration."""

    enabled: bool = Field(default=True, description="Whether search is active at all")
    url: str | None = Field(default=None, description="Meilisearch instance URL")
    master_key: str | None = Field(default=None, description="Master key used to derive admin/search keys")
    admin_key: str | None = Field(default=None, description="Explicit admin API key")
    search_key: str | None = Field(default=None, description="Explicit search API key")
    timeout: float = Field(default=10.0, gt=0, description="Request timeout in seconds")
    max_retries: int = Field(default=2, ge=0, description="Connection retries per request")
    task_poll_interval: float = Field(default=0.05, gt=0, description="Initial task polling interval in seconds")

    @field_validator("url", "master_key", "admin_key", "search_key", mode="before")
    @classmethod
    def _blank_to_none(cls, v: str | None) -> str | None:
        """Treat empty strings (e.g. ``KEY=`` in a .env file) as unset."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    def to_credentials(self) -> CredentialSet:
        return CredentialSet(
            url=self.url,
            master_key=self.master_key,
            admin_key=self.admin_key,
            search_key=self.search_key,
            timeout=self.timeout,
            max_retries=self.max_retries,
            poll_interval=self.task_poll_interval,
        )


class ObservabilitySettings(BaseModel):
    """Observability configuration."""

    log_level: str = Field(default="info", description="Log level: debug, info, warning, error")
    log_format: str = Field(default="json", description="Log format: json, console")


class Settings(BaseSettings):
    """Root settings.

    Configuration is loaded from environment variables with the MEILIBRIDGE_ prefix.
    Nested settings use double underscores.

    Example:
        MEILIBRIDGE_SEARCH__URL=http://localhost:7700
        MEILIBRIDGE_SEARCH__MASTER_KEY=...
        MEILIBRIDGE_SEARCH__TIMEOUT=5
    """

    model_config = {
        "env_prefix": "MEILIBRIDGE_",
        "env_nested_delimiter": "__",
        "case_sensitive": False,
        "env_file": ".env",
        "env_file_encoding": "utf-8",
    }

    search: SearchEngineSettings = Field(default_factory=SearchEngineSettings)
    observability: ObservabilitySettings = Field(default_factory=ObservabilitySettings)

    @classmethod
    def from_yaml(cls, path: str | Path) -> Settings:
        """Load settings from a YAML configuration file.

        Args:
            path: Path to the YAML config file.

        Returns:
            Populated Settings instance.
        """
        import yaml  # type: ignore[import-untyped]

        config_path = Path(path)
        if not config_path.exists():
            raise FileNotFoundError(f"Config file not found: {config_path}")

        with open(config_path) as f:
            data = yaml.safe_load(f) or {}

        return cls(**data)
