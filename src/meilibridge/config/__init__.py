"""Configuration."""

from meilibridge.config.settings import ObservabilitySettings, SearchEngineSettings, Settings

__all__ = ["ObservabilitySettings", "SearchEngineSettings", "Settings"]
