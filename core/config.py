"""
Configuration management for VeoStudio.

Centralizes all configuration including:
- API key for the Gemini API
- Video model selection
- Polling cadence and retry policy
- Local output storage
"""

import os
from dataclasses import dataclass, field
from typing import Optional

# Value shipped in sample .env files; never a usable key
PLACEHOLDER_API_KEY = "YOUR_API_KEY_HERE"


def _env_float(name: str, default: float) -> float:
    value = os.getenv(name)
    return float(value) if value else default


def _env_int(name: str, default: int) -> int:
    value = os.getenv(name)
    return int(value) if value else default


@dataclass
class APIConfig:
    """API configuration for the video generation service."""

    google_api_key: str = field(
        default_factory=lambda: os.getenv("GOOGLE_API_KEY") or os.getenv("API_KEY", "")
    )


@dataclass
class ModelConfig:
    """Model selection configuration."""

    # Google Veo 3 preview - text/image to video with native audio
    video_model: str = field(
        default_factory=lambda: os.getenv("VEO_MODEL", "veo-3.0-generate-preview")
    )


@dataclass
class PollingConfig:
    """How the orchestrator waits on long-running operations."""

    poll_interval_seconds: float = field(
        default_factory=lambda: _env_float("VEO_POLL_INTERVAL", 10.0)
    )
    # 1 = first polling error is terminal
    max_poll_attempts: int = field(
        default_factory=lambda: _env_int("VEO_POLL_MAX_ATTEMPTS", 1)
    )
    retry_wait_seconds: float = 2.0


@dataclass
class StorageConfig:
    """Storage configuration for downloaded videos."""

    output_dir: str = field(default_factory=lambda: os.getenv("VIDEO_OUTPUT_DIR", "output"))
    download_timeout_seconds: float = 300.0


@dataclass
class Config:
    """Main configuration class."""

    api: APIConfig = field(default_factory=APIConfig)
    models: ModelConfig = field(default_factory=ModelConfig)
    polling: PollingConfig = field(default_factory=PollingConfig)
    storage: StorageConfig = field(default_factory=StorageConfig)

    @classmethod
    def from_env(cls) -> "Config":
        """Load configuration from environment variables."""
        return cls()

    def has_credentials(self) -> bool:
        """True when a real API key is configured."""
        key = self.api.google_api_key.strip()
        return bool(key) and key != PLACEHOLDER_API_KEY

    def validate(self) -> list[str]:
        """Validate configuration and return list of issues."""
        issues = []

        if not self.has_credentials():
            issues.append("GOOGLE_API_KEY (or API_KEY) not configured")

        if self.polling.poll_interval_seconds <= 0:
            issues.append("VEO_POLL_INTERVAL must be positive")

        if self.polling.max_poll_attempts < 1:
            issues.append("VEO_POLL_MAX_ATTEMPTS must be at least 1")

        return issues


# Global config instance
_config: Optional[Config] = None


def get_config() -> Config:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = Config.from_env()
    return _config


def reload_config():
    """Reload configuration from environment."""
    global _config
    _config = Config.from_env()
