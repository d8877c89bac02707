"""
VeoStudio Core Components

Provides foundational infrastructure for the video generation system:
- Environment-driven configuration
"""

from .config import Config, get_config, reload_config

__all__ = ["Config", "get_config", "reload_config"]
