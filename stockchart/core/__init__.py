"""Core configuration and logging."""

from stockchart.core.config import ClientConfig, Settings, get_settings
from stockchart.core.logging import setup_logging

__all__ = ["ClientConfig", "Settings", "get_settings", "setup_logging"]
