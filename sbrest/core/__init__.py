"""Core module initialization."""

from .config import ClientSettings, load_client_settings
from .logging_config import setup_logging

__all__ = [
    "ClientSettings",
    "load_client_settings",
    "setup_logging",
]
