"""
Client Configuration Management

Loads client policy settings from environment variables and YAML files.
"""

import logging
import os
from pathlib import Path
from typing import Any, Dict, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

from sbrest.servicebus.constants import (
    CONTENT_TYPE_ATOM_ENTRY,
    DEFAULT_TIMEOUT,
    DEFAULT_TOKEN_TTL,
    SAS_EXPIRY_BUFFER,
)

logger = logging.getLogger(__name__)

ENV_PREFIX = "SBREST_"


class ClientSettings(BaseModel):
    """Policy knobs shared by every client built with these settings."""
    model_config = ConfigDict(frozen=True, extra='forbid')

    default_timeout: int = Field(default=DEFAULT_TIMEOUT, ge=1)
    token_ttl: int = Field(default=DEFAULT_TOKEN_TTL, ge=1)
    token_expiry_buffer: int = Field(default=SAS_EXPIRY_BUFFER, ge=0)
    content_type: str = CONTENT_TYPE_ATOM_ENTRY

    @model_validator(mode='after')
    def validate_token_window(self) -> "ClientSettings":
        """A token must outlive its own expiry buffer."""
        if self.token_ttl <= self.token_expiry_buffer:
            raise ValueError("token_ttl must be greater than token_expiry_buffer")
        return self


_ENV_FIELDS = {
    "DEFAULT_TIMEOUT": "default_timeout",
    "TOKEN_TTL": "token_ttl",
    "TOKEN_EXPIRY_BUFFER": "token_expiry_buffer",
    "CONTENT_TYPE": "content_type",
}


def load_client_settings(config_file: Optional[str] = None) -> ClientSettings:
    """
    Load client settings from file or environment variables.

    Priority order:
    1. Environment variables (highest priority)
    2. Config file (if specified)
    3. Default values

    Environment Variables:
    - SBREST_DEFAULT_TIMEOUT: Receive/send timeout in seconds
    - SBREST_TOKEN_TTL: Lifetime of generated SAS tokens in seconds
    - SBREST_TOKEN_EXPIRY_BUFFER: Seconds before expiry a token is refreshed
    - SBREST_CONTENT_TYPE: Content-Type sent with messages

    Args:
        config_file: Path to YAML configuration file

    Returns:
        Validated ClientSettings

    Raises:
        pydantic.ValidationError: If a value is out of range or not numeric

    Example YAML:
        ```yaml
        servicebus:
          default_timeout: 60
          token_ttl: 600
          token_expiry_buffer: 30
        ```
    """
    config_data: Dict[str, Any] = {}

    if config_file and Path(config_file).exists():
        with open(config_file, 'r') as f:
            file_config = yaml.safe_load(f)
        if file_config and "servicebus" in file_config:
            config_data.update(file_config["servicebus"] or {})
            logger.info(f"Loaded client settings from file: {config_file}")
    elif config_file:
        logger.warning(f"Config file not found, using defaults: {config_file}")

    for env_name, field_name in _ENV_FIELDS.items():
        value = os.getenv(ENV_PREFIX + env_name)
        if value is not None:
            config_data[field_name] = value

    return ClientSettings(**config_data)
