"""
Settings loader and logging setup for applications using connkit.
"""

import logging
import os
from typing import Any, Dict, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, ValidationError, field_validator

from ..exceptions import ConfigurationError

_VALID_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
_TRUE_VALUES = ("true", "1", "yes", "on")

DEFAULT_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


class ConnkitSettings(BaseModel):
    """Process-wide settings: logging and the env prefixes of each backend."""

    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default=DEFAULT_LOG_FORMAT, description="logging format string")

    relational_prefix: str = Field(default="DB", description="Prefix of relational variables")
    document_prefix: str = Field(default="MONGO", description="Prefix of MongoDB variables")
    key_value_prefix: str = Field(default="VALKEY", description="Prefix of Valkey variables")

    verify_on_open: bool = Field(
        default=False, description="Run SELECT 1 on every relational node when opening"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one of the standard levels."""
        if v.upper() not in _VALID_LOG_LEVELS:
            raise ValueError(f"Log level must be one of: {_VALID_LOG_LEVELS}")
        return v.upper()

    @field_validator("relational_prefix", "document_prefix", "key_value_prefix")
    @classmethod
    def validate_prefix(cls, v: str) -> str:
        """Prefixes are upper-cased and must not be empty."""
        v = v.strip().rstrip("_").upper()
        if not v:
            raise ValueError("Environment prefix must not be empty")
        return v


def load_settings(env_file: Optional[str] = None) -> ConnkitSettings:
    """
    Load settings from CONNKIT_* environment variables and a .env file.

    The .env file is loaded into the process environment first, so the
    descriptor builders in connkit.utils.env see its variables too.

    Args:
        env_file: Optional path to .env file. If None, looks for .env in current directory.

    Returns:
        ConnkitSettings: Validated settings object

    Raises:
        ConfigurationError: If a setting is invalid
    """
    if env_file is None:
        env_file = ".env"

    if os.path.exists(env_file):
        load_dotenv(env_file)

    settings_data: Dict[str, Any] = {
        "log_level": os.getenv("CONNKIT_LOG_LEVEL", "INFO"),
        "log_format": os.getenv("CONNKIT_LOG_FORMAT", DEFAULT_LOG_FORMAT),
        "relational_prefix": os.getenv("CONNKIT_RELATIONAL_PREFIX", "DB"),
        "document_prefix": os.getenv("CONNKIT_DOCUMENT_PREFIX", "MONGO"),
        "key_value_prefix": os.getenv("CONNKIT_KEY_VALUE_PREFIX", "VALKEY"),
        "verify_on_open": os.getenv("CONNKIT_VERIFY_ON_OPEN", "false").lower() in _TRUE_VALUES,
    }

    try:
        return ConnkitSettings(**settings_data)
    except ValidationError as e:
        raise ConfigurationError(f"Settings validation failed: {e}") from e


def configure_logging(level: str = "INFO", fmt: str = DEFAULT_LOG_FORMAT) -> None:
    """Configure root logging for scripts and services using connkit."""
    logging.basicConfig(level=getattr(logging, level.upper(), logging.INFO), format=fmt)
