"""
Utility modules for settings, logging and environment-driven descriptors.
"""

from .config import ConnkitSettings, load_settings, configure_logging
from .env import relational_from_env, document_from_env, key_value_from_env

__all__ = [
    'ConnkitSettings',
    'load_settings',
    'configure_logging',
    'relational_from_env',
    'document_from_env',
    'key_value_from_env',
]
