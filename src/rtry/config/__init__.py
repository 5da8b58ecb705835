"""
Configuration management.

Config file parsing and environment variable resolution.
"""

from rtry.config.loader import Config, load_config
from rtry.config.resolver import resolve_config

__all__ = [
    "load_config",
    "Config",
    "resolve_config",
]
