"""
Config Module

Composition settings and their YAML/environment loading.
"""

from .loader import ConfigLoader, GraphSettings, configure, get_settings, setup_logging

__all__ = [
    "ConfigLoader",
    "GraphSettings",
    "configure",
    "get_settings",
    "setup_logging",
]
