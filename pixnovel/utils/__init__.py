"""
Submodule for shared utilities.
Configuration loading, logging setup and console output.
"""

from .config import TranslatorConfig, load_config, setup_logging

__all__ = [
    "TranslatorConfig",
    "load_config",
    "setup_logging",
]
