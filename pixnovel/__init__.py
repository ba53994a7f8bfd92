"""
pixnovel – pixiv novel body translator.
This module turns the proprietary novel markup embedded in pixiv webview
pages into well-formed HTML ready for feed syndication.
"""

__version__ = "0.1.0"

# Expose submodules
from . import translation
