"""
Submodule for the novel translation pipeline.
Payload extraction, markup transformation and structural normalization.
"""

from .payload import NovelImage, NovelPayload
from .extractor import extract, scan_json_object
from .tokenizer import Token, TokenKind, tokenize
from .transformer import transform, proxy_image_url
from .normalizer import normalize
from .translator import (
    TranslationResult,
    translate_novel,
    translate_many,
    translate_with_config,
)

__all__ = [
    "NovelImage",
    "NovelPayload",
    "extract",
    "scan_json_object",
    "Token",
    "TokenKind",
    "tokenize",
    "transform",
    "proxy_image_url",
    "normalize",
    "TranslationResult",
    "translate_novel",
    "translate_many",
    "translate_with_config",
]
