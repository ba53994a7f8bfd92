import time
import logging
from typing import Dict, List, Optional
from pydantic import BaseModel, Field

from pixnovel.errors import NoEmbeddedData, TranslationError
from pixnovel.utils.config import TranslatorConfig
from .extractor import extract
from .normalizer import normalize
from .transformer import transform


logger = logging.getLogger(__name__)


class TranslationResult(BaseModel):
    """Outcome of translating one novel page."""
    novel_id: str = Field(..., description="Identifier of the novel")
    content: str = Field("", description="Translated HTML, empty if none")
    success: bool = True
    error: Optional[str] = None
    duration: float = Field(0.0, description="Seconds spent translating")


def translate_novel(html: str, proxy_base: str) -> str:
    """
    Translate the novel embedded in a webview page into HTML.

    Parameters:
    html (str): The full webview HTML document.
    proxy_base (str): Replacement for the pixiv image origin.

    Returns:
    str: The normalized <article> document, or "" if the page carries no
        novel text.

    Raises:
    MalformedPayload: If the embedded novel cannot be parsed.
    NormalizationError: If the generated fragment cannot be corrected.
    """
    try:
        payload = extract(html)
    except NoEmbeddedData as e:
        logger.info(f"Nothing to translate: {e}")
        return ""

    fragment = transform(payload.text, payload.images, proxy_base)
    return normalize(fragment)


def translate_with_config(html: str, config: TranslatorConfig) -> str:
    """Translate a page using the proxy resolved from a TranslatorConfig."""
    return translate_novel(html, config.resolved_img_proxy())


def translate_many(documents: Dict[str, str], proxy_base: str) -> List[TranslationResult]:
    """
    Translate several pages independently.

    A failure in one page is recorded on its own result and never stops the
    translation of the others.
    """
    results = []
    for novel_id, html in documents.items():
        start_time = time.time()
        try:
            content = translate_novel(html, proxy_base)
            result = TranslationResult(novel_id=novel_id, content=content)
        except TranslationError as e:
            logger.error(f"Error translating novel {novel_id}: {e}")
            result = TranslationResult(
                novel_id=novel_id, success=False, error=str(e)
            )
        result.duration = time.time() - start_time
        results.append(result)
    return results
