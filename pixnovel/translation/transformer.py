import html
import logging
from typing import List

from .payload import ImageMap, NovelImage
from .tokenizer import Token, TokenKind, tokenize


logger = logging.getLogger(__name__)

PXIMG_ORIGIN = "https://i.pximg.net"


def proxy_image_url(url: str, proxy_base: str) -> str:
    """
    Route a pixiv image URL through the configured proxy.

    An empty proxy_base strips the origin and leaves a relative URL.
    URLs on other hosts are returned unchanged.
    """
    if url.startswith(PXIMG_ORIGIN):
        return proxy_base + url[len(PXIMG_ORIGIN):]
    return url


def escape_text(value: str) -> str:
    return html.escape(value, quote=False)


def escape_attr(value: str) -> str:
    return html.escape(value, quote=True)


def img_tag(src: str, alt: str) -> str:
    return f'<img src="{escape_attr(src)}" alt="{escape_attr(alt)}">'


def render_uploaded_image(token: Token, images: ImageMap, proxy_base: str) -> str:
    image_id = token.args[0]
    image = images.get(image_id)
    if isinstance(image, dict):
        image = NovelImage.model_validate(image)
    if image is None or not image.original_url:
        logger.warning(f"Unresolved uploaded image reference: {image_id}")
        return escape_text(token.raw)
    src = proxy_image_url(image.original_url, proxy_base)
    return img_tag(src, f"novel illustration {image_id}")


def render_pixiv_image(token: Token, proxy_base: str) -> str:
    if len(token.args) == 2:
        illust_id, page = token.args
        src = f"{proxy_base}/i/{illust_id}_p{page}.jpg"
        alt = f"pixiv illustration {illust_id} page {page}"
    else:
        illust_id = token.args[0]
        src = f"{proxy_base}/i/{illust_id}.jpg"
        alt = f"pixiv illustration {illust_id}"
    return img_tag(src, alt)


def render_argument(value: str) -> str:
    """Escape a tag argument, newlines become <br>."""
    return escape_text(value).replace("\n", "<br>")


def render_line_break(token: Token, inline: bool = False) -> str:
    # Inside a heading or decoration a paragraph cannot be closed
    if inline:
        return "<br>" * token.run_length
    # A blank line (two or more newlines) closes the paragraph
    if token.run_length >= 2:
        return "<br></p><p>"
    return "<br>"


def render_token(
    token: Token, images: ImageMap, proxy_base: str, inline: bool = False
) -> str:
    kind = token.kind
    if kind is TokenKind.TEXT:
        return escape_text(token.raw)
    if kind is TokenKind.LINE_BREAK:
        return render_line_break(token, inline)
    if kind is TokenKind.UPLOADED_IMAGE:
        return render_uploaded_image(token, images, proxy_base)
    if kind is TokenKind.PIXIV_IMAGE:
        return render_pixiv_image(token, proxy_base)
    if kind is TokenKind.RUBY:
        base, ruby = token.args
        return (
            f"<ruby>{render_argument(base)}"
            f"<rt>{render_argument(ruby)}</rt></ruby>"
        )
    if kind is TokenKind.JUMP_URI:
        label, url = token.args
        return (
            f'<a href="{escape_attr(url)}" target="_blank" '
            f'rel="noopener noreferrer">{render_argument(label)}</a>'
        )
    if kind is TokenKind.NEW_PAGE:
        return "<hr>"

    inner = render_tokens(token.children, images, proxy_base, inline=True)
    if kind is TokenKind.CHAPTER:
        return f"<h2>{inner}</h2>"
    if kind is TokenKind.BOLD:
        return f"<strong>{inner}</strong>"
    if kind is TokenKind.ITALIC:
        return f"<em>{inner}</em>"
    if kind is TokenKind.STRIKE:
        return f"<del>{inner}</del>"
    if kind is TokenKind.FONT_SIZE:
        return f'<span style="font-size:{token.args[0]}px">{inner}</span>'
    if kind is TokenKind.FONT_COLOR:
        return f'<span style="color:{escape_attr(token.args[0])}">{inner}</span>'
    if kind is TokenKind.RUBY_SPAN:
        return f"<ruby>{inner}<rt>{escape_text(token.args[0])}</rt></ruby>"

    raise ValueError(f"Unknown token kind: {kind}")


def render_tokens(
    tokens: List[Token], images: ImageMap, proxy_base: str, inline: bool = False
) -> str:
    return "".join(render_token(t, images, proxy_base, inline) for t in tokens)


def transform(text: str, images: ImageMap, proxy_base: str) -> str:
    """
    Rewrite pixiv novel markup into an HTML fragment.

    Parameters:
    text (str): Novel text in pixiv markup.
    images (ImageMap): Uploaded images keyed by id.
    proxy_base (str): Replacement for the pixiv image origin. The empty
        string is a valid value and produces relative URLs.

    Returns:
    str: The fragment, always wrapped as <article><p>...</p></article>.
        Block nesting is not guaranteed valid until normalized.
    """
    body = render_tokens(tokenize(text), images or {}, proxy_base)
    return f"<article><p>{body}</p></article>"
