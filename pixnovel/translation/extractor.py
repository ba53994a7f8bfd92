import re
import json
import logging
from typing import List
from pydantic import ValidationError
from scrapy.selector import Selector

from pixnovel.errors import MalformedPayload, NoEmbeddedData
from .payload import NovelPayload


logger = logging.getLogger(__name__)

# The webview page assigns a global object literal whose `novel` key holds
# the payload, followed by sibling keys such as `isOwnWork`.
NOVEL_KEY_RE = re.compile(r"""\bnovel["']?\s*:\s*""")

_CLOSERS = {"{": "}", "[": "]"}


def scan_json_object(text: str, start: int) -> int:
    """
    Find the end of the JSON object starting at text[start].

    Nesting of objects and arrays is tracked with a stack, and braces inside
    string literals (escaped quotes included) are ignored.

    Parameters:
    text (str): The text holding the object.
    start (int): Index of the opening brace.

    Returns:
    int: Index just past the closing brace.

    Raises:
    MalformedPayload: If the object is unbalanced or unterminated.
    """
    if start >= len(text) or text[start] != "{":
        raise MalformedPayload(f"Expected '{{' at offset {start}")

    expected: List[str] = []
    in_string = False
    escaped = False
    for index in range(start, len(text)):
        char = text[index]
        if in_string:
            if escaped:
                escaped = False
            elif char == "\\":
                escaped = True
            elif char == '"':
                in_string = False
        elif char == '"':
            in_string = True
        elif char in _CLOSERS:
            expected.append(_CLOSERS[char])
        elif char in "}]":
            if not expected or expected.pop() != char:
                raise MalformedPayload(
                    f"Unbalanced '{char}' at offset {index}"
                )
            if not expected:
                return index + 1

    raise MalformedPayload(
        f"Unterminated object starting at offset {start}"
    )


def find_payload_script(html: str) -> str:
    """Return the text of the first script holding the novel key."""
    for script in Selector(text=html).xpath("//script/text()").getall():
        if NOVEL_KEY_RE.search(script):
            return script
    raise NoEmbeddedData("No script with an embedded novel payload")


def find_payload_start(script: str) -> int:
    """
    Offset of the object assigned to the novel key.

    Earlier matches that are not followed by an object, such as the word
    "novel:" inside a title string, are skipped. If no match is followed by
    "{", the first one is returned and scanning it reports the error.
    """
    matches = list(NOVEL_KEY_RE.finditer(script))
    for match in matches:
        if script.startswith("{", match.end()):
            return match.end()
    return matches[0].end()


def extract(html: str) -> NovelPayload:
    """
    Extract the novel payload embedded in a webview page.

    Parameters:
    html (str): The full HTML document.

    Returns:
    NovelPayload: The parsed payload, with a non-empty text.

    Raises:
    NoEmbeddedData: If no payload or no text is found.
    MalformedPayload: If the embedded object cannot be parsed.
    """
    script = find_payload_script(html)
    start = find_payload_start(script)
    end = scan_json_object(script, start)
    span = script[start:end]

    try:
        data = json.loads(span)
    except json.JSONDecodeError as e:
        raise MalformedPayload(f"Embedded novel is not valid JSON: {e}") from e

    try:
        payload = NovelPayload.model_validate(data)
    except ValidationError as e:
        raise MalformedPayload(f"Unexpected novel payload shape: {e}") from e

    if not payload.text:
        raise NoEmbeddedData("Embedded novel has no text")

    logger.debug(
        f"Extracted novel payload: {len(payload.text)} chars, "
        f"{len(payload.images)} images"
    )
    return payload
