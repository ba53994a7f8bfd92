"""
Single-pass tokenizer for pixiv novel markup.

The text is scanned once from left to right. At every "[" the tag
recognizers are tried in TAG_PRECEDENCE order and the first one that matches
consumes the tag; anything else is plain text.
"""
import re
from bisect import bisect_left
from enum import Enum
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Tuple


class TokenKind(Enum):
    TEXT = "text"
    LINE_BREAK = "line_break"
    UPLOADED_IMAGE = "uploadedimage"
    PIXIV_IMAGE = "pixivimage"
    RUBY = "rb"
    JUMP_URI = "jumpuri"
    CHAPTER = "chapter"
    NEW_PAGE = "newpage"
    BOLD = "b"
    ITALIC = "i"
    STRIKE = "s"
    FONT_SIZE = "size"
    FONT_COLOR = "color"
    RUBY_SPAN = "ruby"


@dataclass
class Token:
    kind: TokenKind
    raw: str
    args: Tuple[str, ...] = ()
    children: List["Token"] = field(default_factory=list)

    @property
    def run_length(self) -> int:
        """Number of consecutive newlines of a LINE_BREAK token."""
        return len(self.raw)


class LabelScanner:
    """
    Bracket index of one text, used to find the end of tags.

    Bracket positions of the text are indexed on first use and the outcome of
    every visited offset is remembered, so a text full of unclosed
    [chapter: tags is still scanned in linear time.
    """

    MARKERS = ("]", "[[", "]]")

    def __init__(self, text: str):
        self.text = text
        self._positions: Optional[Dict[str, List[int]]] = None
        self._outcomes: Dict[int, int] = {}

    def _index(self) -> Dict[str, List[int]]:
        if self._positions is None:
            # Lookahead so that overlapping runs like "[[[" are all indexed
            self._positions = {
                marker: [
                    m.start()
                    for m in re.finditer(f"(?={re.escape(marker)})", self.text)
                ]
                for marker in self.MARKERS
            }
        return self._positions

    def find(self, marker: str, start: int) -> int:
        """Like str.find for one of MARKERS, without rescanning the text."""
        positions = self._index()[marker]
        i = bisect_left(positions, start)
        return positions[i] if i < len(positions) else -1

    def closing_bracket(self, start: int) -> int:
        """Offset of the "]" ending a label that begins at start, or -1."""
        visited = []
        index = start
        outcome = -1
        while True:
            if index in self._outcomes:
                outcome = self._outcomes[index]
                break
            visited.append(index)
            close = self.find("]", index)
            if close < 0:
                break
            nested = self.find("[[", index)
            if nested < 0 or nested > close:
                outcome = close
                break
            nested_close = self.find("]]", nested + 2)
            if nested_close < 0:
                break
            index = nested_close + 2
        for offset in visited:
            self._outcomes[offset] = outcome
        return outcome


# A recognizer returns the token and the offset past it, or None
Match = Optional[Tuple[Token, int]]
Recognizer = Callable[[str, int, bool, LabelScanner], Match]

_SPECIAL_RE = re.compile(r"[\[\n]")
_UPLOADED_IMAGE_RE = re.compile(r"\[uploadedimage:(\d+)\]")
_PIXIV_IMAGE_RE = re.compile(r"\[pixivimage:(\d+)(?:-(\d+))?\]")
_SIZE_OPEN_RE = re.compile(r"\[size=(\d+)\]")
_COLOR_OPEN_RE = re.compile(r"\[color=([^\]\n]+)\]")
_RUBY_OPEN_RE = re.compile(r"\[ruby=([^\]\n]+)\]")


def _match_uploaded_image(
    text: str, pos: int, inline: bool, labels: LabelScanner
) -> Match:
    m = _UPLOADED_IMAGE_RE.match(text, pos)
    if not m:
        return None
    return Token(TokenKind.UPLOADED_IMAGE, m.group(0), (m.group(1),)), m.end()


def _match_pixiv_image(
    text: str, pos: int, inline: bool, labels: LabelScanner
) -> Match:
    m = _PIXIV_IMAGE_RE.match(text, pos)
    if not m:
        return None
    args = (m.group(1),) if m.group(2) is None else (m.group(1), m.group(2))
    return Token(TokenKind.PIXIV_IMAGE, m.group(0), args), m.end()


def _double_bracket(kind: TokenKind) -> Recognizer:
    """Recognizer for [[name:<left>><right>]] tags."""
    prefix = f"[[{kind.value}:"

    def recognize(
        text: str, pos: int, inline: bool, labels: LabelScanner
    ) -> Match:
        if not text.startswith(prefix, pos):
            return None
        body_start = pos + len(prefix)
        end = labels.find("]]", body_start)
        if end < 0:
            return None
        left, sep, right = text[body_start:end].partition(">")
        if not sep:
            return None
        raw = text[pos:end + 2]
        return Token(kind, raw, (left.strip(), right.strip())), end + 2

    return recognize


def _match_chapter(
    text: str, pos: int, inline: bool, labels: LabelScanner
) -> Match:
    prefix = "[chapter:"
    if inline or not text.startswith(prefix, pos):
        return None
    label_start = pos + len(prefix)
    close = labels.closing_bracket(label_start)
    if close < 0:
        return None
    label = text[label_start:close]
    token = Token(
        TokenKind.CHAPTER, text[pos:close + 1], (label,),
        tokenize(label, inline=True)
    )
    return token, close + 1


def _match_new_page(
    text: str, pos: int, inline: bool, labels: LabelScanner
) -> Match:
    if inline or not text.startswith("[newpage]", pos):
        return None
    return Token(TokenKind.NEW_PAGE, "[newpage]"), pos + len("[newpage]")


def _decoration(
    kind: TokenKind, open_re: Optional[re.Pattern] = None
) -> Recognizer:
    """Recognizer for [name]...[/name] and [name=value]...[/name] tags."""
    plain_open = f"[{kind.value}]"
    close_tag = f"[/{kind.value}]"

    def recognize(
        text: str, pos: int, inline: bool, labels: LabelScanner
    ) -> Match:
        if open_re is not None:
            m = open_re.match(text, pos)
            if not m:
                return None
            args, body_start = (m.group(1),), m.end()
        elif text.startswith(plain_open, pos):
            args, body_start = (), pos + len(plain_open)
        else:
            return None
        line_end = text.find("\n", body_start)
        if line_end < 0:
            line_end = len(text)
        close = text.find(close_tag, body_start, line_end)
        if close < 0:
            return None
        end = close + len(close_tag)
        body = text[body_start:close]
        return Token(kind, text[pos:end], args, tokenize(body, inline=True)), end

    return recognize


TAG_PRECEDENCE: List[Tuple[TokenKind, Recognizer]] = [
    (TokenKind.UPLOADED_IMAGE, _match_uploaded_image),
    (TokenKind.PIXIV_IMAGE, _match_pixiv_image),
    (TokenKind.RUBY, _double_bracket(TokenKind.RUBY)),
    (TokenKind.JUMP_URI, _double_bracket(TokenKind.JUMP_URI)),
    (TokenKind.CHAPTER, _match_chapter),
    (TokenKind.NEW_PAGE, _match_new_page),
    (TokenKind.BOLD, _decoration(TokenKind.BOLD)),
    (TokenKind.ITALIC, _decoration(TokenKind.ITALIC)),
    (TokenKind.STRIKE, _decoration(TokenKind.STRIKE)),
    (TokenKind.FONT_SIZE, _decoration(TokenKind.FONT_SIZE, _SIZE_OPEN_RE)),
    (TokenKind.FONT_COLOR, _decoration(TokenKind.FONT_COLOR, _COLOR_OPEN_RE)),
    (TokenKind.RUBY_SPAN, _decoration(TokenKind.RUBY_SPAN, _RUBY_OPEN_RE)),
]


def match_tag(
    text: str, pos: int, inline: bool = False,
    labels: Optional[LabelScanner] = None
) -> Match:
    """Try every recognizer at text[pos] in precedence order."""
    if labels is None:
        labels = LabelScanner(text)
    for _, recognize in TAG_PRECEDENCE:
        result = recognize(text, pos, inline, labels)
        if result is not None:
            return result
    return None


def normalize_newlines(text: str) -> str:
    return text.replace("\r\n", "\n").replace("\r", "\n")


def tokenize(text: str, inline: bool = False) -> List[Token]:
    """
    Split novel text into tokens.

    Parameters:
    text (str): Novel text in pixiv markup.
    inline (bool): Only recognize inline tags. Block tags (chapter, newpage)
        are kept as text. Used for chapter labels and decoration bodies.
        Newlines still produce LINE_BREAK tokens.

    Returns:
    List[Token]: Tokens in source order. Adjacent text is merged.
    """
    text = normalize_newlines(text)
    tokens: List[Token] = []
    pending: List[str] = []
    labels = LabelScanner(text)

    def flush():
        if pending:
            chunk = "".join(pending)
            tokens.append(Token(TokenKind.TEXT, chunk))
            pending.clear()

    pos = 0
    while pos < len(text):
        m = _SPECIAL_RE.search(text, pos)
        if m is None:
            pending.append(text[pos:])
            break
        if m.start() > pos:
            pending.append(text[pos:m.start()])
        pos = m.start()

        if text[pos] == "\n":
            end = pos
            while end < len(text) and text[end] == "\n":
                end += 1
            flush()
            tokens.append(Token(TokenKind.LINE_BREAK, text[pos:end]))
            pos = end
            continue

        result = match_tag(text, pos, inline, labels)
        if result is None:
            pending.append("[")
            pos += 1
            continue
        token, pos = result
        flush()
        tokens.append(token)

    flush()
    return tokens
