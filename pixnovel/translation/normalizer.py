"""
Structural normalization of translated fragments.

The fragment is copied into an owned tree (NodeArena) where every node is
addressed by index, then corrected in two passes:

1. post-order: <p> nested in another <p> is replaced by its children
2. pre-order: <h2> inside a <p> splits the paragraph around the heading
"""
import logging
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple
from bs4 import BeautifulSoup, Comment, ParserRejectedMarkup, Tag

from pixnovel.errors import NormalizationError
from .transformer import escape_attr, escape_text


logger = logging.getLogger(__name__)

VOID_ELEMENTS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "link", "meta", "source", "track", "wbr",
})
HOISTED_BLOCKS = frozenset({"h2"})


@dataclass
class Node:
    tag: Optional[str]  # None for text nodes
    text: str = ""
    attrs: List[Tuple[str, str]] = field(default_factory=list)
    parent: Optional[int] = None
    children: List[int] = field(default_factory=list)


class NodeArena:
    """Tree of nodes stored in a list, linked by parent and child indices."""

    def __init__(self):
        self.nodes: List[Node] = []

    def __getitem__(self, index: int) -> Node:
        return self.nodes[index]

    def add_element(self, tag: str, attrs=None) -> int:
        self.nodes.append(Node(tag=tag, attrs=list(attrs or [])))
        return len(self.nodes) - 1

    def add_text(self, text: str) -> int:
        self.nodes.append(Node(tag=None, text=text))
        return len(self.nodes) - 1

    def clone_shallow(self, index: int) -> int:
        """New detached element with the same tag and attributes."""
        node = self.nodes[index]
        return self.add_element(node.tag, node.attrs)

    def append_child(self, parent: int, child: int) -> None:
        self.detach(child)
        self.nodes[parent].children.append(child)
        self.nodes[child].parent = parent

    def insert_after(self, anchor: int, child: int) -> None:
        self.detach(child)
        parent = self.nodes[anchor].parent
        siblings = self.nodes[parent].children
        siblings.insert(siblings.index(anchor) + 1, child)
        self.nodes[child].parent = parent

    def detach(self, index: int) -> None:
        parent = self.nodes[index].parent
        if parent is not None:
            self.nodes[parent].children.remove(index)
            self.nodes[index].parent = None

    def unwrap(self, index: int) -> None:
        """Replace a node by its children, in place."""
        node = self.nodes[index]
        siblings = self.nodes[node.parent].children
        position = siblings.index(index)
        siblings[position:position + 1] = node.children
        for child in node.children:
            self.nodes[child].parent = node.parent
        node.children = []
        node.parent = None

    def following_siblings(self, index: int) -> List[int]:
        siblings = self.nodes[self.nodes[index].parent].children
        return siblings[siblings.index(index) + 1:]

    def nearest_ancestor(self, index: int, tag: str) -> Optional[int]:
        parent = self.nodes[index].parent
        while parent is not None:
            if self.nodes[parent].tag == tag:
                return parent
            parent = self.nodes[parent].parent
        return None

    def pre_order(self, root: int) -> Iterator[int]:
        stack = [root]
        while stack:
            index = stack.pop()
            yield index
            stack.extend(reversed(self.nodes[index].children))

    def post_order(self, root: int) -> List[int]:
        order: List[int] = []
        stack = [(root, False)]
        while stack:
            index, visited = stack.pop()
            if visited:
                order.append(index)
                continue
            stack.append((index, True))
            for child in reversed(self.nodes[index].children):
                stack.append((child, False))
        return order


def _copy_children(arena: NodeArena, source: Tag, parent: int) -> None:
    for child in source.children:
        if isinstance(child, Tag):
            index = arena.add_element(child.name, child.attrs.items())
            arena.append_child(parent, index)
            _copy_children(arena, child, index)
        elif isinstance(child, Comment):
            continue
        else:
            arena.append_child(parent, arena.add_text(str(child)))


def parse_fragment(fragment: str) -> Tuple[NodeArena, int]:
    """
    Parse a fragment rooted at a single <article> into a NodeArena.

    Returns:
    Tuple[NodeArena, int]: The arena and the index of the <article> node.

    Raises:
    NormalizationError: If the fragment is not a single <article> element.
    """
    try:
        # html.parser keeps invalid nesting as written
        soup = BeautifulSoup(
            fragment, "html.parser", multi_valued_attributes=None
        )
    except ParserRejectedMarkup as e:
        raise NormalizationError(f"Fragment could not be parsed: {e}") from e

    roots = [
        child for child in soup.children
        if isinstance(child, Tag) or (
            not isinstance(child, Comment) and str(child).strip()
        )
    ]
    if len(roots) != 1 or not isinstance(roots[0], Tag) \
            or roots[0].name != "article":
        raise NormalizationError(
            "Fragment must consist of a single <article> element"
        )

    arena = NodeArena()
    root = arena.add_element("article", roots[0].attrs.items())
    _copy_children(arena, roots[0], root)
    return arena, root


def unwrap_nested_paragraphs(arena: NodeArena, root: int) -> int:
    """Unwrap every <p> that sits inside another <p>, innermost first."""
    count = 0
    for index in arena.post_order(root):
        if arena[index].tag == "p" and arena.nearest_ancestor(index, "p") is not None:
            arena.unwrap(index)
            count += 1
    return count


def hoist_block(arena: NodeArena, block: int, paragraph: int) -> None:
    """
    Move block out of paragraph, splitting everything in between.

    Content before the block stays where it is. Content after it moves to
    clones of the split elements, and the paragraph clone follows the block.
    """
    node = block
    right: Optional[int] = None
    while node != paragraph:
        parent = arena[node].parent
        clone = arena.clone_shallow(parent)
        if right is not None:
            arena.append_child(clone, right)
        for sibling in arena.following_siblings(node):
            arena.append_child(clone, sibling)
        right = clone
        node = parent

    arena.insert_after(paragraph, block)
    arena.insert_after(block, right)


def hoist_blocks(arena: NodeArena, root: int) -> int:
    """Lift every hoisted block out of its enclosing paragraphs."""
    count = 0
    blocks = [
        index for index in arena.pre_order(root)
        if arena[index].tag in HOISTED_BLOCKS
    ]
    for block in blocks:
        paragraph = arena.nearest_ancestor(block, "p")
        while paragraph is not None:
            hoist_block(arena, block, paragraph)
            count += 1
            paragraph = arena.nearest_ancestor(block, "p")
    return count


def serialize(arena: NodeArena, index: int) -> str:
    parts: List[str] = []

    def emit(i: int) -> None:
        node = arena[i]
        if node.tag is None:
            parts.append(escape_text(node.text))
            return
        attrs = "".join(
            f' {name}="{escape_attr(value or "")}"' for name, value in node.attrs
        )
        parts.append(f"<{node.tag}{attrs}>")
        if node.tag in VOID_ELEMENTS:
            return
        for child in node.children:
            emit(child)
        parts.append(f"</{node.tag}>")

    emit(index)
    return "".join(parts)


def normalize(fragment: str) -> str:
    """
    Correct block nesting of a translated fragment.

    Parameters:
    fragment (str): HTML rooted at a single <article>.

    Returns:
    str: The same document where no <p> contains a <p> or an <h2>.
        Empty paragraphs left by splitting are kept.

    Raises:
    NormalizationError: If the fragment cannot be parsed.
    """
    arena, root = parse_fragment(fragment)
    unwrapped = unwrap_nested_paragraphs(arena, root)
    hoisted = hoist_blocks(arena, root)
    if unwrapped or hoisted:
        logger.debug(
            f"Normalized fragment: {unwrapped} paragraphs unwrapped, "
            f"{hoisted} headings hoisted"
        )
    return serialize(arena, root)
