"""Block segmentation for cleaned WordPress HTML.

Splits an HTML string into ordered top-level block candidates using
block-opening tags as split points. The scan is single-pass and
non-recursive: nothing inside a block is turned into a nested block, and
split points inside an open list item are ignored so nested lists stay
with their parent item.

Source HTML is not guaranteed to be well formed, so:
- a wrapper without its closing tag extends to the end of its fragment
- text after a closed wrapper, and untagged text, becomes a TEXT block
- whitespace-only fragments are dropped
"""

from dataclasses import dataclass
from enum import Enum
import re


class RawBlockKind(str, Enum):
    """Kind of a segmented block candidate."""

    HEADER = "header"
    PARAGRAPH = "paragraph"
    PREFORMATTED = "preformatted"
    UNORDERED_LIST = "unordered_list"
    ORDERED_LIST = "ordered_list"
    TEXT = "text"


@dataclass(frozen=True)
class RawBlock:
    """A block candidate with its wrapper tag removed.

    Attributes:
        kind: What the wrapper tag was (or TEXT for untagged content).
        inner: Raw inner markup.
        level: Header level (1-6) for HEADER blocks, otherwise None.
    """

    kind: RawBlockKind
    inner: str
    level: int | None = None

    @property
    def is_list(self) -> bool:
        """Whether this candidate is an unordered or ordered list."""
        return self.kind in (RawBlockKind.UNORDERED_LIST, RawBlockKind.ORDERED_LIST)


PARAGRAPH_TAGS = frozenset({"p", "div", "blockquote"})
LIST_TAGS = frozenset({"ul", "ol"})

_BLOCK_TAG = re.compile(
    r"<(/?)(h[1-6]|p|div|blockquote|pre|ul|ol|li)\b[^>]*>",
    re.IGNORECASE,
)
_OPENING_TAG = re.compile(
    r"<(h([1-6])|p|div|blockquote|pre|ul|ol)\b[^>]*>",
    re.IGNORECASE,
)
_LIST_TAG = re.compile(r"<(/?)(ul|ol)\b[^>]*>", re.IGNORECASE)
_ITEM_TAG = re.compile(r"<(/?)(li|ul|ol)\b[^>]*>", re.IGNORECASE)
_HEADER_CLOSE = re.compile(r"</h[1-6]\s*>", re.IGNORECASE)


def segment(html: str) -> list[RawBlock]:
    """Split cleaned HTML into ordered block candidates.

    Args:
        html: HTML that has been through ``normalize``.

    Returns:
        Block candidates in document order.

    Example:
        >>> [b.kind.value for b in segment("<h2>Title</h2><p>Body</p>")]
        ['header', 'paragraph']
    """
    blocks: list[RawBlock] = []
    for fragment in split_fragments(html):
        if fragment.strip():
            blocks.extend(_classify(fragment))
    return blocks


def split_fragments(html: str) -> list[str]:
    """Cut ``html`` before every top-level block-opening tag.

    A list is open from its opening tag to its matching close. Inside an
    open ``<li>`` block tags are content; between items (or after a list
    that is never closed) a block tag ends the list implicitly.
    """
    fragments: list[str] = []
    start = 0
    # One entry per open list: whether an <li> is currently open in it.
    lists: list[bool] = []

    for match in _BLOCK_TAG.finditer(html):
        closing = bool(match.group(1))
        name = match.group(2).lower()

        if name == "li":
            if lists:
                lists[-1] = not closing
            continue

        if name in LIST_TAGS:
            if closing:
                if lists:
                    lists.pop()
                continue
            if lists and lists[-1]:
                lists.append(False)
                continue
            lists.clear()
            lists.append(False)
        elif closing:
            continue
        elif lists and lists[-1]:
            continue
        else:
            lists.clear()

        if match.start() > start:
            fragments.append(html[start : match.start()])
        start = match.start()

    fragments.append(html[start:])
    return fragments


def extract_list_items(inner: str) -> list[str]:
    """Return the inner markup of every top-level ``<li>`` in a list body.

    Items nested in sub-lists stay inside their parent item. An unclosed
    ``<li>`` ends at the next sibling ``<li>`` or at the end of the list.

    Example:
        >>> extract_list_items("<li>one</li><li>two")
        ['one', 'two']
    """
    items: list[str] = []
    item_start: int | None = None
    depth = 0

    for match in _ITEM_TAG.finditer(inner):
        closing = bool(match.group(1))
        name = match.group(2).lower()

        if name in LIST_TAGS:
            depth = max(depth - 1, 0) if closing else depth + 1
            continue
        if depth > 0:
            continue

        if item_start is not None:
            items.append(inner[item_start : match.start()])
            item_start = None
        if not closing:
            item_start = match.end()

    if item_start is not None:
        items.append(inner[item_start:])
    return items


def _classify(fragment: str) -> list[RawBlock]:
    stripped = fragment.lstrip()
    opening = _OPENING_TAG.match(stripped)
    if opening is None:
        return [RawBlock(RawBlockKind.TEXT, fragment)]

    fragment = stripped
    name = opening.group(1).lower()
    body_start = opening.end()

    if name in LIST_TAGS:
        inner, rest = _split_list(fragment, body_start)
        kind = RawBlockKind.UNORDERED_LIST if name == "ul" else RawBlockKind.ORDERED_LIST
        block = RawBlock(kind, inner)
    elif opening.group(2):
        inner, rest = _split_at(fragment, body_start, _HEADER_CLOSE)
        block = RawBlock(RawBlockKind.HEADER, inner, level=int(opening.group(2)))
    else:
        close = re.compile(rf"</{name}\s*>", re.IGNORECASE)
        inner, rest = _split_at(fragment, body_start, close)
        kind = RawBlockKind.PREFORMATTED if name == "pre" else RawBlockKind.PARAGRAPH
        block = RawBlock(kind, inner)

    if rest.strip():
        return [block, RawBlock(RawBlockKind.TEXT, rest)]
    return [block]


def _split_at(fragment: str, body_start: int, close: re.Pattern[str]) -> tuple[str, str]:
    match = close.search(fragment, body_start)
    if match is None:
        return fragment[body_start:], ""
    return fragment[body_start : match.start()], fragment[match.end() :]


def _split_list(fragment: str, body_start: int) -> tuple[str, str]:
    depth = 1
    for match in _LIST_TAG.finditer(fragment, body_start):
        depth += -1 if match.group(1) else 1
        if depth == 0:
            return fragment[body_start : match.start()], fragment[match.end() :]
    return fragment[body_start:], ""
