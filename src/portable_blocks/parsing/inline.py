"""Inline tokenizer turning a block's inner markup into annotated runs.

The markup is split on tag boundaries (the tags themselves are kept as
separate pieces) and walked left to right with two pieces of state:

- a MarkStack of currently open style marks (strong, em, code)
- a text buffer that is flushed as a run whenever the annotations change

Closing a style flushes *before* removing the mark, so text directly ahead
of ``</strong>`` stays bold. ``<br>`` adds a newline to the buffer rather
than starting a new run. Unbalanced or unknown tags never raise; leftover
open marks at the end of input are discarded.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
import re

import structlog

from portable_blocks.config import SPAN_KEY_PREFIX
from portable_blocks.models.document import Run, StyleMark
from portable_blocks.postprocessing.marks import MarkRegistry

logger = structlog.get_logger(__name__)

STYLE_TAGS: dict[str, StyleMark] = {
    "strong": StyleMark.STRONG,
    "b": StyleMark.STRONG,
    "em": StyleMark.EM,
    "i": StyleMark.EM,
    "code": StyleMark.CODE,
}

# A tag must start with a letter right after "<", so decoded text such as
# "a < b" is never mistaken for markup.
_TAG_SPLIT = re.compile(r"(<!--.*?-->|</?[A-Za-z][^<>]*>)", re.DOTALL)
_TAG_NAME = re.compile(r"^<(/?)([A-Za-z][A-Za-z0-9]*)")
_HREF = re.compile(r"""\bhref\s*=\s*(?:"([^"]*)"|'([^']*)'|([^\s>]+))""", re.IGNORECASE)


class MarkStack:
    """Ordered set of currently open style marks.

    Opening a mark that is already open is a no-op, so malformed
    double-opens never nest.
    """

    def __init__(self, marks: Iterable[StyleMark] = ()) -> None:
        """Initialize the stack, optionally with marks that are always open."""
        self._marks: list[StyleMark] = []
        for mark in marks:
            self.open(mark)

    def open(self, mark: StyleMark) -> None:
        """Push ``mark`` unless it is already open."""
        if mark not in self._marks:
            self._marks.append(mark)

    def close(self, mark: StyleMark) -> None:
        """Remove ``mark`` if open; closing an unopened mark is ignored."""
        if mark in self._marks:
            self._marks.remove(mark)

    @property
    def current(self) -> tuple[StyleMark, ...]:
        """Open marks in the order they were opened."""
        return tuple(self._marks)

    def __contains__(self, mark: object) -> bool:
        return mark in self._marks

    def __len__(self) -> int:
        return len(self._marks)


@dataclass
class _PendingRun:
    text: str
    marks: tuple[StyleMark, ...]
    link: str | None = None

    def accepts(self, marks: tuple[StyleMark, ...], link: str | None) -> bool:
        return set(self.marks) == set(marks) and self.link == link


@dataclass
class InlineTokenizer:
    """Stateful walker over one block's inner markup.

    Attributes:
        block_index: Index used to build run keys (``span-<block>-<n>``).
        registry: Mark registry of the block; anchors register links here.
        anchor_links: Whether ``<a href>`` produces link marks.
        base_marks: Marks open for the whole block (``code`` for ``<pre>``).
    """

    block_index: int
    registry: MarkRegistry | None = None
    anchor_links: bool = True
    base_marks: tuple[StyleMark, ...] = ()
    _stack: MarkStack = field(init=False, default_factory=MarkStack)
    _buffer: list[str] = field(init=False, default_factory=list)
    _link: str | None = field(init=False, default=None)
    _pending: list[_PendingRun] = field(init=False, default_factory=list)

    def __post_init__(self) -> None:
        self._stack = MarkStack(self.base_marks)

    def tokenize(self, inner_html: str) -> list[Run]:
        """Walk ``inner_html`` and return its runs.

        Args:
            inner_html: Block content with the block wrapper removed.

        Returns:
            Runs in order; a single empty run when there is no text.
        """
        for piece in _TAG_SPLIT.split(inner_html):
            if not piece:
                continue
            if _TAG_SPLIT.fullmatch(piece):
                self._handle_tag(piece)
            else:
                self._buffer.append(piece)

        self._flush()
        return self._finalize()

    def _handle_tag(self, tag: str) -> None:
        name_match = _TAG_NAME.match(tag)
        if name_match is None:
            # comment
            return

        closing = bool(name_match.group(1))
        name = name_match.group(2).lower()

        style = STYLE_TAGS.get(name)
        if style is not None:
            self._flush()
            if closing:
                self._stack.close(style)
            else:
                self._stack.open(style)
        elif name == "br":
            self._buffer.append("\n")
        elif name == "a":
            self._flush()
            self._link = None if closing else self._anchor_target(tag)

    def _anchor_target(self, tag: str) -> str | None:
        if not self.anchor_links or self.registry is None:
            return None
        href_match = _HREF.search(tag)
        if href_match is None:
            return None
        href = next(group for group in href_match.groups() if group is not None).strip()
        if not href:
            return None
        return self.registry.resolve(href)

    def _flush(self) -> None:
        if not self._buffer:
            return
        text = "".join(self._buffer)
        self._buffer.clear()

        marks = self._stack.current
        if self._pending and self._pending[-1].accepts(marks, self._link):
            self._pending[-1].text += text
        else:
            self._pending.append(_PendingRun(text, marks, self._link))

    def _finalize(self) -> list[Run]:
        pending = self._pending

        # Trim the block's outer whitespace only.
        while pending and not pending[0].text.strip():
            pending.pop(0)
        while pending and not pending[-1].text.strip():
            pending.pop()
        if pending:
            pending[0].text = pending[0].text.lstrip()
            pending[-1].text = pending[-1].text.rstrip()

        if not pending:
            return [Run(id=f"{SPAN_KEY_PREFIX}-{self.block_index}-0")]

        return [
            Run(
                id=f"{SPAN_KEY_PREFIX}-{self.block_index}-{index}",
                text=item.text,
                marks=item.marks,
                link=item.link,
            )
            for index, item in enumerate(pending)
        ]


def tokenize(
    inner_html: str,
    block_index: int,
    registry: MarkRegistry | None = None,
    *,
    anchor_links: bool = True,
    base_marks: tuple[StyleMark, ...] = (),
) -> list[Run]:
    """Tokenize a block's inner markup into runs.

    Args:
        inner_html: Block content with the block wrapper removed.
        block_index: Index of the owning block, used for run keys.
        registry: The owning block's mark registry. Without one, anchors
            contribute text only.
        anchor_links: Whether ``<a href>`` produces link marks.
        base_marks: Marks open for the whole block.

    Returns:
        Runs in document order, never empty. Their concatenated text equals
        the tag-stripped input with its outer whitespace trimmed.

    Example:
        >>> [(r.text, [m.value for m in r.marks]) for r in tokenize("a <b>b</b>", 0)]
        [('a ', []), ('b', ['strong'])]
    """
    tokenizer = InlineTokenizer(
        block_index=block_index,
        registry=registry,
        anchor_links=anchor_links,
        base_marks=base_marks,
    )
    return tokenizer.tokenize(inner_html)
