"""Block builder mapping segmented candidates to typed blocks.

For each RawBlock the builder picks the block style and list kind, assigns
a key from a counter scoped to one conversion, and hands the inner markup
to the inline tokenizer. Lists explode into one block per item.

Drop rules:
- a list without any ``<li>`` item produces nothing
- a header or paragraph whose runs hold only whitespace produces nothing
"""

from collections.abc import Iterable

import structlog

from portable_blocks.config import BLOCK_KEY_PREFIX, ConversionConfig
from portable_blocks.models.document import (
    Block,
    BlockStyle,
    ListKind,
    MarkDefinition,
    Run,
    StyleMark,
)
from portable_blocks.parsing.inline import tokenize
from portable_blocks.parsing.segmenter import RawBlock, RawBlockKind, extract_list_items
from portable_blocks.postprocessing.marks import MarkRegistry

logger = structlog.get_logger(__name__)

LIST_KINDS: dict[RawBlockKind, ListKind] = {
    RawBlockKind.UNORDERED_LIST: ListKind.BULLET,
    RawBlockKind.ORDERED_LIST: ListKind.NUMBER,
}


class BlockBuilder:
    """Build typed blocks from segmented block candidates.

    A builder instance owns the block counter, so use one instance per
    conversion to get keys ``block-0``, ``block-1``, ...

    Example:
        >>> from portable_blocks.parsing.segmenter import segment
        >>> blocks = BlockBuilder().build(segment("<ul><li>x</li><li>y</li></ul>"))
        >>> [(b.id, b.list_item.value, b.text) for b in blocks]
        [('block-0', 'bullet', 'x'), ('block-1', 'bullet', 'y')]
    """

    def __init__(self, config: ConversionConfig | None = None) -> None:
        """Initialize the builder.

        Args:
            config: Conversion settings. Uses defaults if not provided.
        """
        self.config = config or ConversionConfig()
        self._next_index = 0

    def build(self, raw_blocks: Iterable[RawBlock]) -> list[Block]:
        """Build blocks for every candidate, in order.

        Args:
            raw_blocks: Candidates from ``segment``.

        Returns:
            Typed blocks; may be empty when every candidate was dropped.
        """
        blocks: list[Block] = []
        for raw in raw_blocks:
            blocks.extend(self._build_one(raw))
        return blocks

    def _build_one(self, raw: RawBlock) -> list[Block]:
        if raw.is_list:
            return self._build_list(raw)

        if raw.kind is RawBlockKind.HEADER:
            block = self._make_block(raw.inner, style=BlockStyle.header(raw.level or 1))
        elif raw.kind is RawBlockKind.PREFORMATTED:
            block = self._make_block(raw.inner, base_marks=(StyleMark.CODE,))
        else:
            block = self._make_block(raw.inner)

        if block is None:
            logger.debug("Dropped empty block", kind=raw.kind.value)
            return []
        return [block]

    def _build_list(self, raw: RawBlock) -> list[Block]:
        items = extract_list_items(raw.inner)
        if not items:
            logger.debug("Dropped list without items", kind=raw.kind.value)
            return []

        list_kind = LIST_KINDS[raw.kind]
        blocks = []
        for item in items:
            block = self._make_block(item, list_item=list_kind)
            if block is not None:
                blocks.append(block)
        return blocks

    def _make_block(
        self,
        inner: str,
        style: BlockStyle = BlockStyle.NORMAL,
        list_item: ListKind | None = None,
        base_marks: tuple[StyleMark, ...] = (),
    ) -> Block | None:
        """Tokenize ``inner`` and wrap the runs in a block, or None if empty."""
        index = self._next_index
        registry = MarkRegistry()
        runs = tokenize(
            inner,
            index,
            registry,
            anchor_links=self.config.anchor_links,
            base_marks=base_marks,
        )
        if not any(run.text.strip() for run in runs):
            return None

        self._next_index += 1
        return Block(
            id=f"{BLOCK_KEY_PREFIX}-{index}",
            style=style,
            list_item=list_item,
            level=self.config.list_level if list_item is not None else None,
            mark_defs=_referenced(registry, runs),
            runs=tuple(runs),
        )


def _referenced(registry: MarkRegistry, runs: list[Run]) -> tuple[MarkDefinition, ...]:
    # Anchors that only wrapped trimmed whitespace leave unused definitions.
    used = {run.link for run in runs if run.link is not None}
    return tuple(definition for definition in registry.definitions if definition.key in used)
