"""HTML parsing for WordPress post content.

This package provides:
- Entity normalization and paragraph-break cleanup
- Block segmentation (headers, paragraphs, preformatted text, lists)
- Inline tokenization into annotated runs
- Block building with deterministic keys
"""

from portable_blocks.parsing.builder import BlockBuilder
from portable_blocks.parsing.entities import (
    ENTITY_TABLE,
    TEXT_ENTITY_TABLE,
    decode_entities,
    normalize,
)
from portable_blocks.parsing.inline import InlineTokenizer, MarkStack, tokenize
from portable_blocks.parsing.segmenter import (
    RawBlock,
    RawBlockKind,
    extract_list_items,
    segment,
    split_fragments,
)

__all__ = [
    "ENTITY_TABLE",
    "BlockBuilder",
    "InlineTokenizer",
    "MarkStack",
    "RawBlock",
    "RawBlockKind",
    "TEXT_ENTITY_TABLE",
    "decode_entities",
    "extract_list_items",
    "normalize",
    "segment",
    "split_fragments",
    "tokenize",
]
