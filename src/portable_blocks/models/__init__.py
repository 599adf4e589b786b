"""Pydantic models for the portable-blocks document structure."""

from portable_blocks.models.document import (
    LINK_MARK_KIND,
    Block,
    BlockStyle,
    Document,
    ListKind,
    MarkDefinition,
    Run,
    StyleMark,
    is_block_record,
    is_span_record,
    span_records,
)

__all__ = [
    "LINK_MARK_KIND",
    "Block",
    "BlockStyle",
    "Document",
    "ListKind",
    "MarkDefinition",
    "Run",
    "StyleMark",
    "is_block_record",
    "is_span_record",
    "span_records",
]
