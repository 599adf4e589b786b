"""Portable-blocks document models.

This module defines the frozen Pydantic models produced by the converter
and consumed by the link detector:
- Document: ordered blocks of one converted article body
- Block: a paragraph, header or list item with its own mark registry
- Run: a span of text sharing one set of annotations
- MarkDefinition: a block-scoped annotation (link) referenced by key

Two serializations are supported. ``to_records()`` produces the plain
fixture format (``id`` / ``key`` fields); ``to_portable_text()`` and
``from_portable_text()`` speak the content store wire format, where every
object carries ``_key`` and ``_type``.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator
import structlog

from portable_blocks.config import BLOCK_KEY_PREFIX, SPAN_KEY_PREFIX
from portable_blocks.exceptions import DocumentShapeError

logger = structlog.get_logger(__name__)

LINK_MARK_KIND = "link"


class BlockStyle(str, Enum):
    """Paragraph style of a block."""

    NORMAL = "normal"
    H1 = "h1"
    H2 = "h2"
    H3 = "h3"
    H4 = "h4"
    H5 = "h5"
    H6 = "h6"

    @classmethod
    def header(cls, level: int) -> BlockStyle:
        """Return the header style for a level between 1 and 6."""
        if not 1 <= level <= 6:
            msg = f"Header level must be between 1 and 6, got {level}"
            raise ValueError(msg)
        return cls(f"h{level}")

    @property
    def is_header(self) -> bool:
        """Whether this style is one of h1..h6."""
        return self is not BlockStyle.NORMAL


class ListKind(str, Enum):
    """Kind of list a list-item block came from."""

    BULLET = "bullet"
    NUMBER = "number"


class StyleMark(str, Enum):
    """Inline decorator marks."""

    STRONG = "strong"
    EM = "em"
    CODE = "code"


_STYLE_NAMES = frozenset(mark.value for mark in StyleMark)


class MarkDefinition(BaseModel):
    """A block-scoped annotation referenced from runs by key.

    Attributes:
        key: Identifier, unique within the owning block.
        kind: Annotation type; the converter only produces ``link``.
        href: Link target.
    """

    model_config = ConfigDict(frozen=True)

    key: str = Field(description="Mark key, unique within the block")
    kind: str = Field(default=LINK_MARK_KIND, description="Annotation type")
    href: str = Field(default="", description="Link target")

    @property
    def is_link(self) -> bool:
        """Whether this definition is a link annotation."""
        return self.kind == LINK_MARK_KIND

    def to_portable_text(self) -> dict[str, Any]:
        """Serialize to the content store wire format."""
        return {"_key": self.key, "_type": self.kind, "href": self.href}


class Run(BaseModel):
    """A contiguous span of text sharing one set of annotations.

    Attributes:
        id: Identifier, unique within the owning block.
        text: Plain text; never contains markup.
        marks: Style decorators in the order they were opened.
        link: Key of the mark definition annotating this run, if any.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Run key")
    text: str = Field(default="", description="Plain text content")
    marks: tuple[StyleMark, ...] = Field(default=(), description="Style decorators")
    link: str | None = Field(default=None, description="Referenced mark definition key")

    def mark_names(self) -> list[str]:
        """Return serialized mark names: styles first, then the link key."""
        names = [mark.value for mark in self.marks]
        if self.link is not None:
            names.append(self.link)
        return names

    def to_portable_text(self) -> dict[str, Any]:
        """Serialize to a content store span."""
        return {"_type": "span", "_key": self.id, "text": self.text, "marks": self.mark_names()}


class Block(BaseModel):
    """One structural unit of a document.

    Attributes:
        id: Block key, unique within the document.
        style: Paragraph style (normal or a header level).
        list_item: List kind when the block came from a list item.
        level: List nesting level, set together with ``list_item``.
        mark_defs: Block-scoped annotation registry.
        runs: Inline text runs, never empty.
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Block key")
    style: BlockStyle = Field(default=BlockStyle.NORMAL, description="Block style")
    list_item: ListKind | None = Field(default=None, description="List kind")
    level: int | None = Field(default=None, description="List nesting level")
    mark_defs: tuple[MarkDefinition, ...] = Field(default=(), description="Mark registry")
    runs: tuple[Run, ...] = Field(min_length=1, description="Inline runs")

    @model_validator(mode="after")
    def _check_mark_references(self) -> Block:
        """Every run's link reference must resolve within this block."""
        keys = {definition.key for definition in self.mark_defs}
        for run in self.runs:
            if run.link is not None and run.link not in keys:
                msg = f"Run {run.id!r} references unknown mark {run.link!r} in block {self.id!r}"
                raise ValueError(msg)
        return self

    @property
    def text(self) -> str:
        """Concatenated text of all runs."""
        return "".join(run.text for run in self.runs)

    def to_record(self) -> dict[str, Any]:
        """Serialize to the plain fixture record format."""
        record: dict[str, Any] = {"id": self.id, "style": self.style.value}
        if self.list_item is not None:
            record["listItem"] = self.list_item.value
            record["level"] = self.level
        record["markDefs"] = [
            {"key": definition.key, "type": definition.kind, "href": definition.href}
            for definition in self.mark_defs
        ]
        record["children"] = [
            {"key": run.id, "text": run.text, "marks": run.mark_names()} for run in self.runs
        ]
        return record

    def to_portable_text(self) -> dict[str, Any]:
        """Serialize to the content store wire format."""
        record: dict[str, Any] = {"_type": "block", "_key": self.id, "style": self.style.value}
        if self.list_item is not None:
            record["listItem"] = self.list_item.value
            record["level"] = self.level
        record["markDefs"] = [definition.to_portable_text() for definition in self.mark_defs]
        record["children"] = [run.to_portable_text() for run in self.runs]
        return record

    @classmethod
    def from_portable_text(cls, record: Mapping[str, Any], position: int = 0) -> Block:
        """Parse a block record from the content store.

        Accepts both ``_key`` and ``key`` style fields. Marks naming one of
        the block's mark definitions become the run's link reference;
        unknown decorator names and dangling references are dropped. Inline
        objects among the children are not runs and are skipped.

        Args:
            record: The block record.
            position: Index of the block in its body, used for missing keys.

        Returns:
            The parsed block.

        Raises:
            DocumentShapeError: If the record or its children are not mappings.
        """
        if not isinstance(record, Mapping):
            raise DocumentShapeError("a block mapping", record)

        block_id = _record_key(record, f"{BLOCK_KEY_PREFIX}-{position}")
        mark_defs = tuple(
            MarkDefinition(
                key=_record_key(definition, f"mark-{position}-{index}"),
                kind=definition.get("_type") or definition.get("type") or LINK_MARK_KIND,
                href=definition.get("href") or "",
            )
            for index, definition in enumerate(record.get("markDefs") or ())
            if isinstance(definition, Mapping)
        )
        def_keys = {definition.key for definition in mark_defs}

        children = record.get("children") or ()
        if isinstance(children, (str, bytes)) or not isinstance(children, Sequence):
            raise DocumentShapeError("a list of spans", children)

        runs = [
            _run_from_record(child, def_keys, f"{SPAN_KEY_PREFIX}-{position}-{index}")
            for index, child in enumerate(span_records(children))
        ]
        if not runs:
            runs = [Run(id=f"{SPAN_KEY_PREFIX}-{position}-0")]

        style_name = record.get("style") or BlockStyle.NORMAL.value
        try:
            style = BlockStyle(style_name)
        except ValueError:
            logger.debug("Unknown block style, using normal", block=block_id, style=style_name)
            style = BlockStyle.NORMAL

        list_item = record.get("listItem")
        try:
            list_kind = ListKind(list_item) if list_item else None
        except ValueError:
            logger.debug("Unknown list kind, ignoring", block=block_id, list_item=list_item)
            list_kind = None

        return cls(
            id=block_id,
            style=style,
            list_item=list_kind,
            level=(record.get("level") or 1) if list_kind else None,
            mark_defs=mark_defs,
            runs=tuple(runs),
        )


class Document(BaseModel):
    """An ordered sequence of blocks; always holds at least one block."""

    model_config = ConfigDict(frozen=True)

    blocks: tuple[Block, ...] = Field(min_length=1, description="Document blocks")

    @classmethod
    def empty(cls) -> Document:
        """Return the placeholder document: one block with one empty run."""
        return cls(
            blocks=(
                Block(
                    id=f"{BLOCK_KEY_PREFIX}-0",
                    runs=(Run(id=f"{SPAN_KEY_PREFIX}-0-0"),),
                ),
            )
        )

    @property
    def text(self) -> str:
        """Block texts joined by blank lines."""
        return "\n\n".join(block.text for block in self.blocks)

    def to_records(self) -> list[dict[str, Any]]:
        """Serialize every block to the fixture record format."""
        return [block.to_record() for block in self.blocks]

    def to_portable_text(self) -> list[dict[str, Any]]:
        """Serialize every block to the content store wire format."""
        return [block.to_portable_text() for block in self.blocks]

    @classmethod
    def from_portable_text(cls, body: Sequence[Any]) -> Document:
        """Parse a content store body into a document.

        Entries whose ``_type`` is not ``block`` (images, embeds) are skipped.
        An empty body yields the placeholder document.

        Raises:
            DocumentShapeError: If ``body`` is not a list of records.
        """
        if isinstance(body, (str, bytes)) or not isinstance(body, Sequence):
            raise DocumentShapeError("a list of block records", body)

        blocks = [
            Block.from_portable_text(record, position)
            for position, record in enumerate(body)
            if is_block_record(record)
        ]
        if not blocks:
            return cls.empty()
        return cls(blocks=tuple(blocks))


def is_block_record(record: Any) -> bool:
    """Whether a body entry is a text block (rather than an image or embed)."""
    if not isinstance(record, Mapping):
        raise DocumentShapeError("a block mapping", record)
    return record.get("_type", "block") == "block"


def is_span_record(record: Any) -> bool:
    """Whether a block child is a text span (rather than an inline object)."""
    if not isinstance(record, Mapping):
        raise DocumentShapeError("a span mapping", record)
    return record.get("_type") in (None, "span")


def span_records(children: Sequence[Any]) -> list[Mapping[str, Any]]:
    """Return the text spans among a block's children, in order."""
    return [child for child in children if is_span_record(child)]


def _record_key(record: Mapping[str, Any], fallback: str) -> str:
    return record.get("_key") or record.get("key") or record.get("id") or fallback


def _run_from_record(child: Mapping[str, Any], def_keys: set[str], fallback_key: str) -> Run:
    marks: list[StyleMark] = []
    link: str | None = None
    for name in child.get("marks") or ():
        if name in def_keys and link is None:
            link = name
        elif name in _STYLE_NAMES:
            if StyleMark(name) not in marks:
                marks.append(StyleMark(name))
        else:
            logger.debug("Dropping unknown mark", span=fallback_key, mark=name)

    return Run(
        id=_record_key(child, fallback_key),
        text=child.get("text") or "",
        marks=tuple(marks),
        link=link,
    )
