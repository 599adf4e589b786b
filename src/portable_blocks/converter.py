"""HTML to portable-blocks conversion.

Pipeline: normalize entities → segment into block candidates → build
blocks (tokenizing inline markup) → assemble the document. The converter
is a pure function of its input and configuration; keys are reproducible
across runs.
"""

from collections.abc import Sequence

import structlog

from portable_blocks.config import ConversionConfig
from portable_blocks.models.document import Block, Document
from portable_blocks.parsing.builder import BlockBuilder
from portable_blocks.parsing.entities import normalize
from portable_blocks.parsing.segmenter import segment

logger = structlog.get_logger(__name__)


class PortableTextConverter:
    """Converter for legacy WordPress HTML content.

    Example:
        >>> converter = PortableTextConverter()
        >>> document = converter.convert("<h2>Hello</h2><p>World</p>")
        >>> [block.style.value for block in document.blocks]
        ['h2', 'normal']
    """

    def __init__(self, config: ConversionConfig | None = None) -> None:
        """Initialize the converter.

        Args:
            config: Conversion settings. Uses defaults if not provided.
        """
        self.config = config or ConversionConfig()

    def convert(self, html: str) -> Document:
        """Convert an HTML fragment into a document.

        Malformed markup degrades to best-effort text; empty input yields
        one empty block.

        Args:
            html: Raw HTML, possibly malformed.

        Returns:
            The converted document.

        Raises:
            DocumentShapeError: If ``html`` is not a string.
        """
        cleaned = normalize(html)
        raw_blocks = segment(cleaned)
        blocks = BlockBuilder(self.config).build(raw_blocks)

        logger.debug(
            "Converted HTML",
            candidates=len(raw_blocks),
            blocks=len(blocks),
        )
        return assemble_document(blocks)


def assemble_document(blocks: Sequence[Block]) -> Document:
    """Wrap blocks in a document, substituting one empty block for none."""
    if not blocks:
        return Document.empty()
    return Document(blocks=tuple(blocks))


def convert(html: str, config: ConversionConfig | None = None) -> Document:
    """Convert an HTML fragment into a document.

    Args:
        html: Raw HTML, possibly malformed.
        config: Conversion settings. Uses defaults if not provided.

    Returns:
        The converted document (always at least one block).

    Example:
        >>> convert("").to_records()[0]["children"][0]["text"]
        ''
    """
    return PortableTextConverter(config).convert(html)
