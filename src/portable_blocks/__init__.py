"""Portable Blocks: WordPress HTML to portable text.

Converts legacy WordPress post HTML into an ordered list of typed blocks
(paragraphs, headers, list items) whose text is split into annotated runs,
and detects bare URLs in converted content so they become real links.

Usage:
    from portable_blocks import convert, linkify

    # Convert an HTML fragment
    document = convert("<h2>Intro</h2><p>Read <b>more</b> at example.com</p>")

    # Annotate bare URLs (idempotent)
    document = linkify(document)

    # Serialize for a content store
    body = document.to_portable_text()

    # Or map a whole WordPress export
    from portable_blocks import PostMapper, load_wordpress_export
    mapper = PostMapper()
    documents = [mapper.to_document(post) for post in load_wordpress_export("posts.json")]
"""

# =============================================================================
# CONFIGURATION
# =============================================================================
from .config import ConversionConfig, PostMappingConfig

# =============================================================================
# CONVERSION
# =============================================================================
from .converter import PortableTextConverter, assemble_document, convert

# =============================================================================
# EXCEPTIONS
# =============================================================================
from .exceptions import (
    DocumentNotFoundError,
    DocumentShapeError,
    PortableBlocksError,
    StoreError,
)

# =============================================================================
# MODELS
# =============================================================================
from .models import (
    Block,
    BlockStyle,
    Document,
    ListKind,
    MarkDefinition,
    Run,
    StyleMark,
)

# =============================================================================
# LINK DETECTION
# =============================================================================
from .postprocessing import MarkRegistry, find_urls, is_valid_url, linkify, linkify_body

# =============================================================================
# STORAGE AND WORDPRESS MAPPING
# =============================================================================
from .stores import DocumentStore, NdjsonDocumentStore
from .wordpress import PostMapper, WordPressPost, load_wordpress_export

__version__ = "0.1.0"

__all__ = [
    "Block",
    "BlockStyle",
    "ConversionConfig",
    "Document",
    "DocumentNotFoundError",
    "DocumentShapeError",
    "DocumentStore",
    "ListKind",
    "MarkDefinition",
    "MarkRegistry",
    "NdjsonDocumentStore",
    "PortableBlocksError",
    "PortableTextConverter",
    "PostMapper",
    "PostMappingConfig",
    "Run",
    "StoreError",
    "StyleMark",
    "WordPressPost",
    "__version__",
    "assemble_document",
    "convert",
    "find_urls",
    "is_valid_url",
    "linkify",
    "linkify_body",
    "load_wordpress_export",
]
