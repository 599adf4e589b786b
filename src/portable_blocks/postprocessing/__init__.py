"""Post-processing for converted documents.

This package provides:
- Block-scoped link mark registry
- Bare URL detection with conservative false-positive screening
- Idempotent link annotation for documents and stored post bodies
"""

from portable_blocks.postprocessing.links import (
    URL_PATTERN,
    TextPart,
    find_url_spans,
    find_urls,
    is_valid_url,
    linkify,
    linkify_block,
    linkify_body,
    linkify_run,
    normalize_url,
    split_text_with_urls,
)
from portable_blocks.postprocessing.marks import MarkRegistry

__all__ = [
    "URL_PATTERN",
    "MarkRegistry",
    "TextPart",
    "find_url_spans",
    "find_urls",
    "is_valid_url",
    "linkify",
    "linkify_block",
    "linkify_body",
    "linkify_run",
    "normalize_url",
    "split_text_with_urls",
]
