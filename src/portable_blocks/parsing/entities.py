"""HTML entity normalization applied before structural parsing.

WordPress content mixes numeric and named entities. A fixed, ordered
table decodes the ones it emits; anything else passes through untouched.
"""

import re

from portable_blocks.exceptions import DocumentShapeError

# Order matters: &amp; must stay last so "&amp;lt;" decodes to "&lt;",
# never to "<".
ENTITY_TABLE: tuple[tuple[str, str], ...] = (
    ("&#8211;", "–"),  # en dash
    ("&#8212;", "—"),  # em dash
    ("&#8220;", "“"),  # left double quote
    ("&#8221;", "”"),  # right double quote
    ("&#8216;", "‘"),  # left single quote
    ("&#8217;", "’"),  # right single quote
    ("&#8230;", "…"),  # horizontal ellipsis
    ("&#8203;", ""),  # zero-width space
    ("&#039;", "'"),
    ("&nbsp;", " "),
    ("&hellip;", "..."),
    ("&quot;", '"'),
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&amp;", "&"),
)

# Entries that cannot turn text into markup or end an attribute value.
TEXT_ENTITY_TABLE: tuple[tuple[str, str], ...] = tuple(
    (entity, replacement)
    for entity, replacement in ENTITY_TABLE
    if replacement not in {"<", ">", "&", '"', "'"}
)

PARAGRAPH_BOUNDARY = "</p><p>"

_DOUBLE_BREAK = re.compile(r"<br\s*/?>\s*<br\s*/?>", re.IGNORECASE)


def decode_entities(
    text: str,
    table: tuple[tuple[str, str], ...] = ENTITY_TABLE,
) -> str:
    """Apply an entity table to ``text`` without touching markup.

    Each entry is replaced in a single pass, in table order.

    Example:
        >>> decode_entities("Fish &amp; Chips &#8211; today")
        'Fish & Chips – today'
    """
    for entity, replacement in table:
        text = text.replace(entity, replacement)
    return text


def normalize(raw: str) -> str:
    """Decode entities, unify newlines and turn ``<br><br>`` into a paragraph break.

    Args:
        raw: Raw HTML as delivered by the content system.

    Returns:
        Cleaned HTML ready for block segmentation.

    Raises:
        DocumentShapeError: If ``raw`` is not a string.

    Example:
        >>> normalize("A &amp;amp; B")
        'A &amp; B'
    """
    if not isinstance(raw, str):
        raise DocumentShapeError("an HTML string", raw)

    text = decode_entities(raw)
    text = text.replace("\r\n", "\n").replace("\r", "\n")
    return _DOUBLE_BREAK.sub(PARAGRAPH_BOUNDARY, text)
