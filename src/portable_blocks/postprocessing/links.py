"""Bare URL detection and link annotation for converted documents.

Scans run text for URL-shaped substrings (``https://example.com``,
``www.example.com``, ``example.com/path``), splits the run at every match,
and annotates the URL pieces with block-scoped link marks. Runs that
already reference a mark are never touched, which makes the pass
idempotent.

Candidates are screened conservatively: a missed link is preferred over a
broken one, so abbreviations, decimals and ellipses never become links.
"""

from __future__ import annotations

from collections.abc import Mapping, Sequence
import re
from typing import TYPE_CHECKING, Any, NamedTuple

import structlog

from portable_blocks.config import DEFAULT_URL_SCHEME, LINK_KEY_PREFIX
from portable_blocks.exceptions import DocumentShapeError
from portable_blocks.models.document import (
    Block,
    Document,
    Run,
    is_block_record,
    is_span_record,
    span_records,
)
from portable_blocks.postprocessing.marks import MarkRegistry

if TYPE_CHECKING:
    from portable_blocks.config import ConversionConfig

logger = structlog.get_logger(__name__)

URL_PATTERN = re.compile(
    r"(?:https?://)?(?:www\.)?[-a-zA-Z0-9@:%._+~#=]{1,256}\.[a-zA-Z0-9()]{1,6}\b"
    r"(?:[-a-zA-Z0-9()@:%_+.~#?&/=]*)",
    re.IGNORECASE,
)

TRAILING_PUNCTUATION = re.compile(r"[.,;:!?]+$")
_SCHEME = re.compile(r"^https?://", re.IGNORECASE)
_TOP_LEVEL_LABEL = re.compile(r"\.[a-z]{2,}($|/)", re.IGNORECASE)
_LETTERS_BEFORE_DOT = re.compile(r"[a-z]{2,}\.", re.IGNORECASE)

FALSE_POSITIVE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"^etc\.", re.IGNORECASE),
    re.compile(r"^e\.g\.", re.IGNORECASE),
    re.compile(r"^i\.e\.", re.IGNORECASE),
    re.compile(r"^vs\.", re.IGNORECASE),
    re.compile(r"^\d+\.\d+"),  # decimal numbers
    re.compile(r"\.{2,}"),  # ellipsis
    re.compile(r"^\."),
    re.compile(r"\.$"),
)


class TextPart(NamedTuple):
    """A piece of run text, flagged when it is a URL."""

    content: str
    is_url: bool


def is_valid_url(text: str) -> bool:
    """Check whether a URL candidate should become a link.

    Args:
        text: Candidate substring matched by ``URL_PATTERN``.

    Returns:
        True if the candidate passes every screening rule.

    Example:
        >>> is_valid_url("example.com")
        True
        >>> is_valid_url("e.g.")
        False
        >>> is_valid_url("3.14")
        False
    """
    if not _TOP_LEVEL_LABEL.search(text):
        return False
    if not _LETTERS_BEFORE_DOT.search(text):
        return False
    return not any(pattern.search(text) for pattern in FALSE_POSITIVE_PATTERNS)


def find_url_spans(text: str) -> list[tuple[int, int]]:
    """Return ``(start, end)`` spans of valid URLs in ``text``, left to right.

    Trailing sentence punctuation is excluded from each span before the
    candidate is screened, so "Visit example.com." links "example.com".
    """
    spans = []
    for match in URL_PATTERN.finditer(text):
        candidate = TRAILING_PUNCTUATION.sub("", match.group())
        if not candidate:
            continue
        if is_valid_url(candidate):
            spans.append((match.start(), match.start() + len(candidate)))
        else:
            logger.debug("Rejected URL candidate", candidate=candidate)
    return spans


def find_urls(text: str) -> list[str]:
    """Return distinct valid URLs in order of first occurrence.

    Example:
        >>> find_urls("see example.com or www.example.org, then example.com")
        ['example.com', 'www.example.org']
    """
    urls: dict[str, None] = {}
    for start, end in find_url_spans(text):
        urls.setdefault(text[start:end], None)
    return list(urls)


def normalize_url(url: str, default_scheme: str = DEFAULT_URL_SCHEME) -> str:
    """Strip trailing punctuation and add a scheme when none is present.

    Example:
        >>> normalize_url("www.example.com/page.")
        'https://www.example.com/page'
    """
    normalized = TRAILING_PUNCTUATION.sub("", url.strip())
    if not _SCHEME.match(normalized):
        normalized = f"{default_scheme}{normalized}"
    return normalized


def split_text_with_urls(text: str) -> list[TextPart]:
    """Split ``text`` into interleaved plain and URL parts.

    Joining the parts' content gives back ``text`` exactly. Plain parts are
    re-scanned on their own, so no plain part ever contains a URL that a
    later scan would find.

    Example:
        >>> [part.content for part in split_text_with_urls("Go to example.com now")]
        ['Go to ', 'example.com', ' now']
    """
    spans = find_url_spans(text)
    if not spans:
        return [TextPart(text, is_url=False)]

    parts: list[TextPart] = []
    cursor = 0
    for start, end in spans:
        if start > cursor:
            parts.extend(split_text_with_urls(text[cursor:start]))
        parts.append(TextPart(text[start:end], is_url=True))
        cursor = end
    if cursor < len(text):
        parts.extend(split_text_with_urls(text[cursor:]))
    return parts


def linkify_run(
    run: Run,
    registry: MarkRegistry,
    default_scheme: str = DEFAULT_URL_SCHEME,
) -> list[Run]:
    """Split one run at its URLs, registering link targets in ``registry``.

    Args:
        run: The run to rewrite.
        registry: Mark registry of the run's block.
        default_scheme: Scheme for URLs written without one.

    Returns:
        ``[run]`` unchanged when it already carries a link or holds no URL,
        otherwise the sub-runs, each keeping the run's style marks.
    """
    if run.link is not None or not run.text:
        return [run]

    parts = split_text_with_urls(run.text)
    if len(parts) == 1 and not parts[0].is_url:
        return [run]

    sub_runs = []
    for index, part in enumerate(parts):
        link = None
        if part.is_url:
            link = registry.resolve(normalize_url(part.content, default_scheme))
        sub_runs.append(
            Run(id=f"{run.id}-{index}", text=part.content, marks=run.marks, link=link)
        )
    return sub_runs


def linkify_block(block: Block, default_scheme: str = DEFAULT_URL_SCHEME) -> Block:
    """Annotate bare URLs in one block.

    Returns:
        ``block`` itself when nothing changed, otherwise a new block with
        the rewritten runs and the extended mark registry.
    """
    registry = MarkRegistry(block.mark_defs)
    runs: list[Run] = []
    changed = False
    for run in block.runs:
        rewritten = linkify_run(run, registry, default_scheme)
        changed = changed or rewritten != [run]
        runs.extend(rewritten)

    if not changed:
        return block

    logger.debug("Linked URLs in block", block=block.id, added=len(registry.added))
    return block.model_copy(update={"runs": tuple(runs), "mark_defs": registry.definitions})


def linkify(document: Document, config: ConversionConfig | None = None) -> Document:
    """Turn bare URLs in a document's runs into link-annotated runs.

    Pure transform: blocks without URLs are reused as-is, and the input
    document is returned when no block changed. Running it twice gives the
    same result as running it once.

    Args:
        document: A converted or fetched document.
        config: Supplies the default URL scheme. Uses defaults if not provided.

    Returns:
        The linkified document.
    """
    scheme = config.default_scheme if config is not None else DEFAULT_URL_SCHEME
    blocks = tuple(linkify_block(block, scheme) for block in document.blocks)
    if all(new is old for new, old in zip(blocks, document.blocks, strict=True)):
        return document
    return document.model_copy(update={"blocks": blocks})


def linkify_body(
    body: Sequence[Any],
    config: ConversionConfig | None = None,
) -> tuple[list[Any], bool]:
    """Linkify a content store body given as wire-format records.

    Non-block entries (images, embeds) and unchanged blocks are returned as
    the original objects. Changed blocks keep every field of their record;
    only ``children`` and ``markDefs`` are rewritten. Untouched spans and
    inline objects keep their original records and positions.

    A span marked with a ``link-`` key that has no definition in its block
    counts as already linked and is left alone.

    Args:
        body: The ``body`` array of a stored post.
        config: Supplies the default URL scheme.

    Returns:
        Tuple of (new body, whether anything changed).

    Raises:
        DocumentShapeError: If ``body`` is not a list of mappings.
    """
    if isinstance(body, (str, bytes)) or not isinstance(body, Sequence):
        raise DocumentShapeError("a list of block records", body)

    scheme = config.default_scheme if config is not None else DEFAULT_URL_SCHEME
    new_body: list[Any] = []
    modified = False

    for position, record in enumerate(body):
        if not is_block_record(record):
            new_body.append(record)
            continue

        block = Block.from_portable_text(record, position)
        spans = span_records(record.get("children") or ())
        def_keys = {definition.key for definition in block.mark_defs}
        dangling = {key for span in spans for key in _dangling_links(span, def_keys)}
        registry = MarkRegistry(block.mark_defs, reserved=dangling)

        rewritten: list[tuple[Run, list[Run]]] = []
        for run, span in zip(block.runs, spans):
            if _dangling_links(span, def_keys):
                logger.debug("Skipping span with undefined link mark", span=run.id)
                rewritten.append((run, [run]))
            else:
                rewritten.append((run, linkify_run(run, registry, scheme)))

        if all(parts == [run] for run, parts in rewritten):
            new_body.append(record)
            continue

        logger.debug("Linked URLs in block", block=block.id, added=len(registry.added))
        new_body.append(_merge_block_record(record, rewritten, registry))
        modified = True

    return new_body, modified


def _dangling_links(span: Mapping[str, Any], def_keys: set[str]) -> list[str]:
    prefix = f"{LINK_KEY_PREFIX}-"
    return [
        mark
        for mark in span.get("marks") or ()
        if isinstance(mark, str) and mark.startswith(prefix) and mark not in def_keys
    ]


def _merge_block_record(
    record: Mapping[str, Any],
    rewritten: list[tuple[Run, list[Run]]],
    registry: MarkRegistry,
) -> dict[str, Any]:
    pending = iter(rewritten)
    children: list[Any] = []
    for child in record.get("children") or ():
        if not is_span_record(child):
            children.append(child)
            continue
        run, parts = next(pending)
        if parts == [run]:
            children.append(child)
        else:
            children.extend(part.to_portable_text() for part in parts)

    merged = dict(record)
    merged["markDefs"] = [
        *(record.get("markDefs") or ()),
        *(definition.to_portable_text() for definition in registry.added),
    ]
    merged["children"] = children
    return merged
