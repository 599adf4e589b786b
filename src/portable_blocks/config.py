"""Configuration for HTML conversion, link detection and post mapping.

Module constants cover the fixed parts of the block model; the frozen
dataclasses carry the settings a caller may reasonably change.
"""

from dataclasses import dataclass
import os

DEFAULT_URL_SCHEME = "https://"
DEFAULT_LIST_LEVEL = 1

# Identifier prefixes (deterministic, counter-based)
BLOCK_KEY_PREFIX = "block"
SPAN_KEY_PREFIX = "span"
LINK_KEY_PREFIX = "link"

# Document store retry configuration
STORE_MAX_RETRIES = 3
STORE_RETRY_MIN_SECONDS = 0.5
STORE_RETRY_MAX_SECONDS = 8.0

_TRUTHY = frozenset({"1", "true", "yes", "on"})


@dataclass(frozen=True)
class ConversionConfig:
    """Configuration for the HTML to portable-blocks converter.

    Attributes:
        anchor_links: Turn ``<a href>`` into link marks. When False, anchors
            contribute their text only.
        default_scheme: Scheme prefixed to detected URLs that have none.
        list_level: Nesting level recorded on list item blocks.
    """

    anchor_links: bool = True
    default_scheme: str = DEFAULT_URL_SCHEME
    list_level: int = DEFAULT_LIST_LEVEL

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if not self.default_scheme.endswith("://"):
            msg = "default_scheme must end with '://'"
            raise ValueError(msg)
        if self.list_level < 1:
            msg = "list_level must be at least 1"
            raise ValueError(msg)

    @classmethod
    def from_env(cls) -> "ConversionConfig":
        """Create configuration from environment variables.

        Reads (after loading a ``.env`` file if present):
        - PORTABLE_BLOCKS_ANCHOR_LINKS
        - PORTABLE_BLOCKS_DEFAULT_SCHEME

        Returns:
            Configuration populated from environment.
        """
        from dotenv import load_dotenv

        load_dotenv()

        anchor_links = os.getenv("PORTABLE_BLOCKS_ANCHOR_LINKS", "true")
        default_scheme = os.getenv("PORTABLE_BLOCKS_DEFAULT_SCHEME", DEFAULT_URL_SCHEME)

        return cls(
            anchor_links=anchor_links.strip().lower() in _TRUTHY,
            default_scheme=default_scheme,
        )


@dataclass(frozen=True)
class PostMappingConfig:
    """Configuration for mapping WordPress posts to post documents.

    Attributes:
        document_prefix: Prefix for generated post ``_id`` values.
        category_prefix: Prefix for category reference ids.
        author_ref: Document id of the author every post references.
    """

    document_prefix: str = "wp-post-"
    category_prefix: str = "category-"
    author_ref: str = "author-admin"

    @classmethod
    def from_env(cls) -> "PostMappingConfig":
        """Create configuration from environment variables.

        Reads PORTABLE_BLOCKS_AUTHOR_REF (after loading ``.env``).

        Returns:
            Configuration populated from environment.
        """
        from dotenv import load_dotenv

        load_dotenv()

        return cls(author_ref=os.getenv("PORTABLE_BLOCKS_AUTHOR_REF", "author-admin"))
