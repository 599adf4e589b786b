"""WordPress export mapping.

Models posts from the WordPress REST API (``/wp-json/wp/v2/posts``) and
maps them to post documents whose ``body`` is portable text:
- WordPressPost: one exported post, tolerant of extra fields
- PostMapper: builds the post document (ids, slug, excerpt, references)
- load_wordpress_export: reads a JSON array of posts from disk
"""

from __future__ import annotations

from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from bs4 import BeautifulSoup
from pydantic import BaseModel, ConfigDict, Field, ValidationError
import structlog

from portable_blocks.config import ConversionConfig, PostMappingConfig
from portable_blocks.converter import PortableTextConverter
from portable_blocks.exceptions import DocumentShapeError
from portable_blocks.parsing.entities import TEXT_ENTITY_TABLE, decode_entities
from portable_blocks.stores import read_json_file

logger = structlog.get_logger(__name__)


class RenderedField(BaseModel):
    """A WordPress ``{"rendered": ...}`` field."""

    model_config = ConfigDict(extra="ignore")

    rendered: str = ""


class WordPressPost(BaseModel):
    """A post as returned by the WordPress REST API.

    Only the fields the mapping reads are declared; everything else in the
    export is ignored.
    """

    model_config = ConfigDict(extra="ignore")

    id: int = Field(description="WordPress post id")
    slug: str = Field(default="", description="URL slug")
    date_gmt: datetime | None = Field(default=None, description="Publication date (UTC)")
    title: RenderedField = Field(default_factory=RenderedField)
    content: RenderedField = Field(default_factory=RenderedField)
    excerpt: RenderedField = Field(default_factory=RenderedField)
    categories: list[int] = Field(default_factory=list)
    tags: list[int] = Field(default_factory=list)
    featured_media: int | None = None
    jetpack_featured_media_url: str | None = None


def html_to_plain_text(html: str) -> str:
    """Strip markup and entities from a short HTML snippet.

    Args:
        html: Rendered title or excerpt.

    Returns:
        Plain text with whitespace collapsed to single spaces.

    Example:
        >>> html_to_plain_text("<p>Hello&nbsp;<b>world</b> &hellip;</p>\\n")
        'Hello world ...'
    """
    text = decode_entities(html, TEXT_ENTITY_TABLE)
    if "<" in text or "&" in text:
        # Encoded markup such as "&lt;div&gt;" comes out as text, not tags.
        text = BeautifulSoup(text, "lxml").get_text()
        text = decode_entities(text)
    return " ".join(text.split())


def format_date(value: datetime | None) -> str | None:
    """Format a UTC timestamp as ISO-8601 with millisecond precision and ``Z``."""
    if value is None:
        return None
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc).replace(tzinfo=None)
    return value.isoformat(timespec="milliseconds") + "Z"


class PostMapper:
    """Map WordPress posts to post documents.

    Example:
        >>> mapper = PostMapper()
        >>> post = WordPressPost(id=7, slug="hello", content={"rendered": "<p>Hi</p>"})
        >>> mapper.to_document(post)["_id"]
        'wp-post-7'
    """

    def __init__(
        self,
        config: PostMappingConfig | None = None,
        conversion: ConversionConfig | None = None,
    ) -> None:
        """Initialize the mapper.

        Args:
            config: Id prefixes and author reference.
            conversion: Settings for converting the post content.
        """
        self.config = config or PostMappingConfig()
        self.converter = PortableTextConverter(conversion)

    def to_document(self, post: WordPressPost) -> dict[str, Any]:
        """Build the post document for one WordPress post.

        Args:
            post: The exported post.

        Returns:
            A post document ready to be written to a document store.
        """
        body = self.converter.convert(post.content.rendered)
        document = {
            "_id": f"{self.config.document_prefix}{post.id}",
            "_type": "post",
            "title": html_to_plain_text(post.title.rendered),
            "slug": {"_type": "slug", "current": post.slug},
            "date": format_date(post.date_gmt),
            "excerpt": html_to_plain_text(post.excerpt.rendered),
            "body": body.to_portable_text(),
            "author": [{"_type": "reference", "_ref": self.config.author_ref}],
            "categories": [
                {
                    "_type": "reference",
                    "_key": f"{self.config.category_prefix}{category}",
                    "_ref": f"{self.config.category_prefix}{category}",
                }
                for category in post.categories
            ],
            "tags": list(post.tags),
            "featured_media": post.featured_media,
            "jetpack_featured_media_url": post.jetpack_featured_media_url,
        }
        logger.debug("Mapped post", post_id=post.id, blocks=len(body.blocks))
        return document


def load_wordpress_export(path: Path | str) -> list[WordPressPost]:
    """Load posts from a WordPress REST export.

    Args:
        path: JSON file holding an array of post objects.

    Returns:
        Parsed posts in file order.

    Raises:
        DocumentShapeError: If the payload is not an array.
        StoreError: If the file cannot be read or parsed as JSON.
        pydantic.ValidationError: If a post lacks required fields.
    """
    payload = read_json_file(path)
    if not isinstance(payload, list):
        raise DocumentShapeError("a JSON array of posts", payload)

    posts = []
    for index, item in enumerate(payload):
        try:
            posts.append(WordPressPost.model_validate(item))
        except ValidationError:
            logger.error("Invalid post in export", path=str(path), index=index)
            raise
    logger.info("Loaded WordPress export", path=str(path), posts=len(posts))
    return posts
