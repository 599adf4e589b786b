"""Pytest configuration and shared test fixtures.

This module provides fixtures for testing portable-blocks, including
sample WordPress HTML, exported posts and a temporary document store.
"""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

# =============================================================================
# HTML CONTENT FIXTURES
# =============================================================================


@pytest.fixture
def sample_post_html() -> str:
    """Provide post content the way the WordPress REST API renders it.

    Returns:
        HTML with headers, inline marks, a list, entities and a bare URL.
    """
    return (
        "<h2>Getting started</h2>\n"
        "<p>Welcome to the <strong>new</strong> site &#8211; read the "
        "<em>guide</em> at www.example.com/guide.</p>\n"
        "<ul>\n<li>Install</li>\n<li>Configure</li>\n</ul>\n"
        "<p>Questions? See the FAQ.</p>"
    )


@pytest.fixture
def malformed_html() -> str:
    """Provide HTML with unclosed wrappers and stray text.

    Returns:
        HTML that a strict parser would reject.
    """
    return "Intro text<p>First <b>bold<p>Second paragraph</i> tail"


# =============================================================================
# WORDPRESS EXPORT FIXTURES
# =============================================================================


@pytest.fixture
def sample_wp_post() -> dict[str, Any]:
    """Provide one post as exported from /wp-json/wp/v2/posts.

    Returns:
        A post dict including fields the mapper ignores.
    """
    return {
        "id": 42,
        "slug": "hello-world",
        "date_gmt": "2024-03-05T14:30:00",
        "status": "publish",
        "title": {"rendered": "Tom&#8217;s &amp; Jerry"},
        "content": {
            "rendered": "<p>Visit example.com for <strong>details</strong>.</p>",
            "protected": False,
        },
        "excerpt": {"rendered": "<p>Short&nbsp;summary &hellip;</p>\n"},
        "categories": [3, 7],
        "tags": [11],
        "featured_media": 99,
        "jetpack_featured_media_url": "https://cdn.example.com/image.jpg",
    }


@pytest.fixture
def export_file(tmp_path: Path, sample_wp_post: dict[str, Any]) -> Path:
    """Write a two-post WordPress export to a temporary file.

    Returns:
        Path to the export JSON.
    """
    second = {
        "id": 43,
        "slug": "empty",
        "date_gmt": "2024-03-06T08:00:00",
        "title": {"rendered": "Empty"},
        "content": {"rendered": ""},
        "excerpt": {"rendered": ""},
    }
    path = tmp_path / "posts.json"
    path.write_text(json.dumps([sample_wp_post, second]), encoding="utf-8")
    return path


# =============================================================================
# DOCUMENT STORE FIXTURES
# =============================================================================


@pytest.fixture
def link_body() -> list[dict[str, Any]]:
    """Provide a stored post body with a bare URL and an image entry.

    Returns:
        Wire-format body records.
    """
    return [
        {
            "_type": "block",
            "_key": "a1",
            "style": "normal",
            "customField": "kept",
            "markDefs": [],
            "children": [
                {"_type": "span", "_key": "s1", "text": "Visit example.com today", "marks": []},
                {"_type": "span", "_key": "s2", "text": " or not", "marks": ["strong"]},
            ],
        },
        {"_type": "image", "_key": "img1", "asset": {"_type": "reference", "_ref": "image-1"}},
        {
            "_type": "block",
            "_key": "a2",
            "style": "normal",
            "markDefs": [],
            "children": [{"_type": "span", "_key": "s3", "text": "No links here.", "marks": []}],
        },
    ]


@pytest.fixture
def store_file(tmp_path: Path, link_body: list[dict[str, Any]]) -> Path:
    """Write an NDJSON store holding two posts and one author.

    Returns:
        Path to the store file.
    """
    documents = [
        {"_id": "wp-post-1", "_type": "post", "title": "With link", "body": link_body},
        {"_id": "author-admin", "_type": "author", "name": "Admin"},
        {
            "_id": "wp-post-2",
            "_type": "post",
            "title": "Plain",
            "body": [link_body[2]],
        },
    ]
    path = tmp_path / "store.ndjson"
    path.write_text(
        "".join(json.dumps(document) + "\n" for document in documents),
        encoding="utf-8",
    )
    return path
