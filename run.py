#!/usr/bin/env python3
"""Quick-run script for the WordPress to portable text conversion.

This runs both stages on a local export:
1. Convert every post in the export to a post document
2. Link bare URLs in the converted bodies

Usage:
    python run.py posts.json

    # Or with UV:
    uv run python run.py posts.json

    # Convert only (no link detection):
    CONVERT_ONLY=1 python run.py posts.json
"""

import os
from pathlib import Path

# Add src to path for development
import sys

sys.path.insert(0, str(Path(__file__).parent / "src"))

from portable_blocks import (
    ConversionConfig,
    NdjsonDocumentStore,
    PostMapper,
    linkify_body,
    load_wordpress_export,
)


def main():
    """Run the conversion with default settings."""
    convert_only = os.getenv("CONVERT_ONLY", "").lower() in ("1", "true", "yes")
    export_path = Path(sys.argv[1] if len(sys.argv) > 1 else "posts.json")
    config = ConversionConfig.from_env()

    mapper = PostMapper(conversion=config)
    documents = [mapper.to_document(post) for post in load_wordpress_export(export_path)]

    linked = 0
    if not convert_only:
        for document in documents:
            document["body"], modified = linkify_body(document["body"], config)
            linked += modified

    store = NdjsonDocumentStore(Path("output") / "posts.ndjson")
    store.write_all(documents)

    print(f"\n{'=' * 60}")
    print("CONVERSION SUMMARY")
    print(f"{'=' * 60}")
    print(f"Posts: {len(documents)}")
    print(f"Blocks: {sum(len(document['body']) for document in documents):,}")
    if not convert_only:
        print(f"Posts with new links: {linked}")
    print(f"\nOutput saved to: {store.path}")


if __name__ == "__main__":
    main()
