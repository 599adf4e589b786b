"""Command-line interface for portable-blocks.

This CLI provides two commands:

1. `portable-blocks convert`: Convert a WordPress export to post documents
   - Read the JSON array exported from the WordPress REST API
   - Convert each post's HTML content to portable text
   - Write the documents as NDJSON

2. `portable-blocks linkify`: Turn bare URLs in stored posts into links
   - Read every post from an NDJSON document store
   - Annotate URL text in each body with link marks
   - Patch the posts that changed (or only report with --dry-run)
"""

import argparse
import dataclasses
import logging
from pathlib import Path

from dotenv import load_dotenv
from rich.console import Console
import structlog

from .config import ConversionConfig, PostMappingConfig
from .exceptions import PortableBlocksError
from .postprocessing.links import linkify_body
from .stores import NdjsonDocumentStore
from .wordpress import PostMapper, load_wordpress_export

console = Console()
logger = structlog.get_logger(__name__)


def _create_convert_parser(subparsers: argparse._SubParsersAction) -> None:
    """Create the convert subcommand parser.

    Args:
        subparsers: Subparsers action to add the command to.
    """
    convert_parser = subparsers.add_parser(
        "convert",
        help="Convert a WordPress export to portable-text post documents",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Convert a WordPress REST export (a JSON array of posts) to post documents:

  1. Decode entities and split the HTML content into blocks
  2. Tokenize inline markup into annotated spans
  3. Map title, slug, date, excerpt and references
  4. Write one JSON document per line
        """,
    )

    convert_parser.add_argument(
        "input",
        type=Path,
        help="WordPress export file (JSON array of posts)",
    )

    convert_parser.add_argument(
        "-o",
        "--output",
        type=Path,
        default=Path("output/posts.ndjson"),
        help="NDJSON file to write (default: ./output/posts.ndjson)",
    )

    convert_parser.add_argument(
        "--no-anchor-links",
        action="store_true",
        help="Keep only the text of <a> tags instead of creating link marks",
    )


def _create_linkify_parser(subparsers: argparse._SubParsersAction) -> None:
    """Create the linkify subcommand parser.

    Args:
        subparsers: Subparsers action to add the command to.
    """
    linkify_parser = subparsers.add_parser(
        "linkify",
        help="Turn bare URLs in stored post bodies into links",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        description="""
Detect URL text (https://..., www..., example.com/...) in every post body and
annotate it with link marks. Spans that already carry a link are left alone,
so running the command twice changes nothing the second time.

Examples:
  # Preview which posts would change
  portable-blocks linkify output/posts.ndjson --dry-run

  # Patch the store
  portable-blocks linkify output/posts.ndjson
        """,
    )

    linkify_parser.add_argument(
        "store",
        type=Path,
        help="NDJSON document store",
    )

    linkify_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Report which posts would change without patching them",
    )


def _run_convert_command(args: argparse.Namespace) -> None:
    """Run the convert subcommand.

    Args:
        args: Parsed command-line arguments.
    """
    conversion = ConversionConfig.from_env()
    if args.no_anchor_links:
        conversion = dataclasses.replace(conversion, anchor_links=False)

    console.print("[bold cyan]WordPress → Portable Text[/]")
    console.print(f"Input: {args.input}")
    console.print(f"Output: {args.output}")
    console.print()

    posts = load_wordpress_export(args.input)
    mapper = PostMapper(PostMappingConfig.from_env(), conversion)

    documents = []
    errors = 0
    for post in posts:
        try:
            documents.append(mapper.to_document(post))
        except (PortableBlocksError, ValueError) as e:
            errors += 1
            logger.warning("Failed to convert post", post_id=post.id, error=str(e))
            console.print(f"[red]  Post {post.id}: {e}[/]")

    written = NdjsonDocumentStore(args.output).write_all(documents)

    console.print()
    console.print(f"[green]Saved {written} documents to: {args.output}[/]")
    if errors:
        console.print(f"[yellow]{errors} posts failed to convert[/]")


def _run_linkify_command(args: argparse.Namespace) -> None:
    """Run the linkify subcommand.

    Args:
        args: Parsed command-line arguments.
    """
    conversion = ConversionConfig.from_env()
    store = NdjsonDocumentStore(args.store)

    console.print("[bold cyan]Link detection[/]")
    console.print(f"Store: {args.store}")
    if args.dry_run:
        console.print("[yellow]Dry run mode - no posts will be patched[/]")
    console.print()

    posts = [post for post in store.fetch_all("post") if post.get("body")]

    modified_titles = []
    errors = 0
    for post in posts:
        title = post.get("title") or post.get("_id")
        try:
            body, modified = linkify_body(post["body"], conversion)
            if not modified:
                continue
            if not args.dry_run:
                store.patch(post["_id"], {"body": body})
            modified_titles.append(title)
        except (PortableBlocksError, ValueError) as e:
            errors += 1
            logger.warning("Failed to linkify post", doc_id=post.get("_id"), error=str(e))
            console.print(f"[red]  {title}: {e}[/]")

    console.print("Summary:")
    console.print(f"  - Posts checked: {len(posts)}")
    console.print(f"  - Posts modified: {len(modified_titles)}")
    console.print(f"  - Errors: {errors}")
    for title in modified_titles:
        console.print(f"    • {title}")


def _configure_logging(verbose: bool) -> None:
    """Filter library log events to warnings, or show everything when verbose.

    Args:
        verbose: Whether to include debug events.
    """
    level = logging.DEBUG if verbose else logging.WARNING
    structlog.configure(wrapper_class=structlog.make_filtering_bound_logger(level))
    logging.basicConfig(level=level, format="%(levelname)s: %(message)s")


def main() -> None:
    """Run the portable-blocks CLI.

    Provides subcommands for conversion and link detection.
    """
    load_dotenv()

    parser = argparse.ArgumentParser(
        prog="portable-blocks",
        description="Convert WordPress HTML to portable text blocks",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Commands:
  convert    Convert a WordPress export to NDJSON post documents
  linkify    Turn bare URLs in stored posts into links

Examples:
  portable-blocks convert posts.json -o output/posts.ndjson
  portable-blocks linkify output/posts.ndjson --dry-run

Optional environment variables:
  PORTABLE_BLOCKS_ANCHOR_LINKS    - Create link marks from <a href> (default: true)
  PORTABLE_BLOCKS_DEFAULT_SCHEME  - Scheme for URLs without one (default: https://)
  PORTABLE_BLOCKS_AUTHOR_REF      - Author document id (default: author-admin)
        """,
    )

    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Show debug log events (dropped blocks, rejected URL candidates)",
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    _create_convert_parser(subparsers)
    _create_linkify_parser(subparsers)

    args = parser.parse_args()
    _configure_logging(args.verbose)

    if args.command is None:
        parser.print_help()
        raise SystemExit(1)

    try:
        if args.command == "convert":
            _run_convert_command(args)
        elif args.command == "linkify":
            _run_linkify_command(args)
    except KeyboardInterrupt:
        console.print("\n[yellow]Interrupted by user[/]")
        raise SystemExit(1) from None
    except Exception as e:
        console.print(f"\n[red]Error: {e}[/]")
        raise SystemExit(1) from None


if __name__ == "__main__":
    main()
