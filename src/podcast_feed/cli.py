"""
Command-line interface for podcast-feed.

Usage:
    podcast-feed build                       # Fetch RSS and write episodes.json
    podcast-feed build --rss-url URL         # Override the configured feed
    podcast-feed build --cache-images        # Also cache episode artwork locally
    podcast-feed build --dry-run             # Print the payload, write nothing
    podcast-feed build --output-json         # JSON build summary for CI
    podcast-feed normalize feed.xml          # Normalize a saved feed to stdout
    podcast-feed normalize feed.xml -o out.json
"""

import argparse
import logging
import sys

from pydantic import ValidationError

from podcast_feed.config import get_config
from podcast_feed.exceptions import PodcastFeedError


def _configure_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s %(name)s: %(message)s",
    )


def _load_config(**overrides):
    try:
        return get_config(**overrides)
    except ValidationError as exc:
        print(f"ERROR: Invalid configuration: {exc}")
        sys.exit(1)


def cmd_build(args):
    """Fetch the RSS feed, normalize it and write the payload."""
    from podcast_feed.pipeline import run_build

    config = _load_config(
        rss_url=args.rss_url,
        output_path=args.output,
        images_dir=args.images_dir,
        cache_images=True if args.cache_images else None,
    )
    if not config.rss_url:
        print("ERROR: No RSS URL configured.")
        print("Set PODCAST_FEED_RSS_URL, pass --rss-url, or add rss_url to podcast.yaml")
        sys.exit(1)

    try:
        result = run_build(config=config, dry_run=args.dry_run)
    except PodcastFeedError as exc:
        print(f"ERROR: {exc}")
        print("Previous output left untouched.")
        sys.exit(1)

    # JSON output mode (for CI/automation)
    if args.output_json:
        print(result.to_json())
        return

    if args.dry_run:
        print(result.payload.to_json())
        print(f"\n[dry-run] {result.episode_count} episodes, nothing written.")
        return

    print(f"Wrote {result.output_path} ({result.episode_count} episodes)")
    if config.cache_images:
        print(f"Cached artwork for {result.images_cached} episode(s) in {config.images_dir}")


def cmd_normalize(args):
    """Normalize a feed file that is already on disk."""
    from podcast_feed.pipeline import run_local_build

    config = _load_config(output_path=args.output)

    try:
        result = run_local_build(args.feed, config=config, dry_run=args.output is None)
    except (PodcastFeedError, OSError) as exc:
        print(f"ERROR: {exc}")
        sys.exit(1)

    if result.written:
        print(f"Wrote {result.output_path} ({result.episode_count} episodes)")
    else:
        print(result.payload.to_json())


def main(argv=None):
    parser = argparse.ArgumentParser(
        prog="podcast-feed",
        description="Normalize a podcast RSS feed into a render-ready episode list",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        default=False,
        help="Enable debug logging",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # build
    sub_build = subparsers.add_parser("build", help="Fetch RSS and write episodes.json")
    sub_build.add_argument("--rss-url", default=None, help="Feed URL (overrides config)")
    sub_build.add_argument(
        "-o", "--output",
        default=None,
        help="Output path for the payload (default: episodes.json)",
    )
    sub_build.add_argument(
        "--cache-images",
        action="store_true",
        default=False,
        help="Download episode artwork and record imageLocal paths",
    )
    sub_build.add_argument(
        "--images-dir",
        default=None,
        help="Directory for cached artwork (default: images)",
    )
    sub_build.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Print the payload instead of writing it",
    )
    sub_build.add_argument(
        "--output-json",
        action="store_true",
        default=False,
        help="Output build summary as JSON (for CI/automation)",
    )
    sub_build.set_defaults(func=cmd_build)

    # normalize
    sub_normalize = subparsers.add_parser(
        "normalize",
        help="Normalize a local feed XML file",
    )
    sub_normalize.add_argument("feed", help="Path to the feed XML file")
    sub_normalize.add_argument(
        "-o", "--output",
        default=None,
        help="Write the payload here instead of printing it",
    )
    sub_normalize.set_defaults(func=cmd_normalize)

    args = parser.parse_args(argv)
    if args.command is None:
        parser.print_help()
        sys.exit(0)

    _configure_logging(args.verbose)
    args.func(args)


if __name__ == "__main__":
    main()
