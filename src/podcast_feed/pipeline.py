"""
Feed build pipeline.

Wires the collaborators around the pure normalizer:

    fetch feed -> normalize -> (cache artwork) -> write episodes.json

This module is designed to be used in three ways:

1. **Programmatic** -- call ``run_build()`` from Python.
2. **CLI** -- invoked via ``podcast-feed build``.
3. **Scheduled** -- called periodically by an external scheduler (cron,
   systemd timer, GitHub Actions, etc.).

A build either fully succeeds or leaves the previous payload untouched:
fetch and parse errors propagate before anything is written, and the
payload itself is written to a temp file and atomically renamed into place.

Example:
    >>> from podcast_feed.pipeline import run_build
    >>> result = run_build(config)
    >>> print(f"Wrote {result.output_path} ({result.episode_count} episodes)")
"""

import json
import logging
import os
import stat
import tempfile
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

from podcast_feed.config import Config, get_config
from podcast_feed.ingestion.fetcher import fetch_feed
from podcast_feed.ingestion.image_cache import ImageCache
from podcast_feed.ingestion.normalizer import normalize_feed
from podcast_feed.models.entities import FeedPayload

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
#  Data models
# ---------------------------------------------------------------------------

@dataclass
class BuildResult:
    """
    Result of a feed build.

    Attributes:
        payload: The canonical payload that was produced
        output_path: Where the payload was (or would have been) written
        written: False for dry runs
        rss_url: Feed URL, or the local file path for offline builds
        images_cached: Number of episodes whose artwork was cached
    """

    payload: FeedPayload
    output_path: Optional[Path] = None
    written: bool = False
    rss_url: str = ""
    images_cached: int = 0

    @property
    def episode_count(self) -> int:
        return len(self.payload.items)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for JSON serialization."""
        return {
            "rss_url": self.rss_url,
            "output_path": str(self.output_path) if self.output_path else None,
            "written": self.written,
            "generated_at": self.payload.generated_at,
            "channel_title": self.payload.channel.title,
            "episode_count": self.episode_count,
            "images_cached": self.images_cached,
        }

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)


# ---------------------------------------------------------------------------
#  Persistence
# ---------------------------------------------------------------------------

def _target_mode(output_path: Path) -> int:
    """Mode for the payload: keep an existing file's, else 0666 minus umask."""
    if output_path.exists():
        return stat.S_IMODE(output_path.stat().st_mode)
    umask = os.umask(0)
    os.umask(umask)
    return 0o666 & ~umask


def write_payload(payload: FeedPayload, output_path: Path) -> Path:
    """
    Atomically write the payload as UTF-8 JSON.

    The JSON goes to a temporary file next to ``output_path`` and is then
    renamed over it, so readers never observe a half-written file and a
    failure leaves the previous payload in place.

    Args:
        payload: Payload to persist
        output_path: Destination file

    Returns:
        The destination path
    """
    output_path = Path(output_path)
    output_path.parent.mkdir(parents=True, exist_ok=True)

    fd, tmp_name = tempfile.mkstemp(
        dir=output_path.parent,
        prefix=f".{output_path.name}.",
        suffix=".tmp",
    )
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(payload.to_json())
        # mkstemp creates 0600; give the file the mode a plain open() would
        os.chmod(tmp_name, _target_mode(output_path))
        os.replace(tmp_name, output_path)
    except BaseException:
        Path(tmp_name).unlink(missing_ok=True)
        raise

    logger.info("Wrote %s (%d episodes)", output_path, len(payload.items))
    return output_path


def _cache_artwork(payload: FeedPayload, config: Config) -> FeedPayload:
    cache = ImageCache(
        config.images_dir,
        url_prefix=config.images_url_prefix,
        user_agent=config.user_agent,
        timeout=config.request_timeout,
    )
    items = cache.cache_episodes(payload.items)
    return payload.model_copy(update={"items": items})


def _finish(
    payload: FeedPayload,
    config: Config,
    source: str,
    dry_run: bool,
) -> BuildResult:
    if config.cache_images:
        payload = _cache_artwork(payload, config)

    result = BuildResult(
        payload=payload,
        output_path=config.output_path,
        rss_url=source,
        images_cached=sum(1 for ep in payload.items if ep.image_local),
    )
    if dry_run:
        logger.info("Dry run: not writing %s", config.output_path)
        return result

    write_payload(payload, config.output_path)
    result.written = True
    return result


# ---------------------------------------------------------------------------
#  Main build entry points
# ---------------------------------------------------------------------------

def run_build(config: Optional[Config] = None, dry_run: bool = False) -> BuildResult:
    """
    Fetch the configured feed, normalize it and write the payload.

    Args:
        config: Application Config object (optional, uses default if None)
        dry_run: If True, produce the payload but do not write it (artwork
            is still cached when enabled)

    Returns:
        BuildResult describing what was produced

    Raises:
        ValueError: If no RSS URL is configured
        FetchError: If the feed cannot be downloaded
        ParseError: If the feed XML is malformed
    """
    if config is None:
        config = get_config()

    if not config.rss_url:
        raise ValueError(
            "No RSS URL configured. Set PODCAST_FEED_RSS_URL or add rss_url "
            "to the feed section of podcast.yaml."
        )

    raw = fetch_feed(
        config.rss_url,
        user_agent=config.user_agent,
        timeout=config.request_timeout,
    )
    payload = normalize_feed(raw)
    logger.info(
        "Normalized feed '%s': %d episode(s)",
        payload.channel.title,
        len(payload.items),
    )
    return _finish(payload, config, config.rss_url, dry_run)


def run_local_build(
    feed_path: Path,
    config: Optional[Config] = None,
    dry_run: bool = False,
) -> BuildResult:
    """
    Normalize a feed document already on disk.

    Useful for offline rebuilds and for debugging a feed that was saved
    from a publisher.

    Raises:
        OSError: If the file cannot be read
        ParseError: If the feed XML is malformed
    """
    if config is None:
        config = get_config()

    payload = normalize_feed(Path(feed_path).read_bytes())
    return _finish(payload, config, str(feed_path), dry_run)
