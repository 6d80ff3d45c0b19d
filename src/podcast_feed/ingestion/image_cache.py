"""
On-disk caching of episode artwork.

Optional collaborator of the build: after normalization, each episode's
resolved ``image`` URL is downloaded into a local directory so the static
page can serve artwork even when the publisher's CDN misbehaves.

Cache files are named from a hash of the URL (``ep-<sha1[:12]><ext>``), so
the URL is the cache key. Every download overwrites the previous copy --
artwork can change under a stable URL -- and a failed download never aborts
the batch: the episode simply keeps its remote URL.
"""

import hashlib
import logging
from pathlib import Path
from typing import Dict, List, Optional

import requests

from podcast_feed.exceptions import FetchError
from podcast_feed.ingestion.fetcher import DEFAULT_USER_AGENT, REQUEST_TIMEOUT
from podcast_feed.ingestion.urls import extension_from_content_type, extension_from_url
from podcast_feed.models.entities import Episode

logger = logging.getLogger(__name__)

FILENAME_PREFIX = "ep-"
HASH_LENGTH = 12


def cache_key(url: str) -> str:
    """Short stable hash of an image URL."""
    return hashlib.sha1(url.encode("utf-8")).hexdigest()[:HASH_LENGTH]


class ImageCache:
    """
    Downloads artwork into ``images_dir`` and maps URLs to local paths.

    Attributes:
        images_dir: Directory the files are written to
        url_prefix: Prefix for the relative path recorded in the payload
        user_agent: User-Agent header for image requests
        timeout: Per-request timeout in seconds

    Example:
        >>> cache = ImageCache(Path("site/images"))
        >>> local = cache.cache_image("https://cdn.example.com/art.png")
        >>> local.startswith("images/ep-") and local.endswith(".png")
        True
    """

    def __init__(
        self,
        images_dir: Path,
        url_prefix: str = "images",
        user_agent: str = DEFAULT_USER_AGENT,
        timeout: float = REQUEST_TIMEOUT,
        session: Optional[requests.Session] = None,
    ) -> None:
        self.images_dir = Path(images_dir)
        self.url_prefix = url_prefix.rstrip("/")
        self.user_agent = user_agent
        self.timeout = timeout
        self.session = session or requests.Session()
        self._cached: Dict[str, str] = {}

    def cache_image(self, url: str) -> str:
        """
        Download one image and return its payload-relative path.

        Args:
            url: Resolved (normalized) artwork URL

        Returns:
            Relative path such as ``images/ep-<hash>.jpg``, or ``""`` if the
            URL is empty or the download failed
        """
        if not url:
            return ""
        if url in self._cached:
            return self._cached[url]

        try:
            local_path = self._download(url)
        except (FetchError, OSError) as exc:
            logger.warning("Could not cache image %s: %s", url, exc)
            local_path = ""

        self._cached[url] = local_path
        return local_path

    def cache_episodes(self, episodes: List[Episode]) -> List[Episode]:
        """
        Cache artwork for every episode.

        Returns new Episode objects with ``image_local`` set; ``image``
        keeps the remote URL either way.
        """
        cached = []
        for episode in episodes:
            local_path = self.cache_image(episode.image)
            cached.append(episode.model_copy(update={"image_local": local_path}))

        stored = sum(1 for episode in cached if episode.image_local)
        logger.info("Cached artwork for %d of %d episode(s)", stored, len(cached))
        return cached

    def _download(self, url: str) -> str:
        try:
            response = self.session.get(
                url,
                headers={"User-Agent": self.user_agent},
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as exc:
            raise FetchError(url, str(exc)) from exc

        if not 200 <= response.status_code < 300:
            raise FetchError(url, response.reason or "", status_code=response.status_code)

        ext = extension_from_url(url) or extension_from_content_type(
            response.headers.get("Content-Type", "")
        )
        filename = f"{FILENAME_PREFIX}{cache_key(url)}{ext}"

        self.images_dir.mkdir(parents=True, exist_ok=True)
        (self.images_dir / filename).write_bytes(response.content)
        logger.debug("Cached %s -> %s", url, filename)

        return f"{self.url_prefix}/{filename}" if self.url_prefix else filename
