"""
HTTP fetching of feed documents.

One blocking GET per build. Any failure -- DNS, connection, timeout or a
non-2xx response -- is raised as ``FetchError`` so the caller can abort the
run without touching the previously written payload.
"""

import logging
from typing import Optional

import requests

from podcast_feed.exceptions import FetchError

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = "PodcastSiteFetcher/1.0"
REQUEST_TIMEOUT = 30  # seconds


def fetch_feed(
    url: str,
    user_agent: str = DEFAULT_USER_AGENT,
    timeout: float = REQUEST_TIMEOUT,
    session: Optional[requests.Session] = None,
) -> bytes:
    """
    Download a feed document.

    Returns the raw bytes rather than decoded text so the XML parser can
    honour the document's own encoding declaration.

    Args:
        url: Feed URL
        user_agent: User-Agent header to send
        timeout: Request timeout in seconds
        session: Optional requests session (for connection reuse or tests)

    Returns:
        Response body

    Raises:
        FetchError: If the feed is unreachable or returns a non-2xx status
    """
    http = session or requests
    headers = {"User-Agent": user_agent}

    logger.info("Fetching RSS feed from: %s", url)
    try:
        response = http.get(url, headers=headers, timeout=timeout)
    except requests.exceptions.Timeout as exc:
        raise FetchError(url, f"timed out after {timeout}s") from exc
    except requests.exceptions.RequestException as exc:
        raise FetchError(url, str(exc)) from exc

    # 3xx that requests did not follow (e.g. 304) is not a feed body
    if not 200 <= response.status_code < 300:
        raise FetchError(url, response.reason or "", status_code=response.status_code)

    logger.debug("Fetched %d bytes from %s", len(response.content), url)
    return response.content
