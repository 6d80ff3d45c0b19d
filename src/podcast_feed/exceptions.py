"""
Error taxonomy for feed builds.

Only two conditions are raised: the feed (or an image) could not be fetched,
or the feed XML could not be parsed. Missing fields are never errors -- they
become empty-string defaults in the canonical payload.
"""

from typing import Optional


class PodcastFeedError(Exception):
    """Base class for all podcast-feed errors."""


class FetchError(PodcastFeedError):
    """
    A remote resource was unreachable or answered with a non-2xx status.

    Attributes:
        url: URL that was requested
        reason: Human-readable failure description
        status_code: HTTP status code, if a response was received
    """

    def __init__(self, url: str, reason: str, status_code: Optional[int] = None) -> None:
        self.url = url
        self.reason = reason
        self.status_code = status_code
        if status_code is not None:
            message = f"Failed to fetch {url}: HTTP {status_code} {reason}".rstrip()
        else:
            message = f"Failed to fetch {url}: {reason}"
        super().__init__(message)


class ParseError(PodcastFeedError):
    """The feed document is not well-formed (or is forbidden) XML."""
