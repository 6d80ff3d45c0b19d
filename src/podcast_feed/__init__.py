"""
podcast-feed

Turns a podcast RSS feed into a normalized, render-ready episode list
(``episodes.json``) for a static web page.
"""

__version__ = "0.1.0"

from podcast_feed.config import Config
from podcast_feed.exceptions import FetchError, ParseError, PodcastFeedError

__all__ = ["Config", "FetchError", "ParseError", "PodcastFeedError", "__version__"]
