"""
Ingestion module: feed fetching, XML parsing and normalization.

Provides the pure feed normalizer plus the two network collaborators
around it (feed fetcher and optional artwork cache).
"""

from podcast_feed.ingestion.fetcher import fetch_feed
from podcast_feed.ingestion.image_cache import ImageCache
from podcast_feed.ingestion.normalizer import normalize_feed
from podcast_feed.ingestion.urls import normalize_url

__all__ = ["fetch_feed", "ImageCache", "normalize_feed", "normalize_url"]
