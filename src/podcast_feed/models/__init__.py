"""
Data models for the canonical episode payload.

Provides immutable Pydantic models for channel metadata, episodes and the
payload root written to ``episodes.json``.
"""

from podcast_feed.models.entities import (
    DEFAULT_CHANNEL_TITLE,
    ChannelMetadata,
    Episode,
    FeedPayload,
    format_timestamp,
)

__all__ = [
    "DEFAULT_CHANNEL_TITLE",
    "ChannelMetadata",
    "Episode",
    "FeedPayload",
    "format_timestamp",
]
