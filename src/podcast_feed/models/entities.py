"""
Pydantic models for the canonical feed payload.

Field names on the wire are camelCase and load-bearing: the static page's
render adapter reads ``episodes.json`` byte-for-byte, so every model
serializes through its aliases (``model_dump(by_alias=True)``).
"""

import json
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


DEFAULT_CHANNEL_TITLE = "Podcast"


def format_timestamp(moment: datetime) -> str:
    """
    Format a datetime as ISO-8601 UTC with millisecond precision.

    Naive datetimes are assumed to already be UTC.

    Example:
        >>> format_timestamp(datetime(2020, 1, 1, tzinfo=timezone.utc))
        '2020-01-01T00:00:00.000Z'
    """
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=timezone.utc)
    moment = moment.astimezone(timezone.utc)
    return moment.isoformat(timespec="milliseconds").replace("+00:00", "Z")


class ChannelMetadata(BaseModel):
    """
    Feed-level metadata shared by every episode.

    Always present in the payload; defaults apply when the feed omits
    every source field.
    """
    model_config = ConfigDict(frozen=True)

    title: str = DEFAULT_CHANNEL_TITLE
    description: str = ""
    image: str = ""


class Episode(BaseModel):
    """
    Canonical episode record.

    ``audio_url`` is guaranteed non-empty: items without a resolvable audio
    URL never become an Episode. ``image_local`` is only set when artwork
    caching ran for this build, and is omitted from the JSON otherwise.
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    title: str = ""
    pub_date: str = Field(default="", alias="pubDate")
    audio_url: str = Field(alias="audioUrl", min_length=1)
    image: str = ""
    podcast_image: str = Field(default="", alias="podcastImage")
    notes_html: str = Field(default="", alias="notesHtml")
    image_local: Optional[str] = Field(default=None, alias="imageLocal")

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire representation."""
        return self.model_dump(by_alias=True, exclude_none=True)


class FeedPayload(BaseModel):
    """
    Root of the canonical JSON document.

    Attributes:
        generated_at: ISO-8601 timestamp of the build
        channel: Channel metadata
        items: Episodes, newest first
    """
    model_config = ConfigDict(frozen=True, populate_by_name=True)

    generated_at: str = Field(alias="generatedAt")
    channel: ChannelMetadata = Field(default_factory=ChannelMetadata)
    items: List[Episode] = Field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the wire representation."""
        return {
            "generatedAt": self.generated_at,
            "channel": self.channel.model_dump(by_alias=True),
            "items": [episode.to_dict() for episode in self.items],
        }

    def to_json(self, indent: int = 2) -> str:
        """Serialize to JSON string."""
        return json.dumps(self.to_dict(), indent=indent, ensure_ascii=False)
