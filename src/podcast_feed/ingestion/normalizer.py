"""
Feed normalization: raw feed XML -> canonical FeedPayload.

This is the pure core of the system. Given feed bytes (and optionally a
build timestamp) it always produces the same payload, with no I/O:

    parse XML -> channel metadata -> one Episode per playable item
              -> stable sort, newest first -> FeedPayload

Items without an audio URL are dropped. Dates are kept verbatim in the
output; they are only parsed to order the episodes, and a date that cannot
be parsed sorts after every valid one instead of failing the build.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Any, List, Optional, Union

from dateutil import parser as date_parser
from dateutil import tz

from podcast_feed.ingestion.extractors import (
    extract_channel,
    extract_notes,
    resolve_item_audio,
    resolve_item_image,
)
from podcast_feed.ingestion.xml_tree import as_list, child, find_channel, parse_feed_xml, text_of
from podcast_feed.models.entities import Episode, FeedPayload, format_timestamp

logger = logging.getLogger(__name__)

# RFC 822 zone names that dateutil does not know on its own
RFC822_TZINFOS = {
    "EST": tz.tzoffset("EST", -5 * 3600),
    "EDT": tz.tzoffset("EDT", -4 * 3600),
    "CST": tz.tzoffset("CST", -6 * 3600),
    "CDT": tz.tzoffset("CDT", -5 * 3600),
    "MST": tz.tzoffset("MST", -7 * 3600),
    "MDT": tz.tzoffset("MDT", -6 * 3600),
    "PST": tz.tzoffset("PST", -8 * 3600),
    "PDT": tz.tzoffset("PDT", -7 * 3600),
}

# Sort key for dates that cannot be parsed: older than anything real
INVALID_DATE_KEY = -math.inf

# Fills in date parts a partial pubDate leaves out, instead of today's date
PARSE_DEFAULT = datetime(1970, 1, 1)


def pub_date_sort_key(pub_date: str) -> float:
    """
    Convert a feed date string into a sortable POSIX timestamp.

    Naive dates are read as UTC, and parts a date leaves out come from
    ``PARSE_DEFAULT`` so the key never depends on the current day. Empty
    or unparsable dates return ``INVALID_DATE_KEY`` so they sink to the
    end of a descending sort.

    Example:
        >>> pub_date_sort_key("Wed, 01 Jan 2020 00:00:00 GMT")
        1577836800.0
        >>> pub_date_sort_key("not-a-date")
        -inf
    """
    if not pub_date or not pub_date.strip():
        return INVALID_DATE_KEY
    try:
        parsed = date_parser.parse(
            pub_date, default=PARSE_DEFAULT, tzinfos=RFC822_TZINFOS
        )
        if parsed.tzinfo is None:
            parsed = parsed.replace(tzinfo=timezone.utc)
        return parsed.timestamp()
    except (ValueError, OverflowError) as exc:
        logger.debug("Unparsable pubDate %r: %s", pub_date, exc)
        return INVALID_DATE_KEY


def sort_episodes(episodes: List[Episode]) -> List[Episode]:
    """
    Order episodes newest first.

    Python's sort is stable even with ``reverse=True``, so episodes sharing
    a date (or all sharing an invalid date) keep their feed order.
    """
    return sorted(episodes, key=lambda ep: pub_date_sort_key(ep.pub_date), reverse=True)


def build_episode(item: Any, channel_image: str = "") -> Optional[Episode]:
    """
    Assemble one Episode from a raw item node.

    Args:
        item: Item node from the parsed tree
        channel_image: Normalized channel artwork URL

    Returns:
        Episode, or None when the item has no usable audio URL
    """
    title = text_of(child(item, "title"))
    audio_url = resolve_item_audio(item)
    if not audio_url:
        logger.debug("Dropping item without audio: %r", title)
        return None

    return Episode(
        title=title,
        pub_date=text_of(child(item, "pubDate")),
        audio_url=audio_url,
        image=resolve_item_image(item, channel_image),
        podcast_image=channel_image,
        notes_html=extract_notes(item),
    )


def normalize_feed(
    source: Union[str, bytes],
    generated_at: Optional[datetime] = None,
) -> FeedPayload:
    """
    Normalize a podcast feed document into the canonical payload.

    Args:
        source: Feed XML as text or bytes
        generated_at: Build timestamp; defaults to now (UTC)

    Returns:
        FeedPayload with channel metadata and sorted episodes

    Raises:
        ParseError: If the feed XML is malformed

    Example:
        >>> payload = normalize_feed(open("feed.xml", "rb").read())
        >>> print(payload.channel.title, len(payload.items))
    """
    tree = parse_feed_xml(source)
    channel_node = find_channel(tree)
    channel = extract_channel(channel_node)

    raw_items = as_list(channel_node.get("item"))
    episodes = []
    for item in raw_items:
        episode = build_episode(item, channel.image)
        if episode is not None:
            episodes.append(episode)

    dropped = len(raw_items) - len(episodes)
    if dropped:
        logger.info("Skipped %d item(s) without an audio URL", dropped)

    moment = generated_at or datetime.now(timezone.utc)
    return FeedPayload(
        generated_at=format_timestamp(moment),
        channel=channel,
        items=sort_episodes(episodes),
    )
