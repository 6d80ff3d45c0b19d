"""
Field extraction rules for channel and item nodes.

Every canonical field is resolved through a ``FallbackChain``. The rule
functions here are deliberately tiny: each reads one tag in one way, via the
cardinality helpers from ``xml_tree`` so it works whether the publisher
emitted the tag once or many times.

Precedence (first non-empty wins):

    channel title        title -> "Podcast"
    channel description  description -> itunes:summary -> itunes:subtitle
    channel image        image.url -> itunes:image@href -> itunes:image@url
    item notes           content:encoded -> content -> description
    item audio           enclosure@url -> media:content[type=audio/*]@url
    item image           itunes:image -> image -> media:content[image]
                         -> media:thumbnail -> first <img> in notes -> channel
"""

import logging
from typing import Any, Optional

from bs4 import BeautifulSoup

from podcast_feed.ingestion.fallbacks import FallbackChain, Rule
from podcast_feed.ingestion.urls import normalize_url
from podcast_feed.ingestion.xml_tree import as_list, attr, child, first, text_of
from podcast_feed.models.entities import DEFAULT_CHANNEL_TITLE, ChannelMetadata

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
#  Tag-level rules
# ---------------------------------------------------------------------------

def itunes_image_url(node: Any) -> str:
    """
    Read ``itunes:image``: ``href``, then ``url``, then a bare string value.
    """
    tag = first(child(node, "itunes:image"))
    if isinstance(tag, dict):
        return attr(tag, "href") or attr(tag, "url")
    return text_of(tag)


def image_tag_url(node: Any) -> str:
    """Read a generic ``image`` tag: its ``url`` sub-field, or a bare string."""
    tag = first(child(node, "image"))
    if isinstance(tag, dict):
        return attr(tag, "url")
    return text_of(tag)


def _is_image_media(entry: Any) -> bool:
    return attr(entry, "type").startswith("image/") or attr(entry, "medium") == "image"


def _is_audio_media(entry: Any) -> bool:
    return attr(entry, "type").startswith("audio/")


def _first_media_content(node: Any, predicate) -> Optional[Any]:
    for entry in as_list(child(node, "media:content")):
        if isinstance(entry, dict) and predicate(entry):
            return entry
    return None


def media_content_image_url(node: Any) -> str:
    """``url`` of the first ``media:content`` declared as an image."""
    return attr(_first_media_content(node, _is_image_media), "url")


def media_content_audio_url(node: Any) -> str:
    """``url`` of the first ``media:content`` with an ``audio/*`` type."""
    return attr(_first_media_content(node, _is_audio_media), "url")


def media_thumbnail_url(node: Any) -> str:
    tag = first(child(node, "media:thumbnail"))
    if isinstance(tag, dict):
        return attr(tag, "url")
    return text_of(tag)


def enclosure_url(node: Any) -> str:
    return attr(child(node, "enclosure"), "url")


def first_img_src(html: str) -> str:
    """
    Return the ``src`` of the first ``<img>`` in an HTML fragment.

    Args:
        html: Untrusted HTML (show notes)

    Returns:
        The raw ``src`` value, or ``""`` when there is no image
    """
    if not html:
        return ""
    soup = BeautifulSoup(html, "html.parser")
    img = soup.find("img", src=True)
    if img is None:
        return ""
    src = img.get("src")
    if isinstance(src, list):
        src = " ".join(src)
    return (src or "").strip()


# ---------------------------------------------------------------------------
#  Chains
# ---------------------------------------------------------------------------

NOTES_CHAIN = FallbackChain("notesHtml", [
    Rule("content:encoded", lambda item: text_of(child(item, "content:encoded"))),
    Rule("content", lambda item: text_of(child(item, "content"))),
    Rule("description", lambda item: text_of(child(item, "description"))),
])

AUDIO_CHAIN = FallbackChain("audioUrl", [
    Rule("enclosure", enclosure_url),
    Rule("media:content[audio]", media_content_audio_url),
], transform=normalize_url)

ITEM_IMAGE_CHAIN = FallbackChain("image", [
    Rule("itunes:image", lambda item, channel_image: itunes_image_url(item)),
    Rule("image", lambda item, channel_image: image_tag_url(item)),
    Rule("media:content[image]", lambda item, channel_image: media_content_image_url(item)),
    Rule("media:thumbnail", lambda item, channel_image: media_thumbnail_url(item)),
    Rule("notes <img>", lambda item, channel_image: first_img_src(extract_notes(item))),
    Rule("channel", lambda item, channel_image: channel_image),
], transform=normalize_url)

CHANNEL_TITLE_CHAIN = FallbackChain("channel.title", [
    Rule("title", lambda channel: text_of(child(channel, "title"))),
    Rule("default", lambda channel: DEFAULT_CHANNEL_TITLE),
])

CHANNEL_DESCRIPTION_CHAIN = FallbackChain("channel.description", [
    Rule("description", lambda channel: text_of(child(channel, "description"))),
    Rule("itunes:summary", lambda channel: text_of(child(channel, "itunes:summary"))),
    Rule("itunes:subtitle", lambda channel: text_of(child(channel, "itunes:subtitle"))),
])

CHANNEL_IMAGE_CHAIN = FallbackChain("channel.image", [
    Rule("image.url", lambda channel: attr(child(channel, "image"), "url")),
    Rule("itunes:image@href", lambda channel: attr(child(channel, "itunes:image"), "href")),
    Rule("itunes:image@url", lambda channel: attr(child(channel, "itunes:image"), "url")),
], transform=normalize_url)


# ---------------------------------------------------------------------------
#  Public extraction API
# ---------------------------------------------------------------------------

def extract_channel(channel: Any) -> ChannelMetadata:
    """
    Extract channel metadata with defaults for every missing field.

    Args:
        channel: Channel node from ``find_channel``

    Returns:
        ChannelMetadata with a normalized image URL
    """
    return ChannelMetadata(
        title=CHANNEL_TITLE_CHAIN.resolve(channel),
        description=CHANNEL_DESCRIPTION_CHAIN.resolve(channel),
        image=CHANNEL_IMAGE_CHAIN.resolve(channel),
    )


def extract_notes(item: Any) -> str:
    """Raw (unsanitized) show-notes HTML for an item."""
    return NOTES_CHAIN.resolve(item)


def resolve_item_audio(item: Any) -> str:
    """Normalized audio URL for an item, or ``""`` if it has none."""
    return AUDIO_CHAIN.resolve(item)


def resolve_item_image(item: Any, channel_image: str = "") -> str:
    """
    Resolve the artwork URL for an item.

    Args:
        item: Item node
        channel_image: Already-resolved channel image (last resort)

    Returns:
        Normalized image URL, or ``""`` when neither item nor channel
        carries artwork
    """
    value, source = ITEM_IMAGE_CHAIN.resolve_with_source(item, channel_image)
    logger.debug("Item image resolved from %s: %s", source or "nothing", value)
    return value
