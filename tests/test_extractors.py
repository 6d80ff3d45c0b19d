"""
Tests for channel and item field extraction.

Covers:
- Item artwork precedence (itunes:image > image > media:content >
  media:thumbnail > <img> in notes > channel image)
- Audio URL resolution (enclosure, then audio media:content)
- Show notes and channel metadata fallback chains
- Scalar-vs-list tolerance for every multi-valued tag
"""

from unittest.mock import MagicMock

import pytest

from podcast_feed.ingestion.extractors import (
    ITEM_IMAGE_CHAIN,
    extract_channel,
    extract_notes,
    first_img_src,
    resolve_item_audio,
    resolve_item_image,
)
from podcast_feed.ingestion.fallbacks import FallbackChain, Rule
from podcast_feed.ingestion.xml_tree import find_channel, parse_feed_xml

CHANNEL_IMAGE = "https://cdn.test/show.jpg"


@pytest.fixture
def parse_item(make_feed):
    """Parse a single ``<item>`` body into its tree node."""
    def _parse(body: str):
        return find_channel(parse_feed_xml(make_feed(items=[body])))["item"]
    return _parse


@pytest.fixture
def parse_channel(make_feed):
    """Parse channel-level XML into the channel node."""
    def _parse(body: str):
        return find_channel(parse_feed_xml(make_feed(channel=body)))
    return _parse


# ===================================================================
# Item artwork
# ===================================================================

class TestResolveItemImage:
    """Tests for resolve_item_image() precedence."""

    def test_itunes_image_beats_thumbnail(self, parse_item):
        item = parse_item(
            '<media:thumbnail url="https://a/thumb.jpg"/>'
            '<itunes:image href="https://a/i1.jpg"/>'
        )
        assert resolve_item_image(item, CHANNEL_IMAGE) == "https://a/i1.jpg"

    def test_itunes_image_url_attribute(self, parse_item):
        item = parse_item('<itunes:image url="https://a/i2.jpg"/>')
        assert resolve_item_image(item, CHANNEL_IMAGE) == "https://a/i2.jpg"

    def test_itunes_image_bare_text(self, parse_item):
        item = parse_item("<itunes:image>https://a/i3.jpg</itunes:image>")
        assert resolve_item_image(item, CHANNEL_IMAGE) == "https://a/i3.jpg"

    def test_empty_itunes_href_falls_through(self, parse_item):
        item = parse_item(
            '<itunes:image href=""/>'
            '<media:thumbnail url="https://a/thumb.jpg"/>'
        )
        assert resolve_item_image(item, CHANNEL_IMAGE) == "https://a/thumb.jpg"

    def test_generic_image_url_subfield(self, parse_item):
        item = parse_item(
            "<image><url>http://a/generic.jpg</url><title>Art</title></image>"
            '<media:thumbnail url="https://a/thumb.jpg"/>'
        )
        assert resolve_item_image(item, CHANNEL_IMAGE) == "https://a/generic.jpg"

    def test_generic_image_bare_text(self, parse_item):
        item = parse_item("<image>//a/generic.jpg</image>")
        assert resolve_item_image(item, CHANNEL_IMAGE) == "https://a/generic.jpg"

    def test_media_content_image_skips_audio_entries(self, parse_item):
        item = parse_item(
            '<media:content url="https://a/ep.mp3" type="audio/mpeg"/>'
            '<media:content url="https://a/art.png" type="image/png"/>'
            '<media:content url="https://a/art2.png" type="image/png"/>'
            '<media:thumbnail url="https://a/thumb.jpg"/>'
        )
        assert resolve_item_image(item, CHANNEL_IMAGE) == "https://a/art.png"

    def test_media_content_medium_image(self, parse_item):
        item = parse_item('<media:content url="https://a/art.webp" medium="image"/>')
        assert resolve_item_image(item, CHANNEL_IMAGE) == "https://a/art.webp"

    def test_single_media_content_is_not_a_list(self, parse_item):
        item = parse_item('<media:content url="https://a/only.jpg" type="image/jpeg"/>')
        assert isinstance(item["media:content"], dict)
        assert resolve_item_image(item, CHANNEL_IMAGE) == "https://a/only.jpg"

    def test_media_thumbnail(self, parse_item):
        item = parse_item('<media:thumbnail url="http://a/thumb.jpg" width="75"/>')
        assert resolve_item_image(item, CHANNEL_IMAGE) == "https://a/thumb.jpg"

    def test_img_in_encoded_content(self, parse_item):
        item = parse_item(
            '<content:encoded><![CDATA[<p>Hi</p><img src="//a/notes.jpg"><img src="https://a/2.jpg">]]>'
            "</content:encoded>"
        )
        assert resolve_item_image(item, CHANNEL_IMAGE) == "https://a/notes.jpg"

    def test_img_in_description(self, parse_item):
        item = parse_item(
            "<description>&lt;img src=&quot;https://a/desc.jpg&quot;&gt;</description>"
        )
        assert resolve_item_image(item, CHANNEL_IMAGE) == "https://a/desc.jpg"

    def test_falls_back_to_channel_image(self, parse_item):
        item = parse_item("<title>Plain</title><description>No art here</description>")
        assert resolve_item_image(item, CHANNEL_IMAGE) == CHANNEL_IMAGE

    def test_empty_when_nothing_anywhere(self, parse_item):
        item = parse_item("<title>Plain</title>")
        assert resolve_item_image(item, "") == ""

    def test_rule_order(self):
        assert ITEM_IMAGE_CHAIN.rule_names == (
            "itunes:image",
            "image",
            "media:content[image]",
            "media:thumbnail",
            "notes <img>",
            "channel",
        )


# ===================================================================
# Audio
# ===================================================================

class TestResolveItemAudio:
    """Tests for resolve_item_audio()."""

    def test_enclosure_url_is_normalized(self, parse_item):
        item = parse_item('<enclosure url="http://a/ep1.mp3" type="audio/mpeg"/>')
        assert resolve_item_audio(item) == "https://a/ep1.mp3"

    def test_first_enclosure_wins(self, parse_item):
        item = parse_item(
            '<enclosure url="https://a/one.mp3" type="audio/mpeg"/>'
            '<enclosure url="https://a/two.mp3" type="audio/mpeg"/>'
        )
        assert resolve_item_audio(item) == "https://a/one.mp3"

    def test_media_content_audio_fallback(self, parse_item):
        item = parse_item(
            '<media:content url="https://a/art.jpg" type="image/jpeg"/>'
            '<media:content url="//a/ep.m4a" type="audio/x-m4a"/>'
        )
        assert resolve_item_audio(item) == "https://a/ep.m4a"

    def test_no_audio(self, parse_item):
        item = parse_item(
            "<title>Text only</title>"
            '<media:content url="https://a/video.mp4" type="video/mp4"/>'
        )
        assert resolve_item_audio(item) == ""


# ===================================================================
# Notes and channel
# ===================================================================

class TestExtractNotes:
    """Tests for extract_notes()."""

    def test_encoded_content_preferred(self, parse_item):
        item = parse_item(
            "<description>Short</description>"
            "<content:encoded><![CDATA[<p>Long <a href='x'>notes</a></p>]]></content:encoded>"
        )
        assert extract_notes(item) == "<p>Long <a href='x'>notes</a></p>"

    def test_description_fallback_is_raw_html(self, parse_item):
        item = parse_item("<description><![CDATA[<script>alert(1)</script>]]></description>")
        assert extract_notes(item) == "<script>alert(1)</script>"

    def test_default_empty(self, parse_item):
        assert extract_notes(parse_item("<title>x</title>")) == ""


class TestExtractChannel:
    """Tests for extract_channel()."""

    def test_defaults_for_empty_channel(self):
        channel = extract_channel({})
        assert channel.title == "Podcast"
        assert channel.description == ""
        assert channel.image == ""

    def test_description_falls_back_to_itunes_summary(self, parse_channel):
        channel = extract_channel(parse_channel(
            "<title>Show</title>"
            "<itunes:summary>Summary</itunes:summary>"
            "<itunes:subtitle>Subtitle</itunes:subtitle>"
        ))
        assert channel.description == "Summary"

    def test_description_falls_back_to_itunes_subtitle(self, parse_channel):
        channel = extract_channel(parse_channel("<itunes:subtitle>Subtitle</itunes:subtitle>"))
        assert channel.description == "Subtitle"

    def test_image_url_beats_itunes_image(self, parse_channel):
        channel = extract_channel(parse_channel(
            "<image><url>http://a/rss.jpg</url></image>"
            '<itunes:image href="https://a/itunes.jpg"/>'
        ))
        assert channel.image == "https://a/rss.jpg"

    def test_itunes_image_href_then_url(self, parse_channel):
        assert extract_channel(parse_channel(
            '<itunes:image href="//a/href.jpg"/>'
        )).image == "https://a/href.jpg"
        assert extract_channel(parse_channel(
            '<itunes:image url="https://a/url.jpg"/>'
        )).image == "https://a/url.jpg"

    def test_channel_with_atom_title_sibling(self, parse_channel):
        """Repeated tags (e.g. two titles) resolve to the first."""
        channel = extract_channel(parse_channel("<title>First</title><title>Second</title>"))
        assert channel.title == "First"


# ===================================================================
# Building blocks
# ===================================================================

class TestFirstImgSrc:
    """Tests for first_img_src()."""

    def test_no_html(self):
        assert first_img_src("") == ""

    def test_no_img(self):
        assert first_img_src("<p>Just text</p>") == ""

    def test_skips_img_without_src(self):
        assert first_img_src('<img alt="x"><img src="https://a/b.png">') == "https://a/b.png"


class TestFallbackChain:
    """Tests for the ordered rule evaluator."""

    def test_reports_winning_rule(self):
        chain = FallbackChain("f", [
            Rule("a", lambda node: ""),
            Rule("b", lambda node: "B"),
        ])
        assert chain.resolve_with_source({}) == ("B", "b")

    def test_later_rules_not_evaluated(self):
        later = MagicMock(return_value="late")
        chain = FallbackChain("f", [Rule("a", lambda node: "A"), Rule("b", later)])

        assert chain.resolve({}) == "A"
        later.assert_not_called()

    def test_transform_applies_before_emptiness_check(self):
        chain = FallbackChain(
            "f",
            [Rule("a", lambda node: "drop-me"), Rule("b", lambda node: "keep")],
            transform=lambda value: "" if value == "drop-me" else value,
        )
        assert chain.resolve_with_source({}) == ("keep", "b")

    def test_nothing_matches(self):
        chain = FallbackChain("f", [Rule("a", lambda node: None)])
        assert chain.resolve_with_source({}) == ("", None)
