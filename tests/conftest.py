"""
Shared test fixtures.

Provides pytest fixtures for common test resources including:
- Isolated working directory and environment
- A builder for RSS feed documents with podcast namespaces
- A realistic multi-episode sample feed
"""

from pathlib import Path
from typing import Callable

import pytest


NAMESPACES = (
    'xmlns:itunes="http://www.itunes.com/dtds/podcast-1.0.dtd" '
    'xmlns:media="http://search.yahoo.com/mrss/" '
    'xmlns:content="http://purl.org/rss/1.0/modules/content/"'
)


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """
    Run every test in an empty working directory with no feed env vars.

    Keeps a developer's own podcast.yaml, .env or PODCAST_FEED_* variables
    from leaking into the configuration under test.
    """
    for name in ("RSS_URL", "PODCAST_FEED_RSS_URL", "PODCAST_FEED_OUTPUT_PATH",
                 "PODCAST_FEED_IMAGES_DIR", "PODCAST_FEED_CACHE_IMAGES",
                 "PODCAST_FEED_USER_AGENT", "PODCAST_FEED_REQUEST_TIMEOUT",
                 "PODCAST_FEED_IMAGES_URL_PREFIX"):
        monkeypatch.delenv(name, raising=False)
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.chdir(workdir)
    return workdir


@pytest.fixture
def make_feed() -> Callable[..., str]:
    """
    Build an RSS document from channel-level XML and item XML snippets.

    Returns:
        Function ``(items=(), channel="<title>Show</title>") -> str``
    """
    def _make(items=(), channel: str = "<title>Show</title>") -> str:
        body = "".join(f"<item>{item}</item>" for item in items)
        return (
            '<?xml version="1.0" encoding="UTF-8"?>'
            f'<rss version="2.0" {NAMESPACES}>'
            f"<channel>{channel}{body}</channel>"
            "</rss>"
        )

    return _make


@pytest.fixture
def sample_feed(make_feed) -> str:
    """
    Three playable episodes (out of date order) plus one without audio.
    """
    channel = (
        "<title>Acme Cast</title>"
        "<description>Weekly &lt;b&gt;widgets&lt;/b&gt;</description>"
        '<itunes:image href="http://cdn.acme.test/show.jpg"/>'
    )
    items = [
        "<title>Episode 1</title>"
        "<pubDate>Mon, 06 Jan 2020 10:00:00 GMT</pubDate>"
        '<enclosure url="http://cdn.acme.test/ep1.mp3" type="audio/mpeg" length="1000"/>'
        '<itunes:image href="https://cdn.acme.test/ep1.jpg"/>'
        "<description>First</description>",

        "<title>Episode 3</title>"
        "<pubDate>Mon, 20 Jan 2020 10:00:00 GMT</pubDate>"
        '<enclosure url="https://cdn.acme.test/ep3.mp3" type="audio/mpeg"/>'
        "<content:encoded><![CDATA[<p>Third <img src=\"//cdn.acme.test/ep3.png\"></p>]]></content:encoded>",

        "<title>Trailer without audio</title>"
        "<pubDate>Tue, 21 Jan 2020 10:00:00 GMT</pubDate>",

        "<title>Episode 2</title>"
        "<pubDate>Mon, 13 Jan 2020 10:00:00 GMT</pubDate>"
        '<media:content url="https://cdn.acme.test/ep2.m4a" type="audio/x-m4a"/>',
    ]
    return make_feed(items=items, channel=channel)
