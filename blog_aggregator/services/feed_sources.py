"""
Feed Sources

Fetches the Blogger (Atom) and Medium (RSS 2.0) feeds over HTTP with retries
and turns their entries into Posts. Each source knows its own feed quirks;
they only agree on the RawEntry shape and the Post output.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Optional

import feedparser
import httpx

from blog_aggregator.config import (
    BLOGGER_FEED_URL,
    BLOGGER_MAX_POSTS,
    HTTP_TIMEOUT,
    MEDIUM_FEED_URL_TEMPLATE,
    MEDIUM_USERNAME,
    USER_AGENT,
)
from blog_aggregator.errors import ExternalSourceError
from blog_aggregator.models import Post, PostSource
from blog_aggregator.services.http_retry import retry_with_backoff
from blog_aggregator.services.text_extractor import extract_readable_text

logger = logging.getLogger(__name__)

ACCEPT = 'application/atom+xml, application/rss+xml, application/xml;q=0.9, */*;q=0.5'


@dataclass
class RawEntry:
    """Fields pulled out of one feed entry, before normalization."""
    title: str
    link: str
    published: Optional[datetime]
    body_html: str


def _struct_to_datetime(struct) -> Optional[datetime]:
    if not struct:
        return None
    try:
        return datetime(*struct[:6], tzinfo=timezone.utc)
    except (TypeError, ValueError):
        return None


def _entry_body(entry) -> str:
    entry_content = entry.get('content')
    if entry_content and len(entry_content) > 0:
        return entry_content[0].get('value', '')
    if 'summary' in entry:
        return entry.get('summary', '')
    return entry.get('description', '')


class FeedSource:
    """
    Base class for one upstream feed.

    Subclasses set name/source and implement _parse_entry.
    """

    name = 'feed'
    source: PostSource = None

    def __init__(self, url: str, params: dict = None, timeout: float = HTTP_TIMEOUT,
                 user_agent: str = USER_AGENT):
        self.url = url
        self.params = params or {}
        self.timeout = timeout
        self.user_agent = user_agent

    def fetch(self) -> list[Post]:
        """
        Fetch and parse the feed.

        Returns:
            Posts with normalized content and no summary yet

        Raises:
            ExternalSourceError: the feed could not be downloaded after retries
        """
        logger.info(f"Fetching {self.name} posts from {self.url}")

        try:
            body = retry_with_backoff(
                self._download,
                retry_on=(httpx.HTTPError,),
                label=f"{self.name} feed",
            )
        except httpx.HTTPError as e:
            raise ExternalSourceError(self.name, e) from e

        posts = self.parse(body)
        logger.info(f"Fetched {len(posts)} {self.name} posts")
        return posts

    def _download(self) -> bytes:
        response = httpx.get(
            self.url,
            params=self.params,
            timeout=self.timeout,
            follow_redirects=True,
            headers={
                'User-Agent': self.user_agent,
                'Accept': ACCEPT,
            }
        )
        response.raise_for_status()
        return response.content

    def parse(self, xml: bytes) -> list[Post]:
        """
        Parse a feed document into Posts.

        Malformed feeds yield whatever entries feedparser recovered, or an
        empty list.
        """
        try:
            result = feedparser.parse(xml)
        except Exception as e:
            logger.error(f"{self.name} feed could not be parsed: {e}")
            return []

        # Check for parsing issues (bozo flag)
        if result.get('bozo'):
            logger.warning(f"{self.name} feed parsing issue: {result.get('bozo_exception')}")

        posts = []
        for entry in result.get('entries', []):
            raw = self._parse_entry(entry)
            if raw is None:
                continue
            posts.append(self._to_post(raw))
        return posts

    def _parse_entry(self, entry) -> Optional[RawEntry]:
        raise NotImplementedError

    def _to_post(self, raw: RawEntry) -> Post:
        return Post(
            title=raw.title or 'Untitled',
            link=raw.link,
            published=raw.published or datetime.now(timezone.utc),
            content=extract_readable_text(raw.body_html),
            source=self.source,
        )


class BloggerFeedSource(FeedSource):
    """Blogger Atom feed (feeds/posts/default)."""

    name = 'Blogger'
    source = PostSource.BLOGSPOT

    def __init__(self, url: str = BLOGGER_FEED_URL, max_results: int = BLOGGER_MAX_POSTS, **kwargs):
        super().__init__(url, params={'max-results': max_results}, **kwargs)

    def _parse_entry(self, entry) -> Optional[RawEntry]:
        link = _alternate_link(entry)
        if not link:
            logger.debug(f"Skipping Blogger entry without link: {entry.get('title', '')}")
            return None

        return RawEntry(
            title=entry.get('title', '').strip(),
            link=link,
            published=_struct_to_datetime(entry.get('published_parsed'))
                      or _struct_to_datetime(entry.get('updated_parsed')),
            body_html=_entry_body(entry),
        )


def _alternate_link(entry) -> str:
    """
    Atom entries carry several <link> elements (self, edit, replies,
    alternate); the alternate one is the post URL.
    """
    links = entry.get('links') or []
    for link in links:
        if link.get('rel') == 'alternate' and link.get('href'):
            return link['href'].strip()
    if len(links) == 1:
        return (links[0].get('href') or '').strip()
    return (entry.get('link') or '').strip()


class MediumFeedSource(FeedSource):
    """Medium RSS 2.0 feed for a single user."""

    name = 'Medium'
    source = PostSource.MEDIUM

    def __init__(self, username: str = MEDIUM_USERNAME, **kwargs):
        self.username = username
        super().__init__(MEDIUM_FEED_URL_TEMPLATE.format(username=username), **kwargs)

    def _parse_entry(self, entry) -> Optional[RawEntry]:
        link = (entry.get('link') or '').strip()
        if not link:
            logger.debug(f"Skipping Medium item without link: {entry.get('title', '')}")
            return None

        # content:encoded carries the full post, description a teaser
        return RawEntry(
            title=entry.get('title', '').strip(),
            link=link,
            published=_struct_to_datetime(entry.get('published_parsed')),
            body_html=_entry_body(entry),
        )


def default_sources() -> list[FeedSource]:
    """The configured Blogger and Medium feeds."""
    return [BloggerFeedSource(), MediumFeedSource()]
