"""
URL Normalization Service

Canonicalizes post links so the same post reached through different feeds,
tracking parameters or a trailing slash is only kept once.
"""

import logging
from urllib.parse import urlsplit, urlunsplit

from blog_aggregator.models import Post

logger = logging.getLogger(__name__)


def normalize_url(url: str) -> str:
    """
    Normalize a URL for deduplication.

    Normalization rules:
    1. Drop the query string
    2. Drop the fragment (#...)
    3. Convert to lowercase
    4. Remove a single trailing slash

    Strings that do not parse as absolute URLs fall back to their
    lowercased literal form.

    Args:
        url: Original URL

    Returns:
        Canonical URL string
    """
    if not url or not isinstance(url, str):
        return ''

    try:
        parsed = urlsplit(url.strip())
        if not parsed.scheme or not parsed.netloc:
            raise ValueError("not an absolute URL")

        normalized = urlunsplit((
            parsed.scheme,
            parsed.netloc,
            parsed.path or '/',
            '',         # No query
            ''          # No fragment
        )).lower()

    except ValueError as e:
        logger.debug(f"URL normalization fell back to literal for '{url}': {e}")
        return url.lower()

    if normalized.endswith('/'):
        normalized = normalized[:-1]

    return normalized


def _completeness(post: Post) -> int:
    # Before summaries exist, the body text stands in for them
    return len(post.summary or post.content or '')


def deduplicate_posts(posts: list[Post]) -> list[Post]:
    """
    Deduplicate posts by canonical URL.

    When two posts share a canonical URL the one with the longer summary
    (or longer content, before summarization) is kept. The returned order
    is not meaningful.

    Args:
        posts: Posts from all feeds

    Returns:
        One post per canonical URL
    """
    seen: dict[str, Post] = {}

    for post in posts:
        canonical = normalize_url(post.link)
        existing = seen.get(canonical)

        if existing is None:
            seen[canonical] = post
        elif _completeness(post) > _completeness(existing):
            logger.debug(f"Duplicate URL replaced: {existing.link} -> {post.link}")
            seen[canonical] = post
        else:
            logger.debug(f"Duplicate URL skipped: {post.link}")

    logger.info(f"Deduplication: {len(posts)} → {len(seen)} ({len(posts) - len(seen)} duplicates removed)")
    return list(seen.values())
