"""
Blog Aggregation Services

This package contains the ingestion, caching and search pipeline:
- feed_sources: Fetch Blogger (Atom) and Medium (RSS) feeds with retries
- text_extractor: Turn feed HTML into readable, bounded text
- summarizer: Build short extractive summaries
- url_normalizer: Canonicalize links and deduplicate posts
- posts_cache: Serve, persist and refresh the merged post list
- search: Rank cached posts against a query
"""

from blog_aggregator.services.feed_sources import BloggerFeedSource, MediumFeedSource, default_sources
from blog_aggregator.services.text_extractor import extract_readable_text
from blog_aggregator.services.summarizer import generate_summary
from blog_aggregator.services.url_normalizer import normalize_url, deduplicate_posts
from blog_aggregator.services.posts_cache import PostsCache, get_posts, clear_cache
from blog_aggregator.services.search import search, KeywordScorer, EmbeddingScorer

__all__ = [
    'BloggerFeedSource',
    'MediumFeedSource',
    'default_sources',
    'extract_readable_text',
    'generate_summary',
    'normalize_url',
    'deduplicate_posts',
    'PostsCache',
    'get_posts',
    'clear_cache',
    'search',
    'KeywordScorer',
    'EmbeddingScorer',
]
