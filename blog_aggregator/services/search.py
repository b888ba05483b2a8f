"""
Post Search Service

Ranks cached posts against a free-text query. Keyword scoring is the
default; the embedding scorer keeps the semantic seam but falls back to
keywords whenever no query embedding is available, which is always the
case while generate_embedding is disabled.
"""

import logging
import math
import re
from typing import Callable, Optional, Sequence

from blog_aggregator.config import (
    CONTENT_SUBSTRING_LENGTH,
    MIN_SEARCH_TERM_LENGTH,
    SEARCH_EXACT_MATCH_BONUS_MULTIPLIER,
    SEARCH_MIN_SCORE,
    SEARCH_RESULTS_LIMIT,
    SEARCH_SUMMARY_WEIGHT,
    SEARCH_TITLE_BONUS,
)
from blog_aggregator.models import Post, SearchResult

logger = logging.getLogger(__name__)


def generate_embedding(text: str) -> Optional[list[float]]:
    """
    Embedding generation for semantic search.

    Disabled: always returns None, which routes every search to keyword
    scoring.
    """
    return None


def cosine_similarity(a: Optional[Sequence[float]], b: Optional[Sequence[float]]) -> float:
    if not a or not b or len(a) != len(b):
        return 0.0

    dot = sum(x * y for x, y in zip(a, b))
    norm_a = math.sqrt(sum(x * x for x in a))
    norm_b = math.sqrt(sum(y * y for y in b))

    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (norm_a * norm_b)


def tokenize_query(query: str) -> list[str]:
    """
    Split a lowercased query into search terms.

    Punctuation is stripped from each token and tokens shorter than
    MIN_SEARCH_TERM_LENGTH are dropped.
    """
    terms = [re.sub(r'[^\w]', '', token) for token in query.split()]
    return [t for t in terms if len(t) >= MIN_SEARCH_TERM_LENGTH]


def _word_pattern(text: str) -> re.Pattern:
    return re.compile(rf'\b{re.escape(text)}\b')


def _rank(scored: list[SearchResult], limit: int, min_score: float = 0) -> list[SearchResult]:
    results = [r for r in scored if r.score > min_score]
    results.sort(key=lambda r: r.score, reverse=True)
    return results[:limit]


class KeywordScorer:
    """Weighted word-boundary keyword matching over title, summary and content."""

    def __init__(self, title_weight: float = SEARCH_TITLE_BONUS,
                 summary_weight: float = SEARCH_SUMMARY_WEIGHT,
                 content_length: int = CONTENT_SUBSTRING_LENGTH):
        self.title_weight = title_weight
        self.summary_weight = summary_weight
        self.content_length = content_length

    def score(self, query: str, terms: list[str], post: Post) -> float:
        title = (post.title or '').lower()
        summary = (post.summary or '').lower()
        content = (post.content or '')[:self.content_length].lower()
        searchable = f"{title} {summary} {content}"

        score = 0.0
        matched_terms = 0

        for term in terms:
            pattern = _word_pattern(term)
            title_matches = len(pattern.findall(title))
            summary_matches = len(pattern.findall(summary))
            content_matches = len(pattern.findall(content))

            score += title_matches * self.title_weight
            score += summary_matches * self.summary_weight
            score += content_matches

            if title_matches or summary_matches or content_matches:
                matched_terms += 1

        # Every keyword of a multi-word query matched somewhere
        if len(terms) > 1 and matched_terms == len(terms):
            score += self.title_weight

        if _word_pattern(query).search(searchable):
            score += self.title_weight * SEARCH_EXACT_MATCH_BONUS_MULTIPLIER

        return score

    def search(self, query: str, posts: Sequence[Post], limit: int = SEARCH_RESULTS_LIMIT) -> list[SearchResult]:
        logger.info(f"Text search for: \"{query}\" across {len(posts)} posts")

        query_lower = (query or '').strip().lower()
        if not query_lower:
            return []

        terms = tokenize_query(query_lower)
        if not terms:
            logger.warning(f"No valid search terms extracted from query: \"{query}\"")
            return []

        scored = [
            SearchResult.from_post(post, self.score(query_lower, terms, post))
            for post in posts
        ]
        results = _rank(scored, limit)

        logger.info(f"Found {len(results)} matching posts for query: \"{query}\"")
        return results


class EmbeddingScorer:
    """
    Cosine similarity between query and post embeddings.

    Falls back to the keyword scorer when the query cannot be embedded.
    """

    def __init__(self, embed: Callable[[str], Optional[list[float]]] = generate_embedding,
                 fallback: KeywordScorer = None,
                 min_score: float = SEARCH_MIN_SCORE):
        self.embed = embed
        self.fallback = fallback or KeywordScorer()
        self.min_score = min_score

    def search(self, query: str, posts: Sequence[Post], limit: int = SEARCH_RESULTS_LIMIT) -> list[SearchResult]:
        query_embedding = self.embed(query)
        if query_embedding is None:
            logger.info("No embedding generated, using text search fallback")
            return self.fallback.search(query, posts, limit)

        scored = [
            SearchResult.from_post(post, cosine_similarity(query_embedding, post.embedding))
            for post in posts
        ]
        results = _rank(scored, limit, self.min_score)
        logger.info(f"Found {len(results)} results with score > {self.min_score}")
        return results


def search(query: str, posts: Sequence[Post], limit: int = SEARCH_RESULTS_LIMIT,
           scorer=None) -> list[SearchResult]:
    """
    Rank posts against a query.

    Args:
        query: Free-text query
        posts: Corpus to search (not modified)
        limit: Maximum number of results
        scorer: KeywordScorer (default) or EmbeddingScorer

    Returns:
        Results with score > 0, best first
    """
    scorer = scorer or KeywordScorer()
    return scorer.search(query, posts, limit)
