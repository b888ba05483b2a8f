"""
Posts Cache

Owns the merged, summarized post list for the process and decides on each
request whether to serve memory, load the JSON snapshot, or run the
ingestion pipeline:

1. Fetch all feeds concurrently
2. Deduplicate by canonical URL
3. Summarize (reusing summaries already in the snapshot or in memory)
4. Sort newest first and persist the snapshot (best effort)

Stale entries are served immediately while a background refresh runs. At
most one refresh runs at a time; blocking callers arriving while one is in
flight wait for its result instead of starting another.
"""

import json
import logging
import os
import threading
import time
from concurrent.futures import Future, ThreadPoolExecutor, as_completed
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Callable, Optional

from blog_aggregator.config import (
    CACHE_DURATION_MINUTES,
    CACHE_FILE,
    CONTENT_SUBSTRING_LENGTH,
    JSON_INDENT_SPACES,
)
from blog_aggregator.errors import AllSourcesUnavailableError, ExternalSourceError
from blog_aggregator.models import Post
from blog_aggregator.services.feed_sources import FeedSource, default_sources
from blog_aggregator.services.search import generate_embedding
from blog_aggregator.services.summarizer import generate_summary
from blog_aggregator.services.url_normalizer import deduplicate_posts, normalize_url

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class PostsCache:
    """
    Process-wide cache of aggregated posts.

    get_posts, refresh and clear are the only ways the cached entries
    change. Every reader gets the same tuple of frozen Posts.
    """

    def __init__(
        self,
        sources: Optional[list[FeedSource]] = None,
        cache_file: Optional[str] = CACHE_FILE,
        staleness: timedelta = timedelta(minutes=CACHE_DURATION_MINUTES),
        clock: Callable[[], datetime] = _utcnow,
    ):
        self._sources = sources
        self.cache_file = Path(cache_file) if cache_file else None
        self.staleness = staleness
        self._clock = clock

        self._lock = threading.Lock()
        self._entries: Optional[tuple[Post, ...]] = None
        self._last_refreshed_at: Optional[datetime] = None
        self._inflight: Optional[Future] = None
        self._background: Optional[threading.Thread] = None

    @property
    def sources(self) -> list[FeedSource]:
        if self._sources is None:
            self._sources = default_sources()
        return self._sources

    # ------------------------------------------------------------------
    # Public entry points
    # ------------------------------------------------------------------

    def get_posts(self, force_refresh: bool = False) -> tuple[Post, ...]:
        """
        Return cached posts, refreshing them when needed.

        Args:
            force_refresh: Skip memory and snapshot and run the pipeline

        Returns:
            Posts sorted newest first

        Raises:
            AllSourcesUnavailableError: a blocking refresh found no content
                and there was nothing cached to fall back on
        """
        now = self._clock()
        with self._lock:
            entries = self._entries
            refreshed_at = self._last_refreshed_at

        if not force_refresh and entries is not None:
            if refreshed_at is not None and now - refreshed_at < self.staleness:
                logger.info(f"Returning {len(entries)} posts from in-memory cache")
                return entries

            logger.info(f"Cache is stale, serving {len(entries)} posts and refreshing in background")
            self.refresh_in_background()
            return entries

        if not force_refresh:
            loaded = self._load_from_snapshot(now)
            if loaded is not None:
                return loaded

        return self.refresh()

    def refresh(self) -> tuple[Post, ...]:
        """
        Run the ingestion pipeline and replace the cached entries.

        Joins an in-flight refresh instead of starting a second one.
        """
        with self._lock:
            future = self._inflight
            owner = future is None
            if owner:
                future = Future()
                self._inflight = future

        if not owner:
            logger.info("Refresh already in flight, waiting for its result")
            return future.result()

        try:
            posts = self._fetch_all_posts()
            with self._lock:
                self._entries = posts
                self._last_refreshed_at = self._clock()
        except BaseException as e:
            future.set_exception(e)
            raise
        else:
            future.set_result(posts)
            return posts
        finally:
            with self._lock:
                if self._inflight is future:
                    self._inflight = None

    def refresh_in_background(self) -> Optional[threading.Thread]:
        """
        Start a refresh without waiting for it.

        Returns None when a refresh is already running; that refresh will
        update the entries instead.
        """
        with self._lock:
            busy = self._background is not None and self._background.is_alive()
            if busy or self._inflight is not None:
                return None
            thread = threading.Thread(
                target=self._background_refresh,
                name='posts-cache-refresh',
                daemon=True,
            )
            self._background = thread
            thread.start()
        return thread

    def wait_for_background_refresh(self, timeout: Optional[float] = None) -> None:
        with self._lock:
            thread = self._background
        if thread is not None:
            thread.join(timeout)

    def clear(self) -> None:
        """Forget cached entries; the next call behaves like a cold start."""
        with self._lock:
            self._entries = None
            self._last_refreshed_at = None
        logger.info("Cache cleared")

    def stats(self) -> dict:
        with self._lock:
            return {
                'entries': len(self._entries) if self._entries is not None else 0,
                'last_refreshed_at': self._last_refreshed_at.isoformat() if self._last_refreshed_at else None,
                'refresh_in_flight': self._inflight is not None,
                'cache_file': str(self.cache_file) if self.cache_file else None,
            }

    # ------------------------------------------------------------------
    # Pipeline
    # ------------------------------------------------------------------

    def _background_refresh(self) -> None:
        try:
            posts = self.refresh()
            logger.info(f"Background refresh completed: {len(posts)} posts")
        except Exception as e:
            logger.error(f"Background refresh failed: {e}")

    def _load_from_snapshot(self, now: datetime) -> Optional[tuple[Post, ...]]:
        snapshot = self.load_snapshot()
        if not snapshot:
            return None

        posts, saved_at = snapshot
        with self._lock:
            # A refresh may have landed while the file was being read
            if self._entries is None:
                self._entries = posts
                self._last_refreshed_at = saved_at
            entries = self._entries

        if now - saved_at >= self.staleness:
            logger.info("Snapshot is stale, triggering background refresh...")
            self.refresh_in_background()

        return entries

    def _fetch_all_posts(self) -> tuple[Post, ...]:
        start = time.time()
        logger.info("Starting to fetch posts from all sources...")

        all_posts, errors = self._fetch_sources()

        unique_posts = deduplicate_posts(all_posts)
        if not unique_posts:
            raise AllSourcesUnavailableError(errors)

        known = self._known_summaries()
        reused = 0
        enriched = []
        for post in unique_posts:
            summary = known.get(normalize_url(post.link))
            if summary:
                reused += 1
            else:
                summary = generate_summary(post.content)
            embedding_text = f"{post.title} {summary} {post.content[:CONTENT_SUBSTRING_LENGTH]}"
            enriched.append(post.copy(summary=summary, embedding=generate_embedding(embedding_text)))

        enriched.sort(key=lambda p: p.published, reverse=True)
        posts = tuple(enriched)

        self.save_snapshot(posts)

        logger.info(
            f"Successfully processed {len(posts)} posts ({reused} summaries reused, "
            f"{len(errors)} sources failed) in {time.time() - start:.1f}s"
        )
        return posts

    def _fetch_sources(self) -> tuple[list[Post], list[ExternalSourceError]]:
        """Fetch every source concurrently; a failed source contributes no posts."""
        sources = self.sources
        all_posts: list[Post] = []
        errors: list[ExternalSourceError] = []

        with ThreadPoolExecutor(max_workers=max(1, len(sources))) as executor:
            future_to_source = {executor.submit(source.fetch): source for source in sources}
            for future in as_completed(future_to_source):
                source = future_to_source[future]
                try:
                    posts = future.result()
                except ExternalSourceError as e:
                    logger.error(f"Error fetching {source.name} posts: {e}")
                    errors.append(e)
                    continue
                except Exception as e:
                    logger.error(f"Unexpected error fetching {source.name} posts: {e}", exc_info=True)
                    errors.append(ExternalSourceError(source.name, e))
                    continue
                all_posts.extend(posts)

        return all_posts, errors

    def _known_summaries(self) -> dict[str, str]:
        """Summaries already generated, keyed by canonical link."""
        known: dict[str, str] = {}

        snapshot = self.load_snapshot()
        if snapshot:
            for post in snapshot[0]:
                if post.summary:
                    known[normalize_url(post.link)] = post.summary

        with self._lock:
            entries = self._entries or ()
        for post in entries:
            if post.summary:
                known.setdefault(normalize_url(post.link), post.summary)

        return known

    # ------------------------------------------------------------------
    # Durable snapshot
    # ------------------------------------------------------------------

    def load_snapshot(self) -> Optional[tuple[tuple[Post, ...], datetime]]:
        """
        Read the JSON snapshot.

        Returns:
            (posts, file modification time) or None when the file is
            missing, unreadable or empty
        """
        if self.cache_file is None or not self.cache_file.exists():
            return None

        try:
            saved_at = datetime.fromtimestamp(self.cache_file.stat().st_mtime, tz=timezone.utc)
            data = json.loads(self.cache_file.read_text(encoding='utf-8'))
            if not isinstance(data, list):
                raise ValueError(f"expected a list of posts, got {type(data).__name__}")
            posts = [Post.from_dict(item) for item in data]
        except (OSError, ValueError, KeyError, TypeError, AttributeError) as e:
            logger.warning(f"Failed to load cache file: {e}")
            return None

        if not posts:
            return None

        posts.sort(key=lambda p: p.published, reverse=True)
        logger.info(f"Loaded {len(posts)} posts from file cache")
        return tuple(posts), saved_at

    def save_snapshot(self, posts) -> bool:
        """Write the JSON snapshot; failures are logged, never raised."""
        if self.cache_file is None:
            return False

        tmp_path = self.cache_file.with_name(self.cache_file.name + '.tmp')
        try:
            self.cache_file.parent.mkdir(parents=True, exist_ok=True)
            tmp_path.write_text(
                json.dumps([post.to_dict() for post in posts], indent=JSON_INDENT_SPACES, ensure_ascii=False),
                encoding='utf-8',
            )
            os.replace(tmp_path, self.cache_file)
        except OSError as e:
            logger.warning(f"Could not save cache file {self.cache_file}: {e}")
            return False

        logger.info(f"Saved {len(posts)} posts to cache file")
        return True


# Process-wide instance, created on first use
_cache: Optional[PostsCache] = None
_cache_lock = threading.Lock()


def get_cache() -> PostsCache:
    global _cache
    with _cache_lock:
        if _cache is None:
            _cache = PostsCache()
        return _cache


def get_posts(force_refresh: bool = False) -> tuple[Post, ...]:
    return get_cache().get_posts(force_refresh)


def clear_cache() -> None:
    get_cache().clear()
