"""
Pytest configuration for integration tests

Provides performance measurement and Flask client fixtures
"""
import pytest
import time
from unittest.mock import patch

from blog_aggregator import create_app
from blog_aggregator.services.posts_cache import PostsCache


@pytest.fixture
def performance_timer():
    """
    Context manager for measuring test execution time

    Usage:
        with performance_timer() as timer:
            # ... code to measure ...

        assert timer.elapsed < 1.0  # Verify < 1 second
    """
    class Timer:
        def __init__(self):
            self.start = None
            self.end = None
            self.elapsed = None

        def __enter__(self):
            self.start = time.time()
            return self

        def __exit__(self, *args):
            self.end = time.time()
            self.elapsed = self.end - self.start

    return Timer


@pytest.fixture
def app():
    return create_app({'TESTING': True})


@pytest.fixture
def client(app):
    """Create test client."""
    with app.test_client() as client:
        yield client


@pytest.fixture
def use_cache():
    """
    Route requests to the given PostsCache instead of the process-wide one.

    Usage:
        use_cache(PostsCache(sources=[...], cache_file=...))
    """
    patchers = []

    def _use(cache: PostsCache):
        patcher = patch('blog_aggregator.routes.get_cache', return_value=cache)
        patcher.start()
        patchers.append(patcher)
        return cache

    yield _use

    for patcher in patchers:
        patcher.stop()
