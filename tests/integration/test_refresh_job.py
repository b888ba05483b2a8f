"""
Integration tests for scripts/refresh_posts.py
"""

import importlib.util
import os
from unittest.mock import patch

import pytest

from blog_aggregator.models import PostSource
from blog_aggregator.services.posts_cache import PostsCache
from tests.fixtures.sample_data import FakeFeedSource, create_posts


SCRIPT_PATH = os.path.join(
    os.path.dirname(os.path.dirname(os.path.dirname(os.path.abspath(__file__)))),
    'scripts', 'refresh_posts.py',
)


@pytest.fixture(scope="module")
def refresh_job():
    spec = importlib.util.spec_from_file_location('refresh_posts', SCRIPT_PATH)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_successful_refresh_writes_snapshot(refresh_job, cache_file):
    sources = [
        FakeFeedSource("Blogger", create_posts(2, prefix="blog")),
        FakeFeedSource("Medium", create_posts(1, PostSource.MEDIUM, prefix="medium")),
    ]
    cache = PostsCache(sources=sources, cache_file=cache_file)

    with patch.object(refresh_job, 'get_cache', return_value=cache):
        exit_code = refresh_job.main()

    assert exit_code == 0
    assert cache_file.exists()
    assert cache.stats()['entries'] == 3


def test_all_sources_down_exits_nonzero(refresh_job, cache_file):
    sources = [FakeFeedSource("Blogger", fail=True), FakeFeedSource("Medium", fail=True)]
    cache = PostsCache(sources=sources, cache_file=cache_file)

    with patch.object(refresh_job, 'get_cache', return_value=cache):
        exit_code = refresh_job.main()

    assert exit_code == 1
    assert not cache_file.exists()
