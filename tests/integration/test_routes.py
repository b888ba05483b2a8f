"""
Integration tests for the HTTP surface

Runs the Flask app against a PostsCache backed by fake feed sources.
"""

from unittest.mock import MagicMock

import pytest

from blog_aggregator.errors import AllSourcesUnavailableError
from blog_aggregator.models import PostSource
from blog_aggregator.services.posts_cache import PostsCache
from tests.fixtures.sample_data import FakeFeedSource, create_post, create_posts


@pytest.fixture
def sources():
    python_post = create_post(
        link="https://example.com/python-caching",
        title="Python Caching Tips",
        content="Use python for caching. It keeps pages quick for readers.",
        source=PostSource.MEDIUM,
    )
    garden_post = create_post(
        link="https://example.com/garden",
        title="Gardening",
        content="Plants need soil and water to grow well.",
    )
    return [
        FakeFeedSource("Blogger", [garden_post]),
        FakeFeedSource("Medium", [python_post]),
    ]


@pytest.fixture
def cache(use_cache, sources, cache_file):
    return use_cache(PostsCache(sources=sources, cache_file=cache_file))


@pytest.fixture
def failing_cache(use_cache, cache_file):
    sources = [FakeFeedSource("Blogger", fail=True), FakeFeedSource("Medium", fail=True)]
    return use_cache(PostsCache(sources=sources, cache_file=cache_file))


class TestHealthCheck:
    """Tests for health check endpoint."""

    def test_health_check(self, client, cache):
        response = client.get('/health')

        assert response.status_code == 200
        data = response.get_json()
        assert data['status'] == 'healthy'
        assert 'timestamp' in data
        assert data['cache']['entries'] == 0

    def test_health_reports_cached_entries(self, client, cache):
        client.get('/api/posts')

        data = client.get('/health').get_json()

        assert data['cache']['entries'] == 2
        assert data['cache']['last_refreshed_at'] is not None


class TestListPosts:

    def test_returns_public_fields_newest_first(self, client, use_cache, cache_file):
        use_cache(PostsCache(sources=[FakeFeedSource("Blogger", create_posts(3))], cache_file=cache_file))

        response = client.get('/api/posts')

        assert response.status_code == 200
        assert response.headers['Cache-Control'] == 'no-store, no-cache, must-revalidate'
        data = response.get_json()
        assert data['success'] is True
        assert data['count'] == 3
        assert data['cached'] is True
        assert [p['link'] for p in data['posts']] == [
            "https://example.com/post/2",
            "https://example.com/post/1",
            "https://example.com/post/0",
        ]
        assert set(data['posts'][0]) == {'title', 'link', 'published', 'summary', 'source'}

    def test_refresh_param_forces_fetch(self, client, cache, sources):
        client.get('/api/posts')
        response = client.get('/api/posts?refresh=true')

        assert response.get_json()['cached'] is False
        assert sources[0].calls == 2

    def test_all_sources_down_returns_503(self, client, failing_cache):
        response = client.get('/api/posts')

        assert response.status_code == 503
        data = response.get_json()
        assert data['success'] is False
        assert data['error'] == 'No content available'
        assert 'unavailable' in data['message']

    def test_unexpected_error_returns_500(self, client, use_cache):
        broken = MagicMock()
        broken.get_posts.side_effect = RuntimeError("disk on fire")
        use_cache(broken)

        response = client.get('/api/posts')

        assert response.status_code == 500
        assert response.get_json()['message'] == 'disk on fire'


class TestSearch:

    def test_ranked_results(self, client, cache):
        response = client.post('/api/search', json={'query': 'python caching'})

        assert response.status_code == 200
        data = response.get_json()
        assert data['query'] == 'python caching'
        assert data['count'] == 1
        result = data['results'][0]
        assert result['title'] == 'Python Caching Tips'
        assert result['source'] == 'Medium'
        assert result['score'] > 0
        assert 'content' not in result

    def test_query_is_trimmed(self, client, cache):
        data = client.post('/api/search', json={'query': '  gardening  '}).get_json()

        assert data['query'] == 'gardening'
        assert data['results'][0]['title'] == 'Gardening'

    def test_no_matches(self, client, cache):
        data = client.post('/api/search', json={'query': 'kubernetes'}).get_json()

        assert data['success'] is True
        assert data['results'] == []

    @pytest.mark.parametrize("payload", [{}, {'query': ''}, {'query': 42}, {'query': None}])
    def test_missing_or_non_string_query(self, client, cache, payload):
        response = client.post('/api/search', json=payload)

        assert response.status_code == 400
        assert response.get_json()['success'] is False

    def test_blank_query(self, client, cache):
        response = client.post('/api/search', json={'query': '   '})

        assert response.status_code == 400
        assert response.get_json()['error'] == 'Query cannot be empty'

    def test_query_too_long(self, client, cache):
        response = client.post('/api/search', json={'query': 'a' * 501})

        assert response.status_code == 400

    def test_query_at_max_length_accepted(self, client, cache):
        response = client.post('/api/search', json={'query': 'a' * 500})

        assert response.status_code == 200

    def test_non_json_body(self, client, cache):
        response = client.post('/api/search', data='query=python')

        assert response.status_code == 400

    def test_empty_corpus(self, client, use_cache):
        empty = MagicMock()
        empty.get_posts.return_value = ()
        use_cache(empty)

        data = client.post('/api/search', json={'query': 'python'}).get_json()

        assert data['results'] == []
        assert data['message'] == 'No posts available to search'

    def test_all_sources_down_returns_503(self, client, failing_cache):
        response = client.post('/api/search', json={'query': 'python'})

        assert response.status_code == 503

    def test_search_does_not_modify_cache(self, client, cache):
        before = client.get('/api/posts').get_json()['posts']
        client.post('/api/search', json={'query': 'python'})

        assert client.get('/api/posts').get_json()['posts'] == before


class TestRevalidate:

    def test_post_refetches(self, client, cache, sources):
        client.get('/api/posts')

        response = client.post('/api/revalidate')

        assert response.status_code == 200
        data = response.get_json()
        assert data['success'] is True
        assert data['postsCount'] == 2
        assert sources[0].calls == 2

    def test_post_with_sources_down(self, client, failing_cache):
        response = client.post('/api/revalidate')

        assert response.status_code == 503

    def test_get_describes_endpoint(self, client):
        response = client.get('/api/revalidate')

        assert response.status_code == 200
        assert 'POST' in response.get_json()['message']
