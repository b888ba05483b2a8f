"""
Flask Routes for Blog Aggregator

Includes:
- Health check endpoint
- Cached post listing (with optional forced refresh)
- Keyword search over the cached posts
- Cache revalidation after publishing
"""

import logging
import time
from datetime import datetime, timezone

from flask import Blueprint, request, jsonify

from blog_aggregator.config import SEARCH_QUERY_MAX_LENGTH, SEARCH_RESULTS_LIMIT
from blog_aggregator.errors import AllSourcesUnavailableError
from blog_aggregator.services.posts_cache import get_cache
from blog_aggregator.services.search import search

logger = logging.getLogger(__name__)

# Create blueprint
main = Blueprint('main', __name__)

# Server start, for uptime reporting
START_TIME = time.time()


def _timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def _unavailable(e: AllSourcesUnavailableError):
    return jsonify({
        'success': False,
        'error': 'No content available',
        'message': str(e),
    }), 503


@main.route('/health')
def health_check():
    """Health check endpoint."""
    return {
        'status': 'healthy',
        'uptime': time.time() - START_TIME,
        'timestamp': _timestamp(),
        'cache': get_cache().stats(),
    }


@main.route('/api/posts')
def list_posts():
    """
    List aggregated posts, newest first.

    Query params:
        refresh=true: bypass the cache and fetch the feeds now
    """
    force_refresh = request.args.get('refresh', '').lower() == 'true'
    logger.info(f"Fetching posts{' (force refresh)' if force_refresh else ' (cached)'}")

    try:
        posts = get_cache().get_posts(force_refresh)
    except AllSourcesUnavailableError as e:
        logger.error(f"Error in /api/posts: {e}")
        return _unavailable(e)
    except Exception as e:
        logger.error(f"Error in /api/posts: {e}", exc_info=True)
        return jsonify({'success': False, 'error': 'Failed to fetch posts', 'message': str(e)}), 500

    clean_posts = [post.to_public_dict() for post in posts]
    response = jsonify({
        'success': True,
        'posts': clean_posts,
        'count': len(clean_posts),
        'cached': not force_refresh,
        'timestamp': _timestamp(),
    })
    response.headers['Cache-Control'] = 'no-store, no-cache, must-revalidate'
    return response


@main.route('/api/search', methods=['POST'])
def search_posts():
    """
    Search cached posts.

    Body: {"query": "..."}
    """
    payload = request.get_json(silent=True) or {}
    raw_query = payload.get('query')

    if not raw_query or not isinstance(raw_query, str):
        return jsonify({'success': False, 'error': 'Query parameter is required and must be a string'}), 400

    query = raw_query.strip()
    if not query:
        return jsonify({'success': False, 'error': 'Query cannot be empty'}), 400

    if len(query) > SEARCH_QUERY_MAX_LENGTH:
        return jsonify({
            'success': False,
            'error': f'Query must be no more than {SEARCH_QUERY_MAX_LENGTH} characters',
        }), 400

    logger.info(f"Search request for: \"{query}\"")

    try:
        posts = get_cache().get_posts()
    except AllSourcesUnavailableError as e:
        logger.error(f"Error in /api/search: {e}")
        return _unavailable(e)
    except Exception as e:
        logger.error(f"Error in /api/search: {e}", exc_info=True)
        return jsonify({'success': False, 'error': 'Search failed', 'message': str(e)}), 500

    if not posts:
        return jsonify({
            'success': True,
            'results': [],
            'count': 0,
            'query': query,
            'message': 'No posts available to search',
        })

    results = [result.to_public_dict() for result in search(query, posts, SEARCH_RESULTS_LIMIT)]
    logger.info(f"Search found {len(results)} results for \"{query}\"")

    return jsonify({
        'success': True,
        'results': results,
        'count': len(results),
        'query': query,
        'timestamp': _timestamp(),
    })


@main.route('/api/revalidate', methods=['POST'])
def revalidate():
    """Clear the cache and fetch fresh posts (call after publishing)."""
    logger.info("Manual cache revalidation triggered")
    cache = get_cache()
    cache.clear()

    try:
        posts = cache.get_posts(force_refresh=True)
    except AllSourcesUnavailableError as e:
        logger.error(f"Revalidation failed: {e}")
        return _unavailable(e)
    except Exception as e:
        logger.error(f"Revalidation failed: {e}", exc_info=True)
        return jsonify({'success': False, 'error': 'Failed to revalidate cache', 'message': str(e)}), 500

    logger.info(f"Fetched {len(posts)} fresh posts")
    response = jsonify({
        'success': True,
        'message': 'Cache revalidated successfully',
        'postsCount': len(posts),
        'timestamp': _timestamp(),
    })
    response.headers['Cache-Control'] = 'no-store'
    return response


@main.route('/api/revalidate', methods=['GET'])
def revalidate_info():
    return jsonify({
        'success': True,
        'message': 'Revalidation endpoint is available. Send a POST request to clear cache.',
        'timestamp': _timestamp(),
    })
