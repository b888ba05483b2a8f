"""
Configuration for Blog Aggregator

All values come from environment variables (optionally loaded from .env)
with defaults suitable for local development.
"""
import os

from dotenv import load_dotenv

# Load environment variables
load_dotenv()

# Cache
CACHE_DURATION_MINUTES = int(os.environ.get('CACHE_DURATION_MINUTES', '30'))
CACHE_FILE = os.environ.get('CACHE_FILE', 'data/posts.json')
JSON_INDENT_SPACES = 2

# Upstream feeds
BLOGGER_FEED_URL = os.environ.get(
    'BLOGGER_FEED_URL',
    'https://rudra-tiwari-blogs.blogspot.com/feeds/posts/default'
)
BLOGGER_MAX_POSTS = int(os.environ.get('BLOGGER_MAX_POSTS', '10'))
MEDIUM_USERNAME = os.environ.get('MEDIUM_USERNAME', 'rudratech')
MEDIUM_FEED_URL_TEMPLATE = 'https://medium.com/feed/@{username}'

# HTTP
USER_AGENT = os.environ.get('HTTP_USER_AGENT', 'Mozilla/5.0 (compatible; BlogAggregator/3.0)')
HTTP_TIMEOUT = float(os.environ.get('HTTP_TIMEOUT', '10'))  # seconds
HTTP_RETRY_ATTEMPTS = int(os.environ.get('HTTP_RETRY_ATTEMPTS', '3'))
HTTP_RETRY_BASE_DELAY = float(os.environ.get('HTTP_RETRY_BASE_DELAY', '1.0'))  # seconds
HTTP_RETRY_MULTIPLIER = float(os.environ.get('HTTP_RETRY_MULTIPLIER', '2'))

# Content processing (characters)
MAX_CONTENT_LENGTH = 3000
MAX_SUMMARY_LENGTH = 300
MIN_SENTENCE_LENGTH = 20
SUMMARY_MAX_SENTENCES = 3
CONTENT_SUBSTRING_LENGTH = 500

# Search
SEARCH_RESULTS_LIMIT = 10
SEARCH_MIN_SCORE = 0.3  # cosine similarity floor, embedding path only
SEARCH_TITLE_BONUS = 5
SEARCH_SUMMARY_WEIGHT = 2
SEARCH_EXACT_MATCH_BONUS_MULTIPLIER = 2
MIN_SEARCH_TERM_LENGTH = 2  # admits "AI", "ML", "JS"
SEARCH_QUERY_MAX_LENGTH = 500
