"""
Root pytest configuration for Blog Aggregator tests

Adds project root to Python path and provides common fixtures
"""
import sys
import os

import pytest
from dotenv import load_dotenv

# Add project root to Python path so tests can import blog_aggregator
project_root = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
sys.path.insert(0, project_root)

# Load environment variables
load_dotenv()


@pytest.fixture
def cache_file(tmp_path):
    """
    Path for a throwaway JSON snapshot.

    The file does not exist until a test (or the cache) writes it.
    """
    return tmp_path / "data" / "posts.json"
