#!/usr/bin/env python
"""
Post Refresh Job

Run on a schedule (or after publishing) to:
1. Fetch the Blogger and Medium feeds
2. Deduplicate and summarize posts
3. Write the JSON snapshot served by the web app

Usage:
    python scripts/refresh_posts.py

Exit codes:
    0 - Success
    1 - No source could be fetched
"""

import logging
import os
import sys
import time
from collections import Counter

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from dotenv import load_dotenv
load_dotenv()

from blog_aggregator.errors import AllSourcesUnavailableError
from blog_aggregator.services.posts_cache import get_cache

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.StreamHandler(sys.stdout)
    ]
)
logger = logging.getLogger('refresh_posts')


def _log_progress(msg: str, start_time: float):
    """Log with elapsed time, flush immediately."""
    full_msg = f"[{time.time() - start_time:.1f}s] REFRESH: {msg}"
    logger.info(full_msg)
    print(full_msg, file=sys.stdout, flush=True)


def main():
    """Main entry point for the refresh job."""
    job_start = time.time()
    logger.info("=" * 60)
    logger.info("POST REFRESH JOB STARTING")
    logger.info("=" * 60)

    cache = get_cache()

    try:
        _log_progress("Fetching feeds...", job_start)
        posts = cache.get_posts(force_refresh=True)
    except AllSourcesUnavailableError as e:
        logger.error(f"JOB FAILED: {e}")
        for error in e.errors:
            logger.error(f"  {error}")
        return 1

    by_source = Counter(post.source.value for post in posts)
    stats = cache.stats()

    logger.info("=" * 60)
    logger.info("JOB SUMMARY")
    logger.info("=" * 60)
    logger.info(f"Total Posts:       {len(posts)}")
    for source, count in sorted(by_source.items()):
        logger.info(f"  {source + ':':<16} {count}")
    logger.info(f"Snapshot:          {stats['cache_file']}")
    logger.info(f"Duration:          {time.time() - job_start:.1f}s")
    logger.info("=" * 60)
    logger.info("JOB COMPLETED SUCCESSFULLY")
    logger.info("=" * 60)
    return 0


if __name__ == '__main__':
    sys.exit(main())
