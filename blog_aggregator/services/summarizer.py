"""
Extractive Summarizer

Builds a short summary from the first few real sentences of a post.
"""

import logging
import re

from blog_aggregator.config import (
    MAX_SUMMARY_LENGTH,
    MIN_SENTENCE_LENGTH,
    SUMMARY_MAX_SENTENCES,
)

logger = logging.getLogger(__name__)

PLACEHOLDER_SUMMARY = 'Click to read more...'

# Lead-ins that feeds prepend to the actual post text
BOILERPLATE_PREFIXES = [
    'Continue reading on Medium',
    'Read more',
    'Click here',
    'Source:',
    'Originally published',
]

SENTENCE_SPLIT = re.compile(r'(?<=[.!?])\s+')
TERMINAL_PUNCTUATION = re.compile(r'[.!?]$')


def generate_summary(content: str) -> str:
    """
    Generate a summary from normalized post text.

    Args:
        content: Plain text produced by extract_readable_text

    Returns:
        Up to SUMMARY_MAX_SENTENCES sentences, at most MAX_SUMMARY_LENGTH
        characters plus an ellipsis
    """
    if not content or not content.strip():
        return PLACEHOLDER_SUMMARY

    cleaned = _strip_boilerplate(content.strip())

    sentences = [' '.join(s.split()) for s in SENTENCE_SPLIT.split(cleaned)]
    sentences = [s for s in sentences if len(s) >= MIN_SENTENCE_LENGTH]

    if not sentences:
        return _hard_cut(cleaned)

    summary = ''
    for sentence in sentences[:SUMMARY_MAX_SENTENCES]:
        candidate = f"{summary} {sentence}".strip()
        if len(candidate) > MAX_SUMMARY_LENGTH:
            break
        summary = candidate

    if not summary:
        return _hard_cut(cleaned)

    if not TERMINAL_PUNCTUATION.search(summary):
        summary += '...'

    return summary


def _strip_boilerplate(text: str) -> str:
    for prefix in BOILERPLATE_PREFIXES:
        if text.lower().startswith(prefix.lower()):
            text = text[len(prefix):].strip()
    return text


def _hard_cut(text: str) -> str:
    cut = ' '.join(text[:MAX_SUMMARY_LENGTH].split())
    if not cut:
        return PLACEHOLDER_SUMMARY
    return f"{cut}..."
