"""
Readable Text Extraction

Converts feed HTML (Blogger content, Medium content:encoded) into plain text
that keeps paragraph and list structure, bounded to MAX_CONTENT_LENGTH.
"""

import logging
import re

from bs4 import BeautifulSoup, NavigableString

from blog_aggregator.config import MAX_CONTENT_LENGTH

logger = logging.getLogger(__name__)

# Elements that never carry post content
NON_CONTENT_TAGS = [
    'script', 'style', 'nav', 'header', 'footer', 'aside',
    'iframe', 'noscript', 'svg', 'embed', 'object',
]

# Content containers (tried in order, first non-empty match wins)
CONTENT_SELECTORS = [
    'article',
    '.post-content',
    '.entry-content',
    'main',
    'body',
]

HEADING_TAGS = ['h1', 'h2', 'h3', 'h4', 'h5', 'h6']

# Paragraph cut must land in the last 20% of the budget
MIN_PARAGRAPH_POSITION = 0.8

ELLIPSIS = '...'

# Entities the parser leaves behind (double-encoded feeds)
ENTITY_REPLACEMENTS = [
    ('&nbsp;', ' '),
    ('&lt;', '<'),
    ('&gt;', '>'),
    ('&quot;', '"'),
    ('&#39;', "'"),
    ('&apos;', "'"),
    ('&hellip;', '...'),
    ('&mdash;', '—'),
    ('&ndash;', '–'),
    ('&ldquo;', '"'),
    ('&rdquo;', '"'),
    ('&lsquo;', "'"),
    ('&rsquo;', "'"),
    ('&amp;', '&'),  # last, so "&amp;lt;" stays "&lt;"
]

INVISIBLE_CHARS = re.compile(r'[\u200b-\u200d\u2060\ufeff\u00ad]')

# Script/style blocks, closed or running to the end of the text
SCRIPT_BLOCK = re.compile(r'<(script|style)\b[^>]*>.*?(</\1\s*>|$)', re.IGNORECASE | re.DOTALL)


def extract_readable_text(html: str) -> str:
    """
    Extract readable text from an HTML fragment or document.

    Never raises: if structured extraction fails the tags are stripped
    with regexes instead.

    Args:
        html: Raw HTML from a feed entry

    Returns:
        Cleaned text, at most MAX_CONTENT_LENGTH characters plus an ellipsis
    """
    if not html:
        return ''

    try:
        text = _extract_structured(html)
    except Exception as e:
        logger.error(f"Error extracting readable text: {e}")
        return _fallback_strip(html)

    return _truncate(_clean_text(text), MAX_CONTENT_LENGTH)


def _extract_structured(html: str) -> str:
    soup = BeautifulSoup(html, 'html.parser')

    # Remove unwanted elements
    for tag in soup(NON_CONTENT_TAGS):
        tag.decompose()

    container = soup
    for selector in CONTENT_SELECTORS:
        element = soup.select_one(selector)
        if element and element.get_text(strip=True):
            container = element
            break

    for tag in container.find_all('br'):
        _replace(tag, '\n')

    # Innermost elements first, so nested blocks are flattened before their parents
    for tag in reversed(container.find_all(['pre', 'code'])):
        _replace(tag, f"\n{tag.get_text()}\n")

    for tag in reversed(container.find_all('li')):
        _replace(tag, f"• {tag.get_text().strip()}\n")

    for tag in reversed(container.find_all(['ul', 'ol'])):
        _replace(tag, f"\n{tag.get_text()}\n")

    for tag in reversed(container.find_all(HEADING_TAGS)):
        _replace(tag, f"\n\n{tag.get_text().strip()}\n\n")

    for tag in reversed(container.find_all(['p', 'div'])):
        text = tag.get_text()
        if text.strip():
            _replace(tag, f"{text}\n\n")
        else:
            tag.decompose()

    return container.get_text()


def _replace(tag, text: str):
    if tag.parent is not None:
        tag.replace_with(NavigableString(text))


def _decode_entities(text: str) -> str:
    for entity, replacement in ENTITY_REPLACEMENTS:
        text = text.replace(entity, replacement)
    return text


def _clean_text(text: str) -> str:
    """
    Normalize whitespace while keeping paragraph breaks.
    """
    text = text.replace('\r\n', '\n').replace('\r', '\n')
    text = INVISIBLE_CHARS.sub('', text)
    text = _decode_entities(text)
    # Escaped markup decodes to literal tags
    text = SCRIPT_BLOCK.sub(" ", text)
    text = text.replace('\xa0', ' ')

    text = re.sub(r'[ \t]+', ' ', text)
    text = re.sub(r' *\n *', '\n', text)
    text = re.sub(r'\n{3,}', '\n\n', text)

    return text.strip()


def _truncate(text: str, max_length: int) -> str:
    """
    Truncate text to max length, preferring a paragraph boundary.
    """
    if len(text) <= max_length:
        return text

    truncated = text[:max_length]
    last_paragraph = truncated.rfind('\n\n')

    if last_paragraph > max_length * MIN_PARAGRAPH_POSITION:
        return truncated[:last_paragraph].strip() + ELLIPSIS

    return truncated.strip() + ELLIPSIS


def _fallback_strip(html: str) -> str:
    """
    Regex-only tag stripping for HTML the parser could not handle.
    """
    try:
        text = SCRIPT_BLOCK.sub(" ", html)
        text = re.sub(r'<p[^>]*>', '\n\n', text, flags=re.IGNORECASE)
        text = re.sub(r'<br\s*/?>', '\n', text, flags=re.IGNORECASE)
        text = re.sub(r'<div[^>]*>', '\n', text, flags=re.IGNORECASE)
        text = re.sub(r'<[^>]*>', ' ', text)
        text = re.sub(r'<[^>]*$', ' ', text)
        return _truncate(_clean_text(text), MAX_CONTENT_LENGTH)
    except Exception as e:
        logger.error(f"Fallback text extraction failed: {e}")
        return ''
