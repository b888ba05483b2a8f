"""
Data model for aggregated blog posts

Post is the canonical content unit shared by every pipeline stage.
SearchResult only exists on ranked search output and is never persisted.
"""
import enum
from dataclasses import dataclass, fields, replace
from datetime import datetime, timezone
from typing import Optional


class PostSource(enum.Enum):
    """Feed a post was ingested from"""
    MEDIUM = "Medium"
    BLOGSPOT = "Blogspot"


def parse_timestamp(value) -> datetime:
    """Parse an ISO-8601 string (or datetime) into an aware UTC datetime."""
    if isinstance(value, datetime):
        dt = value
    else:
        text = str(value).strip()
        if text.endswith('Z'):
            text = text[:-1] + '+00:00'
        dt = datetime.fromisoformat(text)
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    return dt


@dataclass(frozen=True)
class Post:
    """
    A blog post after normalization.

    Frozen: cached posts are shared between requests, so changes go
    through copy().
    """
    title: str
    link: str
    published: datetime
    content: str = ''
    source: PostSource = PostSource.BLOGSPOT
    summary: str = ''
    embedding: Optional[list[float]] = None

    def __post_init__(self):
        if not self.title or not self.title.strip():
            object.__setattr__(self, 'title', 'Untitled')

    def to_dict(self) -> dict:
        """Snapshot representation (JSON-safe)."""
        return {
            'title': self.title,
            'link': self.link,
            'published': self.published.isoformat(),
            'content': self.content,
            'summary': self.summary,
            'source': self.source.value,
            'embedding': self.embedding,
        }

    def to_public_dict(self) -> dict:
        """Client-facing representation without content or embedding."""
        return {
            'title': self.title,
            'link': self.link,
            'published': self.published.isoformat(),
            'summary': self.summary,
            'source': self.source.value,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Post':
        return cls(
            title=data.get('title') or 'Untitled',
            link=data.get('link') or '',
            published=parse_timestamp(data['published']) if data.get('published') else datetime.now(timezone.utc),
            content=data.get('content') or '',
            source=PostSource(data.get('source', PostSource.BLOGSPOT.value)),
            summary=data.get('summary') or '',
            embedding=data.get('embedding'),
        )

    def copy(self, **changes) -> 'Post':
        return replace(self, **changes)


@dataclass(frozen=True)
class SearchResult(Post):
    """A post with its ranking score for one query."""
    score: float = 0.0

    @classmethod
    def from_post(cls, post: Post, score: float) -> 'SearchResult':
        values = {f.name: getattr(post, f.name) for f in fields(Post)}
        return cls(score=score, **values)

    def to_public_dict(self) -> dict:
        data = super().to_public_dict()
        data['score'] = self.score
        return data
