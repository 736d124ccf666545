"""Base collector interface, feed source and Article dataclasses."""

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Optional

from ..config import CREATED_BY


@dataclass(frozen=True)
class FeedSource:
    """A configured RSS/Atom endpoint plus its topic metadata."""

    name: str
    url: str
    category: str
    tags: tuple[str, ...] = ()
    enabled: bool = True

    @classmethod
    def from_dict(cls, data: dict) -> "FeedSource":
        return cls(
            name=data["name"],
            url=data["url"],
            category=data["category"],
            tags=tuple(data.get("tags", ())),
            enabled=data.get("enabled", True),
        )


@dataclass
class Article:
    """A normalized news article, as stored in the news collection."""

    title: str
    description: str
    category: str
    source: str
    url: str
    published_at: datetime
    created_at: datetime
    image_url: Optional[str] = None
    tags: list[str] = field(default_factory=list)
    status: str = "published"
    created_by: str = CREATED_BY

    def __hash__(self):
        return hash(self.url)

    def __eq__(self, other):
        if not isinstance(other, Article):
            return False
        return self.url == other.url

    def to_document(self) -> dict[str, Any]:
        """Field set read by the public news page and the admin moderation page."""
        return {
            "title": self.title,
            "description": self.description,
            "category": self.category,
            "source": self.source,
            "url": self.url,
            "publishedAt": self.published_at,
            "imageUrl": self.image_url,
            "tags": list(self.tags),
            "status": self.status,
            "createdAt": self.created_at,
            "createdBy": self.created_by,
        }


class Collector(ABC):
    """Abstract base class for content collectors."""

    @property
    @abstractmethod
    def name(self) -> str:
        """Return the collector/source name."""
        pass

    @abstractmethod
    async def collect(self) -> list[Article]:
        """Collect candidate articles from the source."""
        pass

    async def close(self) -> None:
        """Release any held resources."""
        pass
