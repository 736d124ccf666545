"""Document store interface for the news collection."""

from abc import ABC, abstractmethod
from typing import Any, Optional


class StoreConfigurationError(Exception):
    """The configured store backend cannot be opened."""


class DuplicateArticleError(Exception):
    """An article with the same url is already stored."""

    def __init__(self, url: str):
        super().__init__(f"Article already stored: {url!r}")
        self.url = url


class NewsStore(ABC):
    """Insert-only access to the shared news collection, keyed on url."""

    @abstractmethod
    def find_by_url(self, url: str) -> Optional[dict[str, Any]]:
        """Return at most one stored article whose url equals the given one."""

    @abstractmethod
    def insert(self, document: dict[str, Any]) -> str:
        """Insert a new article document and return its id.

        Raises DuplicateArticleError when the backend already holds the url.
        """

    @abstractmethod
    def list_recent(self, days: int, limit: int = 100) -> list[dict[str, Any]]:
        """Published articles from the last `days` days, newest first."""

    @abstractmethod
    def log_source_health(
        self, source_name: str, status: str, error_message: Optional[str] = None
    ) -> None:
        """Record the outcome of fetching one source."""

    def close(self) -> None:
        pass
