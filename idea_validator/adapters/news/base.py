from abc import ABC, abstractmethod

from idea_validator.schemas.news import NewsArticle


class AbstractNewsClient(ABC):
    """Interface for news-search clients."""

    @abstractmethod
    async def search(self, keywords: list[str]) -> list[NewsArticle]:
        """Return recent articles matching any of ``keywords``.

        Remote failures never raise; they yield a single placeholder article
        so the analysis can still proceed.

        Raises:
            ValidationAppError: If ``keywords`` is not a non-empty list.
        """
        ...
