"""
Article signal provider.

Supplies the upstream-extracted signals for an article: base_score, per-type
feature keys and optional intent. Content analysis itself happens elsewhere.
"""

import json
import logging
from pathlib import Path
from typing import Dict, Iterable, List, Optional, Protocol, Union

from personalization.errors import StorageError
from personalization.models import ArticleSignals, ensure_articles

logger = logging.getLogger(__name__)


class ArticleSignalProvider(Protocol):
    """Protocol for article signal lookup."""

    def get_article(self, article_id: str) -> Optional[ArticleSignals]:
        """Return the article's signals, or None if unknown."""
        ...


class InMemoryArticleProvider:
    """Article provider over a fixed set of articles (tests, harness, JSON dumps)."""

    def __init__(self, articles: Optional[Iterable[Union[ArticleSignals, dict]]] = None):
        self._by_id: Dict[str, ArticleSignals] = {}
        self.add(articles or [])

    def add(self, articles: Iterable[Union[ArticleSignals, dict]]) -> None:
        for a in ensure_articles(list(articles)):
            self._by_id[a.article_id] = a

    def get_article(self, article_id: str) -> Optional[ArticleSignals]:
        return self._by_id.get(article_id)

    def list_articles(self) -> List[ArticleSignals]:
        return list(self._by_id.values())

    @classmethod
    def from_json(cls, path: Union[Path, str]) -> "InMemoryArticleProvider":
        """Load a list of articles, or {"articles": [...]}, from a JSON file."""
        path = Path(path)
        try:
            with open(path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Could not read articles from {path}: {e}") from e
        items = data.get("articles", []) if isinstance(data, dict) else data
        provider = cls(items)
        logger.info("Loaded %d articles from %s", len(provider._by_id), path)
        return provider
