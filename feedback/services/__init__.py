"""
Services: store adapters and the article signal provider.

The Firestore adapters live in firestore_store and are imported only when
WEIGHT_STORE=firebase (see feedback.state).
"""

from .article_provider import ArticleSignalProvider, InMemoryArticleProvider
from .decision_store import (
    DecisionStore,
    IgnoreReasonLog,
    InMemoryDecisionStore,
    InMemoryIgnoreReasonLog,
    JsonDecisionStore,
    JsonIgnoreReasonLog,
)
from .weight_store import InMemoryWeightStore, JsonWeightStore, WeightStore, apply_delta

__all__ = [
    "ArticleSignalProvider",
    "DecisionStore",
    "IgnoreReasonLog",
    "InMemoryArticleProvider",
    "InMemoryDecisionStore",
    "InMemoryIgnoreReasonLog",
    "InMemoryWeightStore",
    "JsonDecisionStore",
    "JsonIgnoreReasonLog",
    "JsonWeightStore",
    "WeightStore",
    "apply_delta",
]
