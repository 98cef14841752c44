"""
Personalization engine: decaying per-user feature weights and explainable re-ranking.

Single entry point for the algorithm package:
- models/: ArticleSignals, SignalWeight, ScoredArticle, PersonalizationConfig
- learning/: decay, confidence, ignore reasons, weight updater
- stages/: scoring, blind spots, serendipity, actions, orchestrator

Pure: no I/O. Stores are passed in by the caller (see the feedback package).
"""

from .errors import (
    NotFoundError,
    PartialFailure,
    PersonalizationError,
    StorageError,
    ValidationError,
)
from .learning import (
    calculate_decayed_weight,
    calculate_ignore_weight_adjustments,
    infer_confidence,
    update_weights_from_decision,
)
from .models import (
    DEFAULT_CONFIG,
    ArticleSignals,
    BlindSpotAlert,
    PersonalizationConfig,
    RankingResult,
    ScoredArticle,
    SignalWeight,
    WeightUpdateResult,
)
from .stages import apply_serendipity, find_blind_spots, rank_articles, score_articles

__all__ = [
    "ArticleSignals",
    "BlindSpotAlert",
    "DEFAULT_CONFIG",
    "NotFoundError",
    "PartialFailure",
    "PersonalizationConfig",
    "PersonalizationError",
    "RankingResult",
    "ScoredArticle",
    "SignalWeight",
    "StorageError",
    "ValidationError",
    "WeightUpdateResult",
    "apply_serendipity",
    "calculate_decayed_weight",
    "calculate_ignore_weight_adjustments",
    "find_blind_spots",
    "infer_confidence",
    "rank_articles",
    "score_articles",
    "update_weights_from_decision",
]
