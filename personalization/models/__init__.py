"""Data models for the personalization engine."""

from .config import DEFAULT_CONFIG, PersonalizationConfig, resolve_config
from .decisions import (
    ConfidenceLevel,
    Decision,
    DecisionAction,
    IgnoreReasonRecord,
    IgnoreReasonType,
    WeightAdjustment,
)
from .scoring import BlindSpotAlert, MatchedWeight, RankingResult, ScoredArticle
from .signals import (
    SIGNAL_MULTIPLIERS,
    ArticleSignals,
    Feature,
    SignalType,
    ensure_articles,
    normalize_feature_key,
    parse_feature_key,
)
from .weights import (
    AdjustmentFailure,
    MAX_WEIGHT,
    SignalWeight,
    WeightState,
    WeightUpdate,
    WeightUpdateResult,
    clamp_weight,
)

__all__ = [
    "DEFAULT_CONFIG",
    "MAX_WEIGHT",
    "AdjustmentFailure",
    "ArticleSignals",
    "BlindSpotAlert",
    "ConfidenceLevel",
    "Decision",
    "DecisionAction",
    "Feature",
    "IgnoreReasonRecord",
    "IgnoreReasonType",
    "MatchedWeight",
    "PersonalizationConfig",
    "RankingResult",
    "SIGNAL_MULTIPLIERS",
    "ScoredArticle",
    "SignalType",
    "SignalWeight",
    "WeightAdjustment",
    "WeightState",
    "WeightUpdate",
    "WeightUpdateResult",
    "clamp_weight",
    "ensure_articles",
    "normalize_feature_key",
    "parse_feature_key",
    "resolve_config",
]
