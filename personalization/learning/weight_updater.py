"""
Weight updater: turn decisions and reason adjustments into atomic weight upserts.

Every delta goes through the store's upsert_delta, which owns the
read-modify-write for one (user_id, feature_key). Failures are collected per
key so one bad write never blocks the rest of the batch.
"""

import logging
from datetime import datetime
from typing import Iterable, Optional, Protocol

from ..errors import StorageError
from ..models.config import PersonalizationConfig, resolve_config
from ..models.decisions import ConfidenceLevel, DecisionAction, WeightAdjustment
from ..models.signals import ArticleSignals, Feature, parse_feature_key
from ..models.weights import (
    AdjustmentFailure,
    MAX_WEIGHT,
    SignalWeight,
    WeightUpdate,
    WeightUpdateResult,
)
from ..utils.time import utc_now
from .confidence import apply_confidence_to_weight, infer_confidence

logger = logging.getLogger(__name__)


class WeightWriter(Protocol):
    """The single write primitive the updater needs from a weight store."""

    def upsert_delta(
        self,
        user_id: str,
        feature: Feature,
        delta: float,
        now: datetime,
        confidence: ConfidenceLevel = ConfidenceLevel.MEDIUM,
        count_decision: bool = True,
        max_weight: float = MAX_WEIGHT,
    ) -> SignalWeight:
        """
        Atomically add delta to the weight (creating it if absent), clamp it to
        +-max_weight, bump decision_count when count_decision, and stamp
        last_decision_at.
        """
        ...


def decision_delta(
    action: DecisionAction,
    confidence: ConfidenceLevel,
    config: Optional[PersonalizationConfig] = None,
) -> float:
    """Base delta for the action's polarity, scaled by confidence."""
    config = resolve_config(config)
    return apply_confidence_to_weight(config.delta_for(DecisionAction(action)), confidence)


def apply_weight_adjustments(
    store: WeightWriter,
    user_id: str,
    adjustments: Iterable[WeightAdjustment],
    now: Optional[datetime] = None,
    confidence: ConfidenceLevel = ConfidenceLevel.MEDIUM,
    count_decision: bool = True,
    config: Optional[PersonalizationConfig] = None,
) -> WeightUpdateResult:
    """
    Apply adjustments one by one through the store's atomic upsert.

    Stored weights are clamped to +-config.max_weight. Malformed keys and
    StorageErrors are logged and reported as failures; remaining adjustments
    still run.
    """
    config = resolve_config(config)
    now = now or utc_now()
    result = WeightUpdateResult()
    for adj in adjustments:
        try:
            feature = parse_feature_key(adj.feature_key)
        except ValueError as e:
            logger.warning("Skipping malformed feature key %r: %s", adj.feature_key, e)
            result.failures.append(
                AdjustmentFailure(feature_key=adj.feature_key, delta=adj.delta, error=str(e))
            )
            continue
        try:
            updated = store.upsert_delta(
                user_id,
                feature,
                adj.delta,
                now,
                confidence=confidence,
                count_decision=count_decision,
                max_weight=config.max_weight,
            )
        except StorageError as e:
            logger.warning(
                "Weight update failed user=%s key=%s delta=%.2f: %s",
                user_id, adj.feature_key, adj.delta, e,
            )
            result.failures.append(
                AdjustmentFailure(feature_key=adj.feature_key, delta=adj.delta, error=str(e))
            )
            continue
        result.updates.append(
            WeightUpdate(
                feature_key=adj.feature_key,
                delta=adj.delta,
                weight_after=updated.weight,
                decision_count=updated.decision_count,
            )
        )
    return result


def update_weights_from_decision(
    store: WeightWriter,
    user_id: str,
    article: ArticleSignals,
    action: DecisionAction,
    confidence: Optional[ConfidenceLevel] = None,
    now: Optional[datetime] = None,
    config: Optional[PersonalizationConfig] = None,
) -> WeightUpdateResult:
    """
    Apply a decision to every distinct signal key on the article.

    When confidence is not given it is inferred as for a decision without an
    ignore reason or timing hint.
    """
    config = resolve_config(config)
    action = DecisionAction(action)
    if confidence is None:
        confidence = infer_confidence(action, has_ignore_reason=False, config=config)
    delta = decision_delta(action, confidence, config)
    adjustments = [
        WeightAdjustment(feature_key=key, delta=delta) for _, key in article.iter_keys()
    ]
    result = apply_weight_adjustments(
        store, user_id, adjustments, now=now, confidence=confidence, config=config
    )
    logger.info(
        "Applied %s decision on article=%s user=%s confidence=%s: %d updated, %d failed",
        action.value, article.article_id, user_id, confidence.value,
        len(result.updates), len(result.failures),
    )
    return result
