"""
Preference controls: let a user inspect and steer their learned weights.

Feature names arrive from people, so they are normalized before use. Manual
adjustments go through the same atomic upsert as decisions but do not count
as a decision.
"""

import logging
from datetime import datetime
from typing import Dict, List, Optional, Union

from pydantic import BaseModel, Field

from personalization.errors import ValidationError
from personalization.learning import apply_decay_to_weights, format_weight_for_display
from personalization.models import (
    ConfidenceLevel,
    Feature,
    PersonalizationConfig,
    SignalType,
    SignalWeight,
    WeightState,
    normalize_feature_key,
    resolve_config,
)
from personalization.utils import utc_now

from .logging_config import user_context
from .services.weight_store import WeightStore

logger = logging.getLogger(__name__)


class PreferenceEntry(BaseModel):
    feature_key: str
    feature_type: SignalType
    feature_value: str
    weight: float
    decayed_weight: float
    display: str
    state: WeightState
    decision_count: int


class PreferenceSummary(BaseModel):
    """
    by_type: every weight grouped by feature type, strongest first.
    boosts / suppressions: active weights only, strongest first, capped at limit.
    """

    by_type: Dict[str, List[PreferenceEntry]] = Field(default_factory=dict)
    boosts: List[PreferenceEntry] = Field(default_factory=list)
    suppressions: List[PreferenceEntry] = Field(default_factory=list)
    total: int = 0


def _feature(type_: Union[SignalType, str], value: str) -> Feature:
    try:
        return normalize_feature_key(type_, value)
    except ValueError as e:
        raise ValidationError(str(e)) from e


class PreferenceService:
    def __init__(self, weight_store: WeightStore, config: Optional[PersonalizationConfig] = None):
        self.weight_store = weight_store
        self.config = resolve_config(config)

    def mute(self, user_id: str, type_, value: str, now: Optional[datetime] = None) -> SignalWeight:
        """Exclude a feature from scoring without touching its weight."""
        feature = _feature(type_, value)
        with user_context(user_id):
            logger.info("Muting %s", feature.key)
            return self.weight_store.set_state(user_id, feature, WeightState.MUTED, now or utc_now())

    def unmute(self, user_id: str, type_, value: str, now: Optional[datetime] = None) -> SignalWeight:
        feature = _feature(type_, value)
        with user_context(user_id):
            logger.info("Unmuting %s", feature.key)
            return self.weight_store.set_state(user_id, feature, WeightState.ACTIVE, now or utc_now())

    def reset(self, user_id: str, type_, value: str, now: Optional[datetime] = None) -> SignalWeight:
        """Forget a learned preference: weight exactly 0, state active."""
        feature = _feature(type_, value)
        with user_context(user_id):
            logger.info("Resetting %s", feature.key)
            return self.weight_store.reset_weight(user_id, feature, now or utc_now())

    def adjust(
        self,
        user_id: str,
        type_,
        value: str,
        delta: float,
        now: Optional[datetime] = None,
    ) -> SignalWeight:
        """Nudge a weight by hand. The result is clamped to +-max_weight like any other update."""
        if delta is None:
            raise ValidationError("delta is required")
        feature = _feature(type_, value)
        with user_context(user_id):
            updated = self.weight_store.upsert_delta(
                user_id,
                feature,
                float(delta),
                now or utc_now(),
                confidence=ConfidenceLevel.MEDIUM,
                count_decision=False,
                max_weight=self.config.max_weight,
            )
            logger.info("Adjusted %s by %+.2f -> %.2f", feature.key, delta, updated.weight)
            return updated

    def summary(self, user_id: str, now: Optional[datetime] = None, limit: int = 10) -> PreferenceSummary:
        now = now or utc_now()
        decayed = apply_decay_to_weights(self.weight_store.list_weights(user_id), now, self.config)
        entries = sorted(
            (
                PreferenceEntry(
                    feature_key=d.feature_key,
                    feature_type=d.weight.feature_type,
                    feature_value=d.weight.feature_value,
                    weight=d.weight.weight,
                    decayed_weight=d.decayed_weight,
                    display=format_weight_for_display(d),
                    state=d.weight.state,
                    decision_count=d.weight.decision_count,
                )
                for d in decayed
            ),
            key=lambda e: e.decayed_weight,
            reverse=True,
        )

        by_type: Dict[str, List[PreferenceEntry]] = {}
        for e in entries:
            by_type.setdefault(e.feature_type.value, []).append(e)

        active = [e for e in entries if e.state == WeightState.ACTIVE]
        return PreferenceSummary(
            by_type=by_type,
            boosts=[e for e in active if e.decayed_weight > 0][:limit],
            suppressions=[e for e in reversed(active) if e.decayed_weight < 0][:limit],
            total=len(entries),
        )
