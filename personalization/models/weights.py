"""
Weight models: stored per-user feature weights and the results of updating them.

Contains:
- SignalWeight: one stored (user_id, feature_key) preference record
- WeightUpdate / AdjustmentFailure / WeightUpdateResult: outcome of a batch of upserts
"""

from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field

from ..errors import PartialFailure
from .decisions import ConfidenceLevel
from .signals import Feature, SignalType

# Hard bounds on a stored weight.
MAX_WEIGHT = 10.0


class WeightState(str, Enum):
    ACTIVE = "active"
    MUTED = "muted"


def clamp_weight(weight: float, max_weight: float = MAX_WEIGHT) -> float:
    """Clamp a raw weight into [-max_weight, max_weight]."""
    return max(-max_weight, min(max_weight, weight))


class SignalWeight(BaseModel):
    """
    Learned preference strength for one feature of one user.

    weight is the raw accumulated value; decay is never written back here and is
    recomputed on read. last_confidence is the confidence of the most recent
    decision and selects the decay rate.
    """

    user_id: str
    feature_key: str
    feature_type: SignalType
    feature_value: str
    weight: float = Field(default=0.0, ge=-MAX_WEIGHT, le=MAX_WEIGHT)
    state: WeightState = WeightState.ACTIVE
    decision_count: int = 0
    last_decision_at: Optional[datetime] = None
    last_confidence: ConfidenceLevel = ConfidenceLevel.MEDIUM
    created_at: datetime
    updated_at: datetime

    @property
    def feature(self) -> Feature:
        return Feature(type=self.feature_type, value=self.feature_value)

    @property
    def is_active(self) -> bool:
        return self.state == WeightState.ACTIVE

    @classmethod
    def new(cls, user_id: str, feature: Feature, now: datetime) -> "SignalWeight":
        """Neutral record for a feature seen for the first time."""
        return cls(
            user_id=user_id,
            feature_key=feature.key,
            feature_type=feature.type,
            feature_value=feature.value,
            created_at=now,
            updated_at=now,
        )


class WeightUpdate(BaseModel):
    """One successfully applied delta."""

    feature_key: str
    delta: float
    weight_after: float
    decision_count: int


class AdjustmentFailure(BaseModel):
    """One delta the store rejected."""

    feature_key: str
    delta: float
    error: str


class WeightUpdateResult(BaseModel):
    """
    Outcome of applying a batch of deltas.

    Storage failures are collected per feature key instead of aborting the
    batch; call raise_for_failures() when a caller needs all-or-error semantics.
    """

    updates: List[WeightUpdate] = Field(default_factory=list)
    failures: List[AdjustmentFailure] = Field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.failures

    @property
    def applied_keys(self) -> List[str]:
        return [u.feature_key for u in self.updates]

    def merge(self, other: "WeightUpdateResult") -> "WeightUpdateResult":
        return WeightUpdateResult(
            updates=self.updates + other.updates,
            failures=self.failures + other.failures,
        )

    def raise_for_failures(self) -> None:
        """Raise PartialFailure if any delta failed to apply."""
        if self.failures:
            raise PartialFailure(self)
