"""
Weight decay: time-based attenuation of stored weights toward a floor.

decayed = weight * decay_factor ** ((weeks_since - grace_weeks) * decay_multiplier)

Decay is computed on read from last_decision_at and never written back to the
store, so evaluating it any number of times never compounds.
"""

import math
from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel

from ..models.config import DEFAULT_CONFIG, PersonalizationConfig
from ..models.weights import SignalWeight
from ..utils.time import weeks_between
from .confidence import CONFIDENCE_PROFILES


class DecayResult(BaseModel):
    decayed_weight: float
    weeks_inactive: int


class DecayedWeight(BaseModel):
    """A stored weight together with its decayed value at a point in time."""

    weight: SignalWeight
    decayed_weight: float
    weeks_inactive: int
    evaluated_at: datetime

    @property
    def feature_key(self) -> str:
        return self.weight.feature_key


def calculate_decayed_weight(
    weight: float,
    last_decision_at: Optional[datetime],
    now: datetime,
    config: PersonalizationConfig = DEFAULT_CONFIG,
    decay_multiplier: float = 1.0,
) -> DecayResult:
    """
    Decay a raw weight by the time elapsed since its last decision.

    No decay without a decision or inside the grace period. After that the
    magnitude shrinks exponentially but never below min_weight (capped at the
    raw magnitude, so decay can only shrink a weight). Zero stays zero.
    """
    if last_decision_at is None or weight == 0:
        return DecayResult(decayed_weight=weight, weeks_inactive=0)

    weeks_since = weeks_between(last_decision_at, now)
    if weeks_since < config.grace_weeks:
        return DecayResult(decayed_weight=weight, weeks_inactive=0)

    weeks_of_decay = (weeks_since - config.grace_weeks) * decay_multiplier
    decayed = weight * config.decay_factor ** weeks_of_decay

    floor = min(config.min_weight, abs(weight))
    magnitude = max(abs(decayed), floor)
    return DecayResult(
        decayed_weight=math.copysign(magnitude, weight),
        weeks_inactive=math.floor(weeks_since),
    )


def decay_signal_weight(
    weight: SignalWeight,
    now: datetime,
    config: PersonalizationConfig = DEFAULT_CONFIG,
) -> DecayedWeight:
    """Decay one stored weight using the decay rate of its last decision's confidence."""
    multiplier = CONFIDENCE_PROFILES[weight.last_confidence].decay_multiplier
    result = calculate_decayed_weight(
        weight.weight, weight.last_decision_at, now, config, multiplier
    )
    return DecayedWeight(
        weight=weight,
        decayed_weight=result.decayed_weight,
        weeks_inactive=result.weeks_inactive,
        evaluated_at=now,
    )


def apply_decay_to_weights(
    weights: List[SignalWeight],
    now: datetime,
    config: PersonalizationConfig = DEFAULT_CONFIG,
) -> List[DecayedWeight]:
    """Decay a batch of stored weights at the same instant."""
    return [decay_signal_weight(w, now, config) for w in weights]


def format_weight_for_display(decayed: DecayedWeight) -> str:
    """Compact label: "+2.0", or "+1.5 ↓(4w)" once the weight has gone stale."""
    if decayed.weeks_inactive == 0:
        raw = decayed.weight.weight
        return f"{'+' if raw > 0 else ''}{raw:.1f}"
    value = decayed.decayed_weight
    indicator = "↓" if abs(value) < abs(decayed.weight.weight) else ""
    return f"{'+' if value > 0 else ''}{value:.1f} {indicator}({decayed.weeks_inactive}w)"
