"""
Decision confidence: how certain a decision was, and how much it should count.

Quick or reasonless decisions move weights less and fade faster; deliberate
adopt/try decisions move weights more and fade slower.
"""

from typing import Dict, Optional

from pydantic import BaseModel

from ..models.config import DEFAULT_CONFIG, PersonalizationConfig
from ..models.decisions import ConfidenceLevel, DecisionAction


class ConfidenceProfile(BaseModel):
    level: ConfidenceLevel
    revisable: bool
    # Scales the decay exponent. 2.0 decays twice as fast.
    decay_multiplier: float
    # Scales every applied weight delta.
    weight_multiplier: float


CONFIDENCE_PROFILES: Dict[ConfidenceLevel, ConfidenceProfile] = {
    ConfidenceLevel.LOW: ConfidenceProfile(
        level=ConfidenceLevel.LOW, revisable=True, decay_multiplier=2.0, weight_multiplier=0.5
    ),
    ConfidenceLevel.MEDIUM: ConfidenceProfile(
        level=ConfidenceLevel.MEDIUM, revisable=True, decay_multiplier=1.0, weight_multiplier=1.0
    ),
    ConfidenceLevel.HIGH: ConfidenceProfile(
        level=ConfidenceLevel.HIGH, revisable=False, decay_multiplier=0.5, weight_multiplier=1.5
    ),
}


def infer_confidence(
    action: DecisionAction,
    has_ignore_reason: bool,
    time_taken_seconds: Optional[float] = None,
    config: PersonalizationConfig = DEFAULT_CONFIG,
) -> ConfidenceLevel:
    """
    Infer confidence for a decision. Rules apply in order, first match wins:

    1. decided in under quick_decision_seconds -> low
    2. integrate or experiment -> high
    3. ignore with a reason -> medium
    4. ignore without a reason -> low
    5. monitor -> medium
    """
    action = DecisionAction(action)
    if time_taken_seconds is not None and time_taken_seconds < config.quick_decision_seconds:
        return ConfidenceLevel.LOW
    if action in (DecisionAction.INTEGRATE, DecisionAction.EXPERIMENT):
        return ConfidenceLevel.HIGH
    if action == DecisionAction.IGNORE:
        return ConfidenceLevel.MEDIUM if has_ignore_reason else ConfidenceLevel.LOW
    return ConfidenceLevel.MEDIUM


def apply_confidence_to_weight(base_delta: float, confidence: ConfidenceLevel) -> float:
    """Scale a base delta by the confidence's weight multiplier."""
    return base_delta * CONFIDENCE_PROFILES[ConfidenceLevel(confidence)].weight_multiplier


def confidence_decay_factor(base_decay_factor: float, confidence: ConfidenceLevel) -> float:
    """Effective per-week decay factor, e.g. 0.9 at low confidence -> 0.81."""
    return base_decay_factor ** CONFIDENCE_PROFILES[ConfidenceLevel(confidence)].decay_multiplier
