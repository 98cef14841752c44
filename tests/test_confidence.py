"""
Confidence Tests

Rules (first match wins): quick decision -> low; integrate/experiment -> high;
ignore with reason -> medium; ignore without reason -> low; monitor -> medium.
"""

import pytest

from personalization.learning import (
    CONFIDENCE_PROFILES,
    apply_confidence_to_weight,
    confidence_decay_factor,
    infer_confidence,
)
from personalization.models import ConfidenceLevel, DecisionAction, PersonalizationConfig

LOW, MEDIUM, HIGH = ConfidenceLevel.LOW, ConfidenceLevel.MEDIUM, ConfidenceLevel.HIGH


class TestInferConfidence:
    @pytest.mark.parametrize(
        "action,has_reason,expected",
        [
            (DecisionAction.INTEGRATE, False, HIGH),
            (DecisionAction.EXPERIMENT, False, HIGH),
            (DecisionAction.IGNORE, True, MEDIUM),
            (DecisionAction.IGNORE, False, LOW),
            (DecisionAction.MONITOR, False, MEDIUM),
        ],
    )
    def test_rules(self, action, has_reason, expected):
        assert infer_confidence(action, has_reason) == expected

    def test_quick_decision_wins_over_action(self):
        assert infer_confidence(DecisionAction.INTEGRATE, False, time_taken_seconds=1.2) == LOW
        assert infer_confidence(DecisionAction.IGNORE, True, time_taken_seconds=0.5) == LOW

    def test_three_seconds_is_not_quick(self):
        assert infer_confidence(DecisionAction.EXPERIMENT, False, time_taken_seconds=3.0) == HIGH

    def test_threshold_is_configurable(self):
        config = PersonalizationConfig(quick_decision_seconds=10)
        assert infer_confidence("monitor", False, time_taken_seconds=8, config=config) == LOW

    def test_accepts_string_action(self):
        assert infer_confidence("integrate", False) == HIGH


class TestConfidenceProfiles:
    def test_profile_values(self):
        assert (CONFIDENCE_PROFILES[LOW].decay_multiplier, CONFIDENCE_PROFILES[LOW].weight_multiplier) == (2.0, 0.5)
        assert (CONFIDENCE_PROFILES[MEDIUM].decay_multiplier, CONFIDENCE_PROFILES[MEDIUM].weight_multiplier) == (1.0, 1.0)
        assert (CONFIDENCE_PROFILES[HIGH].decay_multiplier, CONFIDENCE_PROFILES[HIGH].weight_multiplier) == (0.5, 1.5)
        assert not CONFIDENCE_PROFILES[HIGH].revisable

    @pytest.mark.parametrize("base_delta", [-2.0, 0.5, 1.5, 3.0])
    def test_low_applies_less_than_high(self, base_delta):
        low = apply_confidence_to_weight(base_delta, LOW)
        high = apply_confidence_to_weight(base_delta, HIGH)
        assert abs(low) < abs(high)

    def test_effective_decay_factor(self):
        assert confidence_decay_factor(0.9, LOW) == pytest.approx(0.81)
        assert confidence_decay_factor(0.9, MEDIUM) == pytest.approx(0.9)
