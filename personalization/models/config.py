"""
Engine configuration: decay, learning, scoring, counter-bias, and action parameters.

PersonalizationConfig defaults are defined here. The service may pass a dict
(e.g. from a personalization.json file); from_dict() merges it with these defaults.
"""

from typing import Dict, Optional

from pydantic import BaseModel, model_validator

from .signals import SIGNAL_MULTIPLIERS, SignalType
from .weights import MAX_WEIGHT


class PersonalizationConfig(BaseModel):
    """Configuration for the personalization engine."""

    # -------------------------------------------------------------------------
    # Weight Decay
    # decayed = weight * decay_factor ** ((weeks_since - grace_weeks) * decay_multiplier)
    # -------------------------------------------------------------------------

    # Per-week decay factor once the grace period is over. 0.9 = 10% per week.
    decay_factor: float = 0.9
    # Decayed magnitude never drops below this (sign preserved).
    min_weight: float = 0.1
    # Stored weights are clamped to [-max_weight, max_weight]; at most MAX_WEIGHT.
    max_weight: float = MAX_WEIGHT
    # Weeks after the last decision before any decay applies.
    grace_weeks: float = 2.0

    # -------------------------------------------------------------------------
    # Learning: base delta per decision action (before confidence scaling)
    # -------------------------------------------------------------------------

    delta_ignore: float = -2.0
    delta_monitor: float = 0.5
    delta_experiment: float = 1.5
    delta_integrate: float = 3.0

    # Decisions made faster than this are treated as low confidence.
    quick_decision_seconds: float = 3.0

    # -------------------------------------------------------------------------
    # Scoring
    # adjusted_score = base_score + sum(weight * multiplier[type])
    # -------------------------------------------------------------------------

    multiplier_context: float = SIGNAL_MULTIPLIERS[SignalType.CONTEXT]
    multiplier_concept: float = SIGNAL_MULTIPLIERS[SignalType.CONCEPT]
    multiplier_entity: float = SIGNAL_MULTIPLIERS[SignalType.ENTITY]
    multiplier_tool: float = SIGNAL_MULTIPLIERS[SignalType.TOOL]
    multiplier_category: float = SIGNAL_MULTIPLIERS[SignalType.CATEGORY]

    # Clamp adjusted_score into [score_floor, score_ceiling].
    clamp_adjusted_score: bool = True
    score_floor: float = 0.0
    score_ceiling: float = 100.0

    # -------------------------------------------------------------------------
    # Blind Spots
    # -------------------------------------------------------------------------

    # Only weights below this are candidates.
    blind_spot_weight_threshold: float = -1.0
    # Minimum whole weeks since the last decision on the feature.
    blind_spot_min_weeks: int = 6
    # Minimum number of decisions that pushed the feature down.
    blind_spot_min_ignores: int = 3
    # Max alerts per scan. Don't overwhelm.
    blind_spot_max_alerts: int = 2

    # -------------------------------------------------------------------------
    # Serendipity
    # -------------------------------------------------------------------------

    serendipity_enabled: bool = True
    # Share of the list (percent) promoted for exploration.
    serendipity_percentage: float = 15.0
    # Candidates below this base score are never promoted.
    serendipity_min_base_score: float = 40.0
    # Top fraction of the ranking excluded from candidacy.
    serendipity_top_fraction: float = 0.3
    # Lists shorter than this are left untouched.
    serendipity_min_articles: int = 10
    # i-th pick is inserted at min(insert_start + i * insert_step, len).
    serendipity_insert_start: int = 5
    serendipity_insert_step: int = 3

    # -------------------------------------------------------------------------
    # Suggested Actions
    # -------------------------------------------------------------------------

    integrate_threshold: float = 75.0
    experiment_threshold: float = 60.0
    controversy_threshold: float = 70.0

    @model_validator(mode="after")
    def check_ranges(self):
        if not 0.0 < self.decay_factor <= 1.0:
            raise ValueError(f"decay_factor must be in (0, 1], got {self.decay_factor}")
        if not 0.0 < self.max_weight <= MAX_WEIGHT:
            raise ValueError(f"max_weight must be in (0, {MAX_WEIGHT}], got {self.max_weight}")
        if self.min_weight < 0 or self.min_weight > self.max_weight:
            raise ValueError(
                f"min_weight must be in [0, max_weight], got {self.min_weight}"
            )
        if not 0.0 <= self.serendipity_percentage <= 100.0:
            raise ValueError(
                f"serendipity_percentage must be in [0, 100], got {self.serendipity_percentage}"
            )
        if not 0.0 <= self.serendipity_top_fraction <= 1.0:
            raise ValueError(
                f"serendipity_top_fraction must be in [0, 1], got {self.serendipity_top_fraction}"
            )
        if self.integrate_threshold < self.experiment_threshold:
            raise ValueError("integrate_threshold must be >= experiment_threshold")
        if self.score_floor > self.score_ceiling:
            raise ValueError("score_floor must be <= score_ceiling")
        return self

    @classmethod
    def from_dict(cls, config_dict: Dict) -> "PersonalizationConfig":
        """Create config from dictionary (e.g., loaded from JSON)."""
        flat = {}
        if "decay" in config_dict:
            flat.update(config_dict["decay"])
        if "decision_deltas" in config_dict:
            for action, delta in config_dict["decision_deltas"].items():
                flat[f"delta_{action}"] = delta
        if "scoring" in config_dict:
            sc = dict(config_dict["scoring"])
            for signal_type, mult in sc.pop("multipliers", {}).items():
                flat[f"multiplier_{signal_type}"] = mult
            flat.update(sc)
        if "blind_spots" in config_dict:
            for k, v in config_dict["blind_spots"].items():
                flat[f"blind_spot_{k}"] = v
        if "serendipity" in config_dict:
            for k, v in config_dict["serendipity"].items():
                flat[f"serendipity_{k}"] = v
        if "actions" in config_dict:
            flat.update(config_dict["actions"])
        # Flat keys are accepted as-is.
        flat.update({k: v for k, v in config_dict.items() if k in cls.model_fields})
        allowed = set(cls.model_fields)
        filtered = {k: v for k, v in flat.items() if k in allowed}
        return cls.model_validate(filtered)

    def multiplier_for(self, signal_type) -> float:
        """Scoring multiplier for a SignalType (or its string value)."""
        return getattr(self, f"multiplier_{getattr(signal_type, 'value', signal_type)}")

    def delta_for(self, action) -> float:
        """Base weight delta for a DecisionAction (or its string value)."""
        return getattr(self, f"delta_{getattr(action, 'value', action)}")


DEFAULT_CONFIG = PersonalizationConfig()


def resolve_config(config: Optional["PersonalizationConfig"]) -> "PersonalizationConfig":
    """Return config or DEFAULT_CONFIG when none is provided."""
    return config if config is not None else DEFAULT_CONFIG
