"""
Learning: how feedback becomes weights.

- confidence: infer decision certainty and its weight/decay multipliers
- decay: lazy time-based attenuation of stored weights
- ignore_reasons: reason taxonomy and reason-scoped adjustments
- weight_updater: confidence-scaled deltas through the store's atomic upsert
"""

from .confidence import (
    CONFIDENCE_PROFILES,
    ConfidenceProfile,
    apply_confidence_to_weight,
    confidence_decay_factor,
    infer_confidence,
)
from .decay import (
    DecayedWeight,
    DecayResult,
    apply_decay_to_weights,
    calculate_decayed_weight,
    decay_signal_weight,
    format_weight_for_display,
)
from .ignore_reasons import (
    IGNORE_REASONS,
    IgnoreReason,
    IgnoreReasonStat,
    calculate_ignore_weight_adjustments,
    get_ignore_reason_options,
    ignore_reason_stats,
)
from .weight_updater import (
    WeightWriter,
    apply_weight_adjustments,
    decision_delta,
    update_weights_from_decision,
)

__all__ = [
    "CONFIDENCE_PROFILES",
    "ConfidenceProfile",
    "DecayResult",
    "DecayedWeight",
    "IGNORE_REASONS",
    "IgnoreReason",
    "IgnoreReasonStat",
    "WeightWriter",
    "apply_confidence_to_weight",
    "apply_decay_to_weights",
    "apply_weight_adjustments",
    "calculate_decayed_weight",
    "calculate_ignore_weight_adjustments",
    "confidence_decay_factor",
    "decay_signal_weight",
    "decision_delta",
    "format_weight_for_display",
    "get_ignore_reason_options",
    "ignore_reason_stats",
    "infer_confidence",
    "update_weights_from_decision",
]
