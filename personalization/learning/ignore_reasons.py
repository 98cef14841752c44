"""
Ignore reasons: capture why an article was ignored and scope the penalty.

Separates genuinely irrelevant content from noise, duplicates, bad timing and
depth mismatches. Only reasons with a nonzero weight_impact touch weights, and
only on the signal types they declare. Tools are never targeted.
"""

from collections import Counter
from typing import Dict, List, Optional, Tuple, Union

from pydantic import BaseModel

from ..models.decisions import IgnoreReasonRecord, IgnoreReasonType, WeightAdjustment
from ..models.signals import ArticleSignals, SignalType


class IgnoreReason(BaseModel):
    type: IgnoreReasonType
    label: str
    description: str
    weight_impact: float
    affects_signals: Tuple[SignalType, ...] = ()


IGNORE_REASONS: Dict[IgnoreReasonType, IgnoreReason] = {
    IgnoreReasonType.IRRELEVANT: IgnoreReason(
        type=IgnoreReasonType.IRRELEVANT,
        label="Irrelevant",
        description="Not relevant to my work",
        weight_impact=-1.5,
        affects_signals=(SignalType.CATEGORY, SignalType.CONCEPT),
    ),
    IgnoreReasonType.NOISE: IgnoreReason(
        type=IgnoreReasonType.NOISE,
        label="Noise/Hype",
        description="Marketing fluff, clickbait, no substance",
        weight_impact=-0.5,
    ),
    IgnoreReasonType.DUPLICATE: IgnoreReason(
        type=IgnoreReasonType.DUPLICATE,
        label="Duplicate",
        description="Already seen this story",
        weight_impact=0.0,
    ),
    IgnoreReasonType.TOO_SHALLOW: IgnoreReason(
        type=IgnoreReasonType.TOO_SHALLOW,
        label="Too Shallow",
        description="Not enough depth or detail",
        weight_impact=-0.3,
    ),
    IgnoreReasonType.TOO_TECHNICAL: IgnoreReason(
        type=IgnoreReasonType.TOO_TECHNICAL,
        label="Too Technical",
        description="Too deep for current needs",
        weight_impact=-0.3,
        affects_signals=(SignalType.CONCEPT,),
    ),
    IgnoreReasonType.BAD_TIMING: IgnoreReason(
        type=IgnoreReasonType.BAD_TIMING,
        label="Not Now",
        description="Interesting but not relevant right now",
        weight_impact=0.0,
    ),
    IgnoreReasonType.OFF_TOPIC: IgnoreReason(
        type=IgnoreReasonType.OFF_TOPIC,
        label="Off Topic",
        description="Wrong category or focus area",
        weight_impact=-1.0,
        affects_signals=(SignalType.CATEGORY,),
    ),
    IgnoreReasonType.KNOWN: IgnoreReason(
        type=IgnoreReasonType.KNOWN,
        label="Already Know",
        description="Already familiar with this",
        weight_impact=0.0,
    ),
    IgnoreReasonType.CUSTOM: IgnoreReason(
        type=IgnoreReasonType.CUSTOM,
        label="Other",
        description="Custom reason",
        weight_impact=-0.5,
        affects_signals=(SignalType.CONCEPT,),
    ),
}


def get_ignore_reason_options() -> List[Dict[str, str]]:
    """All reason options, for pickers."""
    return [
        {"value": r.type.value, "label": r.label, "description": r.description}
        for r in IGNORE_REASONS.values()
    ]


def calculate_ignore_weight_adjustments(
    reason: Union[IgnoreReasonType, str],
    signals: ArticleSignals,
    text: Optional[str] = None,
) -> List[WeightAdjustment]:
    """
    Weight adjustments for ignoring an article for the given reason.

    One adjustment of weight_impact per matching key, per affected signal type
    in declared order. Zero-impact reasons are pure telemetry and return [].
    The free text of a custom reason is recorded, never interpreted.
    """
    config = IGNORE_REASONS[IgnoreReasonType(reason)]
    if config.weight_impact == 0:
        return []

    adjustments: List[WeightAdjustment] = []
    for signal_type in config.affects_signals:
        for key in signals.keys_for(signal_type):
            if key:
                adjustments.append(WeightAdjustment(feature_key=key, delta=config.weight_impact))
    return adjustments


class IgnoreReasonStat(BaseModel):
    reason_type: IgnoreReasonType
    count: int
    percentage: float


def ignore_reason_stats(records: List[IgnoreReasonRecord]) -> List[IgnoreReasonStat]:
    """Count records per reason, most frequent first."""
    counts = Counter(r.reason_type for r in records)
    total = sum(counts.values())
    return [
        IgnoreReasonStat(
            reason_type=reason_type,
            count=count,
            percentage=count * 100.0 / total,
        )
        for reason_type, count in counts.most_common()
    ]
