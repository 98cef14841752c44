"""
Blind spots: features the user has strongly and persistently avoided.

A blind spot is an active weight below the threshold whose last decision is
at least blind_spot_min_weeks old and that has been pushed down by at least
blind_spot_min_ignores decisions. Alerts surface them so the feed does not
quietly narrow into a filter bubble.
"""

import math
from datetime import datetime
from typing import Iterable, List, Optional

from ..models.config import PersonalizationConfig, resolve_config
from ..models.scoring import BlindSpotAlert, ScoredArticle
from ..models.weights import SignalWeight
from ..utils.time import weeks_between

_MESSAGES = (
    "You've been avoiding {value} for {weeks} weeks. Worth a fresh look?",
    "{value} hasn't made your list in {weeks} weeks. Things may have changed.",
    "It's been {weeks} weeks since you engaged with {value}. Here's a reminder it exists.",
)


def _display_value(value: str) -> str:
    return value.replace("_", " ").replace("-", " ")


def blind_spot_message(feature_value: str, weeks: int) -> str:
    """Human-readable rationale; the template is picked from the week count."""
    template = _MESSAGES[weeks % len(_MESSAGES)]
    return template.format(value=_display_value(feature_value), weeks=weeks)


def find_blind_spots(
    weights: Iterable[SignalWeight],
    now: datetime,
    config: Optional[PersonalizationConfig] = None,
) -> List[BlindSpotAlert]:
    """
    Scan a weight snapshot for blind spots, most negative first.

    Raw stored weights are compared against the threshold; decay does not
    rescue a feature from being flagged.
    """
    config = resolve_config(config)
    candidates = sorted(
        (w for w in weights if w.is_active and w.weight < config.blind_spot_weight_threshold),
        key=lambda w: w.weight,
    )

    alerts: List[BlindSpotAlert] = []
    for w in candidates:
        if len(alerts) >= config.blind_spot_max_alerts:
            break
        weeks = (
            math.floor(weeks_between(w.last_decision_at, now))
            if w.last_decision_at is not None
            else 0
        )
        if weeks < config.blind_spot_min_weeks or w.decision_count < config.blind_spot_min_ignores:
            continue
        alerts.append(
            BlindSpotAlert(
                feature_key=w.feature_key,
                feature_type=w.feature_type,
                feature_value=w.feature_value,
                weight=w.weight,
                weeks_ignored=weeks,
                last_seen=w.last_decision_at,
                ignore_count=w.decision_count,
                message=blind_spot_message(w.feature_value, weeks),
            )
        )
    return alerts


def annotate_blind_spots(
    scored: List[ScoredArticle],
    alerts: List[BlindSpotAlert],
) -> List[ScoredArticle]:
    """
    Flag articles that carry an alerted feature.

    Returns new objects; order and membership are unchanged.
    """
    if not alerts:
        return list(scored)
    by_key = {a.feature_key: a for a in alerts}
    out: List[ScoredArticle] = []
    for s in scored:
        hit = next((by_key[k] for k in s.article.all_keys if k in by_key), None)
        if hit is None:
            out.append(s)
        else:
            out.append(
                s.model_copy(
                    update={"is_blind_spot_injection": True, "blind_spot_message": hit.message}
                )
            )
    return out
