"""
Scorer: combine an article's base score with the user's decayed weights.

adjusted_score = base_score + sum(decayed_weight(key) * multiplier(type))

Only active weights take part; muted weights are dropped before matching so
they never show up in boosted or suppressed. Scoring is pure given a weight
snapshot and an evaluation time.
"""

from datetime import datetime
from typing import Dict, Iterable, List, Optional, Union

from ..learning.decay import DecayedWeight, apply_decay_to_weights
from ..models.config import PersonalizationConfig, resolve_config
from ..models.scoring import MatchedWeight, ScoredArticle
from ..models.signals import ArticleSignals, ensure_articles
from ..models.weights import SignalWeight
from ..utils.time import utc_now


def build_weight_lookup(
    weights: Iterable[SignalWeight],
    now: datetime,
    config: Optional[PersonalizationConfig] = None,
) -> Dict[str, DecayedWeight]:
    """Decayed active weights keyed by feature_key."""
    config = resolve_config(config)
    active = [w for w in weights if w.is_active]
    return {d.feature_key: d for d in apply_decay_to_weights(active, now, config)}


def _clamp_score(score: float, config: PersonalizationConfig) -> float:
    if not config.clamp_adjusted_score:
        return score
    return max(config.score_floor, min(config.score_ceiling, score))


def score_article(
    article: ArticleSignals,
    lookup: Dict[str, DecayedWeight],
    config: Optional[PersonalizationConfig] = None,
) -> ScoredArticle:
    """
    Score one article against a prepared weight lookup.

    Each distinct key counts once, with the multiplier of the first type it
    appears under. is_personalized requires at least one nonzero match.
    """
    config = resolve_config(config)
    matched: List[MatchedWeight] = []
    for signal_type, key in article.iter_keys():
        decayed = lookup.get(key)
        if decayed is None:
            continue
        value = decayed.decayed_weight
        matched.append(
            MatchedWeight(
                feature_key=key,
                feature_type=signal_type,
                weight=value,
                contribution=value * config.multiplier_for(signal_type),
            )
        )

    preference_delta = sum(m.contribution for m in matched)
    boosted = sorted((m for m in matched if m.weight > 0), key=lambda m: m.weight, reverse=True)
    suppressed = sorted((m for m in matched if m.weight < 0), key=lambda m: m.weight)

    return ScoredArticle(
        article=article,
        base_score=article.base_score,
        adjusted_score=_clamp_score(article.base_score + preference_delta, config),
        preference_delta=preference_delta,
        boosted=boosted,
        suppressed=suppressed,
        is_personalized=any(m.weight != 0 for m in matched),
    )


def score_articles(
    articles: List[Union[ArticleSignals, dict]],
    weights: Iterable[SignalWeight],
    now: Optional[datetime] = None,
    config: Optional[PersonalizationConfig] = None,
) -> List[ScoredArticle]:
    """
    Score a batch of articles against one user's weight snapshot.

    Output order follows input order; sorting is the pipeline's job.
    """
    config = resolve_config(config)
    now = now or utc_now()
    lookup = build_weight_lookup(weights, now, config)
    return [score_article(a, lookup, config) for a in ensure_articles(articles)]


def unpersonalized(article: ArticleSignals) -> ScoredArticle:
    """Fallback score: adjusted equals base, nothing matched."""
    return ScoredArticle(
        article=article,
        base_score=article.base_score,
        adjusted_score=article.base_score,
    )
