"""
Pipeline orchestrator: score, annotate blind spots, inject serendipity, then
number the list and attach suggested actions.

The main entry point is rank_articles. If personalization fails for any reason
the pipeline falls back to base scores and flags the result as degraded instead
of failing the request.
"""

import logging
from datetime import datetime
from typing import Iterable, List, Optional, Union

import numpy as np

from ..models.config import PersonalizationConfig, resolve_config
from ..models.scoring import BlindSpotAlert, RankingResult, ScoredArticle
from ..models.signals import ArticleSignals, ensure_articles
from ..models.weights import SignalWeight
from ..utils.time import utc_now
from .actions import suggest_action
from .blind_spots import annotate_blind_spots, find_blind_spots
from .scoring import score_articles, unpersonalized
from .serendipity import apply_serendipity

logger = logging.getLogger(__name__)


def _personalize(
    articles: List[ArticleSignals],
    weights: List[SignalWeight],
    now: datetime,
    config: PersonalizationConfig,
    alerts: List[BlindSpotAlert],
) -> List[ScoredArticle]:
    scored = score_articles(articles, weights, now=now, config=config)
    scored.sort(key=lambda s: s.adjusted_score, reverse=True)
    return annotate_blind_spots(scored, alerts)


def _finalize(
    scored: List[ScoredArticle],
    config: PersonalizationConfig,
    top_n: Optional[int],
) -> List[ScoredArticle]:
    """Cut to top_n, assign 1-based ranks and suggested actions."""
    if top_n is not None:
        scored = scored[:top_n]
    out = []
    for rank, s in enumerate(scored, start=1):
        action, rationale = suggest_action(s.adjusted_score, s.article.intent_label, config)
        out.append(
            s.model_copy(
                update={"rank": rank, "suggested_action": action, "action_rationale": rationale}
            )
        )
    return out


def rank_articles(
    articles: List[Union[ArticleSignals, dict]],
    weights: Iterable[SignalWeight],
    now: Optional[datetime] = None,
    config: Optional[PersonalizationConfig] = None,
    rng: Optional[np.random.Generator] = None,
    blind_spot_alerts: Optional[List[BlindSpotAlert]] = None,
    top_n: Optional[int] = None,
) -> RankingResult:
    """
    Run the full ranking pipeline for one user's weight snapshot.

    Blind-spot alerts are computed from the weights unless given. Serendipity
    runs before the top_n cut so picks can land inside the visible window.
    """
    config = resolve_config(config)
    now = now or utc_now()
    articles_typed = ensure_articles(articles)
    weights = list(weights)

    # 1) Personalized scoring; fall back to base scores on any failure
    degraded = False
    try:
        alerts = (
            blind_spot_alerts
            if blind_spot_alerts is not None
            else find_blind_spots(weights, now, config)
        )
        scored = _personalize(articles_typed, weights, now, config, alerts)
    except Exception:
        logger.exception(
            "Personalization failed for %d articles; falling back to base scores",
            len(articles_typed),
        )
        degraded = True
        alerts = []
        scored = sorted(
            (unpersonalized(a) for a in articles_typed),
            key=lambda s: s.adjusted_score,
            reverse=True,
        )

    # 2) Exploration picks
    scored = apply_serendipity(scored, config, rng=rng)

    # 3) Ranks and suggested actions
    final = _finalize(scored, config, top_n)

    return RankingResult(
        articles=final,
        blind_spot_alerts=alerts,
        degraded=degraded,
        generated_at=now,
    )
