"""
Serendipity: promote a few decent but under-ranked articles for exploration.

Candidates exclude the top fraction of the ranking and anything below the
minimum base score. Picks are drawn uniformly without replacement from an
injectable numpy Generator and re-inserted at spread-out mid-list positions.
"""

import logging
import math
from typing import List, Optional

import numpy as np

from ..models.config import PersonalizationConfig, resolve_config
from ..models.scoring import ScoredArticle

logger = logging.getLogger(__name__)

SERENDIPITY_REASON = "Exploration pick to broaden your view"


def apply_serendipity(
    scored: List[ScoredArticle],
    config: Optional[PersonalizationConfig] = None,
    rng: Optional[np.random.Generator] = None,
) -> List[ScoredArticle]:
    """
    Return a new list sorted by adjusted_score with serendipity picks re-inserted.

    Lists shorter than serendipity_min_articles come back sorted and unmarked.
    Pass a seeded rng (np.random.default_rng(seed)) for reproducible picks.
    """
    config = resolve_config(config)
    ranked = sorted(scored, key=lambda s: s.adjusted_score, reverse=True)
    total = len(ranked)
    if not config.serendipity_enabled or total < config.serendipity_min_articles:
        return ranked

    top_cut = math.floor(total * config.serendipity_top_fraction)
    candidate_idx = [
        i
        for i in range(top_cut, total)
        if ranked[i].base_score >= config.serendipity_min_base_score
    ]
    count = min(math.floor(total * config.serendipity_percentage / 100.0), len(candidate_idx))
    if count <= 0:
        return ranked

    rng = rng if rng is not None else np.random.default_rng()
    drawn = rng.choice(len(candidate_idx), size=count, replace=False)
    picked = [candidate_idx[int(j)] for j in drawn]

    picked_set = set(picked)
    result = [s for i, s in enumerate(ranked) if i not in picked_set]
    for n, i in enumerate(picked):
        pick = ranked[i].model_copy(
            update={"is_serendipity": True, "serendipity_reason": SERENDIPITY_REASON}
        )
        position = min(config.serendipity_insert_start + n * config.serendipity_insert_step, len(result))
        result.insert(position, pick)

    logger.debug("Serendipity: %d picks from %d candidates (total=%d)", count, len(candidate_idx), total)
    return result
