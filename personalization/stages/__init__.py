"""
Pipeline stages:

- scoring: base score + decayed weights → ScoredArticle
- blind_spots: detect and annotate persistently avoided features
- serendipity: randomized exploration picks
- actions: suggested next step per article
- orchestrator: rank_articles, the full pipeline
"""

from .actions import suggest_action
from .blind_spots import annotate_blind_spots, blind_spot_message, find_blind_spots
from .orchestrator import rank_articles
from .scoring import build_weight_lookup, score_article, score_articles
from .serendipity import SERENDIPITY_REASON, apply_serendipity

__all__ = [
    "SERENDIPITY_REASON",
    "annotate_blind_spots",
    "apply_serendipity",
    "blind_spot_message",
    "build_weight_lookup",
    "find_blind_spots",
    "rank_articles",
    "score_article",
    "score_articles",
    "suggest_action",
]
