"""
Ranking service: load a user's weights and run the ranking pipeline.

A weight store outage does not fail the request; the list is ranked on base
scores and flagged degraded.
"""

import logging
from datetime import datetime
from typing import List, Optional, Union

import numpy as np

from personalization.errors import StorageError
from personalization.models import (
    ArticleSignals,
    BlindSpotAlert,
    PersonalizationConfig,
    RankingResult,
    resolve_config,
)
from personalization.stages import find_blind_spots, rank_articles
from personalization.utils import utc_now

from .logging_config import user_context
from .services.weight_store import WeightStore

logger = logging.getLogger(__name__)


class RankingService:
    def __init__(
        self,
        weight_store: WeightStore,
        config: Optional[PersonalizationConfig] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.weight_store = weight_store
        self.config = resolve_config(config)
        self.rng = rng

    def detect_blind_spots(self, user_id: str, now: Optional[datetime] = None) -> List[BlindSpotAlert]:
        """Blind-spot alerts from the user's stored weights."""
        now = now or utc_now()
        with user_context(user_id):
            alerts = find_blind_spots(self.weight_store.list_weights(user_id), now, self.config)
            if alerts:
                logger.info("Found %d blind spots", len(alerts))
            return alerts

    def rank_for_user(
        self,
        user_id: str,
        articles: List[Union[ArticleSignals, dict]],
        now: Optional[datetime] = None,
        top_n: Optional[int] = None,
        rng: Optional[np.random.Generator] = None,
    ) -> RankingResult:
        """Rank articles for one user. rng overrides the service's generator for this call."""
        now = now or utc_now()
        rng = rng if rng is not None else self.rng
        with user_context(user_id):
            try:
                weights = self.weight_store.list_weights(user_id)
            except StorageError:
                logger.exception("Weight store unavailable; ranking on base scores")
                result = rank_articles(
                    articles, [], now=now, config=self.config, rng=rng, blind_spot_alerts=[], top_n=top_n
                )
                return result.model_copy(update={"degraded": True})
            return rank_articles(
                articles, weights, now=now, config=self.config, rng=rng, top_n=top_n
            )
