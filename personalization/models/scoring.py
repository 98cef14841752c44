"""
Scoring models: ScoredArticle and the explanation attached to it.

Contains:
- MatchedWeight: one weight that moved an article's score
- ScoredArticle: an article with base/adjusted scores, explanation, and pipeline flags
- BlindSpotAlert: a feature the user has persistently avoided
- RankingResult: final pipeline output
"""

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, Field

from .decisions import DecisionAction
from .signals import ArticleSignals, SignalType


class MatchedWeight(BaseModel):
    """A decayed active weight that matched one of the article's feature keys."""

    feature_key: str
    feature_type: SignalType
    weight: float
    contribution: float


class ScoredArticle(BaseModel):
    """An article with all its scoring components and ranking annotations."""

    article: ArticleSignals
    base_score: float
    adjusted_score: float
    preference_delta: float = 0.0
    boosted: List[MatchedWeight] = Field(default_factory=list)
    suppressed: List[MatchedWeight] = Field(default_factory=list)
    is_personalized: bool = False
    is_serendipity: bool = False
    serendipity_reason: Optional[str] = None
    is_blind_spot_injection: bool = False
    blind_spot_message: Optional[str] = None
    suggested_action: Optional[DecisionAction] = None
    action_rationale: Optional[str] = None
    rank: Optional[int] = None

    @property
    def article_id(self) -> str:
        return self.article.article_id


class BlindSpotAlert(BaseModel):
    """A strongly negative, long-untouched feature flagged to counter filter bubbles."""

    feature_key: str
    feature_type: SignalType
    feature_value: str
    weight: float
    weeks_ignored: int
    last_seen: Optional[datetime] = None
    ignore_count: int
    message: str


class RankingResult(BaseModel):
    """
    Final ranked output.

    degraded is True when personalization failed and scores fell back to base_score.
    """

    articles: List[ScoredArticle]
    blind_spot_alerts: List[BlindSpotAlert] = Field(default_factory=list)
    degraded: bool = False
    generated_at: datetime
