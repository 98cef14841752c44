"""
Decision models: user feedback on an article and the ignore-reason audit trail.

Built from intake dicts via Decision.model_validate(d). Ignore-reason records
are frozen: the log is append-only.
"""

import uuid
from datetime import datetime
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class DecisionAction(str, Enum):
    """What the user decided to do with an article."""

    IGNORE = "ignore"
    MONITOR = "monitor"
    EXPERIMENT = "experiment"
    INTEGRATE = "integrate"


class ConfidenceLevel(str, Enum):
    """Qualitative certainty of a decision."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class IgnoreReasonType(str, Enum):
    """Closed taxonomy of why an article was ignored."""

    IRRELEVANT = "irrelevant"
    NOISE = "noise"
    DUPLICATE = "duplicate"
    TOO_SHALLOW = "too_shallow"
    TOO_TECHNICAL = "too_technical"
    BAD_TIMING = "bad_timing"
    OFF_TOPIC = "off_topic"
    KNOWN = "known"
    CUSTOM = "custom"


class Decision(BaseModel):
    """One decision, unique per (user_id, article_id); repeat decisions overwrite it."""

    user_id: str
    article_id: str
    action: DecisionAction
    inferred_confidence: ConfidenceLevel
    time_taken_seconds: Optional[float] = None
    created_at: datetime
    updated_at: datetime


class WeightAdjustment(BaseModel):
    """A signed delta to apply to one feature key."""

    model_config = ConfigDict(frozen=True)

    feature_key: str
    delta: float


class IgnoreReasonRecord(BaseModel):
    """Immutable audit entry: the reason, what the article looked like, and what was applied."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=lambda: uuid.uuid4().hex)
    user_id: str
    article_id: str
    reason_type: IgnoreReasonType
    reason_text: Optional[str] = None
    signals_snapshot: Dict[str, List[str]] = Field(default_factory=dict)
    applied_adjustments: List[WeightAdjustment] = Field(default_factory=list)
    created_at: datetime
