"""
Decision intake: persist the decision, then learn from it.

The decision record is written first and a failure there is raised. Weight
deltas are applied afterwards; their storage failures are logged and reported
in the outcome without undoing the decision. Only the decision record is
idempotent: calling record_decision again for the same article replaces the
record but applies the weight deltas a second time.
"""

import logging
from datetime import datetime
from typing import List, Optional, Tuple, Union

from pydantic import BaseModel

from personalization.errors import NotFoundError, StorageError, ValidationError
from personalization.learning import (
    apply_weight_adjustments,
    calculate_ignore_weight_adjustments,
    infer_confidence,
    update_weights_from_decision,
)
from personalization.models import (
    ArticleSignals,
    ConfidenceLevel,
    Decision,
    DecisionAction,
    IgnoreReasonRecord,
    IgnoreReasonType,
    PersonalizationConfig,
    WeightAdjustment,
    WeightUpdateResult,
    resolve_config,
)
from personalization.utils import utc_now

from .logging_config import user_context
from .services.article_provider import ArticleSignalProvider
from .services.decision_store import DecisionStore, IgnoreReasonLog
from .services.weight_store import WeightStore

logger = logging.getLogger(__name__)


class IgnoreReasonOutcome(BaseModel):
    """Weights touched by an ignore reason, and the audit record (None if it could not be stored)."""

    weights: WeightUpdateResult
    record: Optional[IgnoreReasonRecord] = None


class DecisionOutcome(BaseModel):
    decision: Decision
    weights: WeightUpdateResult
    ignore_reason: Optional[IgnoreReasonOutcome] = None

    @property
    def ok(self) -> bool:
        return self.weights.ok


def _parse_enum(enum_cls, value, field: str):
    try:
        return enum_cls(value)
    except ValueError as e:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{field} must be one of {allowed}, got {value!r}") from e


def _require(value: Optional[str], field: str) -> str:
    if value is None or not str(value).strip():
        raise ValidationError(f"{field} is required")
    return str(value).strip()


class DecisionService:
    """Records decisions and ignore reasons for any user."""

    def __init__(
        self,
        weight_store: WeightStore,
        decision_store: DecisionStore,
        ignore_log: IgnoreReasonLog,
        articles: ArticleSignalProvider,
        config: Optional[PersonalizationConfig] = None,
    ):
        self.weight_store = weight_store
        self.decision_store = decision_store
        self.ignore_log = ignore_log
        self.articles = articles
        self.config = resolve_config(config)

    def _load_article(self, article_id: str) -> ArticleSignals:
        article = self.articles.get_article(article_id)
        if article is None:
            raise NotFoundError(f"Article not found: {article_id}")
        return article

    def record_decision(
        self,
        user_id: str,
        article_id: str,
        action: Union[DecisionAction, str],
        time_taken_seconds: Optional[float] = None,
        ignore_reason: Optional[Union[IgnoreReasonType, str]] = None,
        reason_text: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> DecisionOutcome:
        """
        Record a decision and apply its weight deltas.

        Raises ValidationError for missing/invalid fields, NotFoundError for an
        unknown article, StorageError if the decision record itself cannot be
        written. Weight failures come back in outcome.weights.
        """
        user_id = _require(user_id, "user_id")
        article_id = _require(article_id, "article_id")
        action = _parse_enum(DecisionAction, action, "action")
        reason = (
            _parse_enum(IgnoreReasonType, ignore_reason, "ignore_reason")
            if ignore_reason is not None
            else None
        )
        if reason is not None and action != DecisionAction.IGNORE:
            raise ValidationError("ignore_reason is only valid with the ignore action")
        if time_taken_seconds is not None and time_taken_seconds < 0:
            raise ValidationError("time_taken_seconds must be >= 0")
        now = now or utc_now()

        with user_context(user_id):
            article = self._load_article(article_id)
            confidence = infer_confidence(
                action,
                has_ignore_reason=reason is not None,
                time_taken_seconds=time_taken_seconds,
                config=self.config,
            )

            # 1) Decision record
            decision = self.decision_store.upsert_decision(
                Decision(
                    user_id=user_id,
                    article_id=article_id,
                    action=action,
                    inferred_confidence=confidence,
                    time_taken_seconds=time_taken_seconds,
                    created_at=now,
                    updated_at=now,
                )
            )

            # 2) Weight deltas (failures collected, never raised)
            weights = update_weights_from_decision(
                self.weight_store,
                user_id,
                article,
                action,
                confidence=confidence,
                now=now,
                config=self.config,
            )

            # 3) Reason-scoped adjustments on top of the decision delta
            reason_outcome = None
            if reason is not None:
                reason_outcome = self._apply_ignore_reason(user_id, article, reason, reason_text, now)

            logger.info(
                "Recorded %s on article=%s (confidence=%s, weights updated=%d failed=%d)",
                action.value,
                article_id,
                confidence.value,
                len(weights.updates) + (len(reason_outcome.weights.updates) if reason_outcome else 0),
                len(weights.failures) + (len(reason_outcome.weights.failures) if reason_outcome else 0),
            )
            return DecisionOutcome(decision=decision, weights=weights, ignore_reason=reason_outcome)

    def record_ignore_reason(
        self,
        user_id: str,
        article_id: str,
        reason: Union[IgnoreReasonType, str],
        reason_text: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> IgnoreReasonOutcome:
        """Attach a reason to an already ignored article: scoped deltas plus an audit record."""
        user_id = _require(user_id, "user_id")
        article_id = _require(article_id, "article_id")
        reason = _parse_enum(IgnoreReasonType, reason, "reason_type")
        now = now or utc_now()
        with user_context(user_id):
            article = self._load_article(article_id)
            return self._apply_ignore_reason(user_id, article, reason, reason_text, now)

    def _apply_ignore_reason(
        self,
        user_id: str,
        article: ArticleSignals,
        reason: IgnoreReasonType,
        reason_text: Optional[str],
        now: datetime,
    ) -> IgnoreReasonOutcome:
        adjustments = calculate_ignore_weight_adjustments(reason, article, reason_text)
        weights = apply_weight_adjustments(
            self.weight_store,
            user_id,
            adjustments,
            now=now,
            confidence=ConfidenceLevel.MEDIUM,
            config=self.config,
        )
        applied: List[WeightAdjustment] = [
            WeightAdjustment(feature_key=u.feature_key, delta=u.delta) for u in weights.updates
        ]
        record, error = self._append_record(
            IgnoreReasonRecord(
                user_id=user_id,
                article_id=article.article_id,
                reason_type=reason,
                reason_text=(reason_text or "").strip() or None,
                signals_snapshot=article.snapshot(),
                applied_adjustments=applied,
                created_at=now,
            )
        )
        if error is not None:
            logger.warning(
                "Ignore reason %s for article=%s not logged: %s", reason.value, article.article_id, error
            )
        return IgnoreReasonOutcome(weights=weights, record=record)

    def _append_record(
        self, record: IgnoreReasonRecord
    ) -> Tuple[Optional[IgnoreReasonRecord], Optional[StorageError]]:
        try:
            return self.ignore_log.append(record), None
        except StorageError as e:
            return None, e

    def list_decisions(self, user_id: str) -> List[Decision]:
        return self.decision_store.list_decisions(_require(user_id, "user_id"))
