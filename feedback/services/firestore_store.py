"""
Firestore stores: per-user subcollections under users/{user_id}.

- signal_weights/{feature_key}: one SignalWeight per document
- decisions/{article_id}: one Decision per article
- ignore_reasons/{record_id}: append-only IgnoreReasonRecords

Used when WEIGHT_STORE=firebase. All three share one Firebase app (same
credentials_path and project_id). Read-modify-write runs in a Firestore
transaction, so concurrent upserts on one feature retry instead of losing an
update. Backend errors are re-raised as StorageError.
"""

import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Union
from urllib.parse import quote

import firebase_admin
from firebase_admin import credentials, firestore
from google.api_core import exceptions as google_exceptions

from personalization.errors import StorageError
from personalization.models import (
    ConfidenceLevel,
    Decision,
    Feature,
    IgnoreReasonRecord,
    MAX_WEIGHT,
    SignalWeight,
    WeightState,
)

from .decision_store import merge_decision
from .weight_store import apply_delta

logger = logging.getLogger(__name__)

# Limit for list_records when no limit is given
IGNORE_REASONS_READ_LIMIT = 500


def init_firestore(
    project_id: Optional[str] = None,
    credentials_path: Optional[Union[Path, str]] = None,
):
    """Initialize the default Firebase app once and return a Firestore client."""
    if not firebase_admin._apps:
        if credentials_path:
            cred = credentials.Certificate(str(Path(credentials_path).resolve()))
            opts = {"projectId": project_id} if project_id else None
            firebase_admin.initialize_app(cred, opts)
        else:
            firebase_admin.initialize_app(options={"projectId": project_id} if project_id else None)
    return firestore.client()


def doc_id(key: str) -> str:
    """Firestore-safe document id; feature keys contain ':' and context keys '|'."""
    return quote(key, safe="")


class _FirestoreBase:
    def __init__(
        self,
        project_id: Optional[str] = None,
        credentials_path: Optional[Union[Path, str]] = None,
        client=None,
    ):
        self._db = client if client is not None else init_firestore(project_id, credentials_path)

    def _user_ref(self, user_id: str):
        return self._db.collection("users").document(user_id)


class FirestoreWeightStore(_FirestoreBase):
    """Weight store backed by users/{user_id}/signal_weights."""

    def _weights_ref(self, user_id: str):
        return self._user_ref(user_id).collection("signal_weights")

    def list_weights(self, user_id: str) -> List[SignalWeight]:
        try:
            return [
                SignalWeight.model_validate(doc.to_dict())
                for doc in self._weights_ref(user_id).stream()
            ]
        except google_exceptions.GoogleAPIError as e:
            raise StorageError(f"list_weights failed for user={user_id!r}: {e}") from e

    def get_weight(self, user_id: str, feature_key: str) -> Optional[SignalWeight]:
        try:
            snap = self._weights_ref(user_id).document(doc_id(feature_key)).get()
        except google_exceptions.GoogleAPIError as e:
            raise StorageError(f"get_weight failed for {feature_key!r}: {e}") from e
        return SignalWeight.model_validate(snap.to_dict()) if snap.exists else None

    def _transact(self, user_id: str, feature: Feature, mutate) -> SignalWeight:
        """Run mutate(existing) -> SignalWeight inside a transaction and store the result."""
        doc_ref = self._weights_ref(user_id).document(doc_id(feature.key))

        @firestore.transactional
        def _run(transaction):
            snap = doc_ref.get(transaction=transaction)
            existing = SignalWeight.model_validate(snap.to_dict()) if snap.exists else None
            updated = mutate(existing)
            transaction.set(doc_ref, updated.model_dump(mode="json"))
            return updated

        try:
            return _run(self._db.transaction())
        except google_exceptions.GoogleAPIError as e:
            raise StorageError(f"Weight write failed for {feature.key!r}: {e}") from e

    def upsert_delta(
        self,
        user_id: str,
        feature: Feature,
        delta: float,
        now: datetime,
        confidence: ConfidenceLevel = ConfidenceLevel.MEDIUM,
        count_decision: bool = True,
        max_weight: float = MAX_WEIGHT,
    ) -> SignalWeight:
        return self._transact(
            user_id,
            feature,
            lambda existing: apply_delta(
                existing, user_id, feature, delta, now, confidence, count_decision, max_weight
            ),
        )

    def set_state(
        self, user_id: str, feature: Feature, state: WeightState, now: datetime
    ) -> SignalWeight:
        def _mutate(existing):
            base = existing or SignalWeight.new(user_id, feature, now)
            return base.model_copy(update={"state": WeightState(state), "updated_at": now})

        return self._transact(user_id, feature, _mutate)

    def reset_weight(self, user_id: str, feature: Feature, now: datetime) -> SignalWeight:
        def _mutate(existing):
            base = existing or SignalWeight.new(user_id, feature, now)
            return base.model_copy(
                update={"weight": 0.0, "state": WeightState.ACTIVE, "updated_at": now}
            )

        return self._transact(user_id, feature, _mutate)


class FirestoreDecisionStore(_FirestoreBase):
    """Decision store backed by users/{user_id}/decisions."""

    def _decisions_ref(self, user_id: str):
        return self._user_ref(user_id).collection("decisions")

    def upsert_decision(self, decision: Decision) -> Decision:
        doc_ref = self._decisions_ref(decision.user_id).document(doc_id(decision.article_id))

        @firestore.transactional
        def _run(transaction):
            snap = doc_ref.get(transaction=transaction)
            existing = Decision.model_validate(snap.to_dict()) if snap.exists else None
            stored = merge_decision(existing, decision)
            transaction.set(doc_ref, stored.model_dump(mode="json"))
            return stored

        try:
            return _run(self._db.transaction())
        except google_exceptions.GoogleAPIError as e:
            raise StorageError(
                f"upsert_decision failed for article={decision.article_id!r}: {e}"
            ) from e

    def get_decision(self, user_id: str, article_id: str) -> Optional[Decision]:
        try:
            snap = self._decisions_ref(user_id).document(doc_id(article_id)).get()
        except google_exceptions.GoogleAPIError as e:
            raise StorageError(f"get_decision failed for article={article_id!r}: {e}") from e
        return Decision.model_validate(snap.to_dict()) if snap.exists else None

    def list_decisions(self, user_id: str) -> List[Decision]:
        try:
            return [
                Decision.model_validate(doc.to_dict())
                for doc in self._decisions_ref(user_id).stream()
            ]
        except google_exceptions.GoogleAPIError as e:
            raise StorageError(f"list_decisions failed for user={user_id!r}: {e}") from e


class FirestoreIgnoreReasonLog(_FirestoreBase):
    """Ignore-reason log backed by users/{user_id}/ignore_reasons."""

    def _reasons_ref(self, user_id: str):
        return self._user_ref(user_id).collection("ignore_reasons")

    def append(self, record: IgnoreReasonRecord) -> IgnoreReasonRecord:
        try:
            # create() fails if the id exists; records are never overwritten
            self._reasons_ref(record.user_id).document(record.id).create(
                record.model_dump(mode="json")
            )
        except google_exceptions.GoogleAPIError as e:
            raise StorageError(f"append ignore reason failed for user={record.user_id!r}: {e}") from e
        return record

    def list_records(self, user_id: str, limit: Optional[int] = None) -> List[IgnoreReasonRecord]:
        query = self._reasons_ref(user_id).order_by(
            "created_at", direction=firestore.Query.DESCENDING
        ).limit(limit if limit is not None else IGNORE_REASONS_READ_LIMIT)
        try:
            return [IgnoreReasonRecord.model_validate(doc.to_dict()) for doc in query.stream()]
        except google_exceptions.GoogleAPIError as e:
            raise StorageError(f"list ignore reasons failed for user={user_id!r}: {e}") from e
