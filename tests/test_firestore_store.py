"""
Firestore Store Tests

Exercised against a mocked client: document paths and ids, and backend errors
(google.api_core exceptions) surfacing as StorageError.
"""

from unittest.mock import MagicMock

import pytest
from google.api_core import exceptions as google_exceptions

from personalization.errors import StorageError
from personalization.models import IgnoreReasonRecord

from feedback.services.firestore_store import (
    FirestoreDecisionStore,
    FirestoreIgnoreReasonLog,
    FirestoreWeightStore,
    doc_id,
)


@pytest.fixture
def client():
    return MagicMock()


def _subcollection(client):
    """The mock standing in for users/{uid}/<subcollection>."""
    return client.collection.return_value.document.return_value.collection.return_value


class TestDocIds:
    def test_keys_are_quoted(self):
        assert doc_id("concept:rag") == "concept%3Arag"
        assert doc_id("context:entity:grok|concept:undress") == "context%3Aentity%3Agrok%7Cconcept%3Aundress"
        assert "/" not in doc_id("category:a/b")


class TestFirestoreWeightStore:
    def test_get_weight_path_and_missing(self, client):
        snap = _subcollection(client).document.return_value.get.return_value
        snap.exists = False
        store = FirestoreWeightStore(client=client)

        assert store.get_weight("alice", "concept:rag") is None
        client.collection.assert_called_with("users")
        client.collection.return_value.document.assert_called_with("alice")
        client.collection.return_value.document.return_value.collection.assert_called_with("signal_weights")
        _subcollection(client).document.assert_called_with("concept%3Arag")

    def test_backend_error_becomes_storage_error(self, client):
        _subcollection(client).stream.side_effect = google_exceptions.ServiceUnavailable("firestore down")
        with pytest.raises(StorageError) as exc:
            FirestoreWeightStore(client=client).list_weights("alice")
        assert isinstance(exc.value.__cause__, google_exceptions.GoogleAPIError)


class TestFirestoreDecisionStore:
    def test_get_decision_error(self, client):
        _subcollection(client).document.return_value.get.side_effect = google_exceptions.DeadlineExceeded("slow")
        with pytest.raises(StorageError):
            FirestoreDecisionStore(client=client).get_decision("alice", "a1")


class TestFirestoreIgnoreReasonLog:
    def test_append_creates_by_record_id(self, client, now):
        record = IgnoreReasonRecord(user_id="alice", article_id="a1", reason_type="noise", created_at=now)
        assert FirestoreIgnoreReasonLog(client=client).append(record) is record
        _subcollection(client).document.assert_called_with(record.id)
        _subcollection(client).document.return_value.create.assert_called_once_with(
            record.model_dump(mode="json")
        )

    def test_existing_record_is_not_overwritten(self, client, now):
        _subcollection(client).document.return_value.create.side_effect = google_exceptions.Conflict("exists")
        record = IgnoreReasonRecord(user_id="alice", article_id="a1", reason_type="noise", created_at=now)
        with pytest.raises(StorageError):
            FirestoreIgnoreReasonLog(client=client).append(record)
