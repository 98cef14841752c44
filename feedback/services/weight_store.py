"""
Weight Store abstraction.

Holds per-user, per-feature SignalWeights. The store owns the read-modify-write
of a weight: upsert_delta must be atomic per (user_id, feature_key) so that
concurrent decisions on the same feature never lose an update.

Implementations: in-memory (tests, harness), JSON file (local), Firestore
(production, see firestore_store). Swap via WEIGHT_STORE.
"""

import json
import logging
import os
import threading
from datetime import datetime
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Tuple, Union

from personalization.errors import StorageError
from personalization.models import (
    ConfidenceLevel,
    Feature,
    MAX_WEIGHT,
    SignalWeight,
    WeightState,
    clamp_weight,
)

logger = logging.getLogger(__name__)


class WeightStore(Protocol):
    """Protocol for weight read/write. Implement for memory, JSON file, or Firestore."""

    def list_weights(self, user_id: str) -> List[SignalWeight]:
        """All weights for the user, active and muted."""
        ...

    def get_weight(self, user_id: str, feature_key: str) -> Optional[SignalWeight]:
        ...

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
        """
        Atomically add delta (creating the record if absent), clamping to
        +-max_weight. Returns the stored result.
        """
        ...

    def set_state(
        self, user_id: str, feature: Feature, state: WeightState, now: datetime
    ) -> SignalWeight:
        """Mute or unmute a feature, creating a neutral record if needed."""
        ...

    def reset_weight(self, user_id: str, feature: Feature, now: datetime) -> SignalWeight:
        """Set the raw weight to exactly 0 and reactivate the feature."""
        ...


def apply_delta(
    existing: Optional[SignalWeight],
    user_id: str,
    feature: Feature,
    delta: float,
    now: datetime,
    confidence: ConfidenceLevel = ConfidenceLevel.MEDIUM,
    count_decision: bool = True,
    max_weight: float = MAX_WEIGHT,
) -> SignalWeight:
    """
    The upsert rule, shared by every store.

    Absent: weight = clamp(delta), decision_count = 1. Present: weight =
    clamp(weight + delta), decision_count += 1. clamp bounds to +-max_weight.
    Both stamp last_decision_at. Mute state is left alone.
    """
    base = existing if existing is not None else SignalWeight.new(user_id, feature, now)
    return base.model_copy(
        update={
            "weight": clamp_weight(base.weight + delta, max_weight),
            "decision_count": base.decision_count + (1 if count_decision else 0),
            "last_decision_at": now,
            "last_confidence": ConfidenceLevel(confidence),
            "updated_at": now,
        }
    )


class InMemoryWeightStore:
    """
    Weight store in a dict, guarded by one lock.

    Every write holds the lock across its read and write, which makes
    upsert_delta atomic across threads.
    """

    def __init__(self, weights: Optional[List[SignalWeight]] = None):
        self._lock = threading.Lock()
        self._weights: Dict[Tuple[str, str], SignalWeight] = {}
        for w in weights or []:
            self._weights[(w.user_id, w.feature_key)] = w

    def list_weights(self, user_id: str) -> List[SignalWeight]:
        with self._lock:
            return [w for (uid, _), w in self._weights.items() if uid == user_id]

    def get_weight(self, user_id: str, feature_key: str) -> Optional[SignalWeight]:
        with self._lock:
            return self._weights.get((user_id, feature_key))

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
        with self._lock:
            existing = self._weights.get((user_id, feature.key))
            updated = apply_delta(
                existing, user_id, feature, delta, now, confidence, count_decision, max_weight
            )
            self._commit(updated)
            return updated

    def set_state(
        self, user_id: str, feature: Feature, state: WeightState, now: datetime
    ) -> SignalWeight:
        with self._lock:
            existing = self._weights.get((user_id, feature.key))
            base = existing if existing is not None else SignalWeight.new(user_id, feature, now)
            updated = base.model_copy(update={"state": WeightState(state), "updated_at": now})
            self._commit(updated)
            return updated

    def reset_weight(self, user_id: str, feature: Feature, now: datetime) -> SignalWeight:
        with self._lock:
            existing = self._weights.get((user_id, feature.key))
            base = existing if existing is not None else SignalWeight.new(user_id, feature, now)
            updated = base.model_copy(
                update={"weight": 0.0, "state": WeightState.ACTIVE, "updated_at": now}
            )
            self._commit(updated)
            return updated

    def _commit(self, weight: SignalWeight) -> None:
        """Store one record. Called with the lock held."""
        self._weights[(weight.user_id, weight.feature_key)] = weight


class JsonWeightStore(InMemoryWeightStore):
    """
    Weight store backed by a JSON file (e.g. data/signal_weights.json).

    The whole file is rewritten after every change, still under the lock, via a
    temp file and os.replace so a crash never leaves a half-written file.
    """

    def __init__(self, path: Union[Path, str]):
        super().__init__()
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._load()

    def _load(self) -> None:
        if not self._path.exists():
            return
        try:
            with open(self._path) as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise StorageError(f"Could not read weights from {self._path}: {e}") from e
        for raw in data.get("weights", []):
            w = SignalWeight.model_validate(raw)
            self._weights[(w.user_id, w.feature_key)] = w
        logger.info("Loaded %d signal weights from %s", len(self._weights), self._path)

    def _commit(self, weight: SignalWeight) -> None:
        previous = self._weights.get((weight.user_id, weight.feature_key))
        super()._commit(weight)
        try:
            self._save()
        except OSError as e:
            # Keep memory consistent with disk
            key = (weight.user_id, weight.feature_key)
            if previous is None:
                self._weights.pop(key, None)
            else:
                self._weights[key] = previous
            raise StorageError(f"Could not write weights to {self._path}: {e}") from e

    def _save(self) -> None:
        payload = {"weights": [w.model_dump(mode="json") for w in self._weights.values()]}
        tmp = self._path.with_suffix(self._path.suffix + ".tmp")
        with open(tmp, "w") as f:
            json.dump(payload, f, indent=2)
        os.replace(tmp, self._path)
