"""
Decision store and ignore-reason log.

Decisions are unique per (user_id, article_id) and upserted on repeat: the
first created_at is kept, everything else is replaced. Ignore reasons are an
append-only audit log returned newest first.
"""

import json
import logging
import os
import threading
from pathlib import Path
from typing import Dict, List, Optional, Protocol, Tuple, Union

from personalization.errors import StorageError
from personalization.models import Decision, IgnoreReasonRecord

logger = logging.getLogger(__name__)


class DecisionStore(Protocol):
    """Protocol for decision persistence."""

    def upsert_decision(self, decision: Decision) -> Decision:
        """Insert or replace the user's decision on the article. Returns the stored record."""
        ...

    def get_decision(self, user_id: str, article_id: str) -> Optional[Decision]:
        ...

    def list_decisions(self, user_id: str) -> List[Decision]:
        ...


class IgnoreReasonLog(Protocol):
    """Protocol for the append-only ignore-reason audit log."""

    def append(self, record: IgnoreReasonRecord) -> IgnoreReasonRecord:
        ...

    def list_records(self, user_id: str, limit: Optional[int] = None) -> List[IgnoreReasonRecord]:
        """The user's records, newest first."""
        ...


def merge_decision(existing: Optional[Decision], incoming: Decision) -> Decision:
    """Upsert rule: keep the original created_at on repeat decisions."""
    if existing is None:
        return incoming
    return incoming.model_copy(update={"created_at": existing.created_at})


def newest_first(
    records: List[IgnoreReasonRecord], limit: Optional[int] = None
) -> List[IgnoreReasonRecord]:
    # Reverse before the stable sort so ties keep newest-appended first
    ordered = sorted(reversed(records), key=lambda r: r.created_at, reverse=True)
    return ordered[:limit] if limit is not None else ordered


class InMemoryDecisionStore:
    """Decision store in a dict (tests, harness)."""

    def __init__(self):
        self._lock = threading.Lock()
        self._decisions: Dict[Tuple[str, str], Decision] = {}

    def upsert_decision(self, decision: Decision) -> Decision:
        with self._lock:
            key = (decision.user_id, decision.article_id)
            stored = merge_decision(self._decisions.get(key), decision)
            self._commit(stored)
            return stored

    def get_decision(self, user_id: str, article_id: str) -> Optional[Decision]:
        with self._lock:
            return self._decisions.get((user_id, article_id))

    def list_decisions(self, user_id: str) -> List[Decision]:
        with self._lock:
            return [d for (uid, _), d in self._decisions.items() if uid == user_id]

    def _commit(self, decision: Decision) -> None:
        self._decisions[(decision.user_id, decision.article_id)] = decision


class InMemoryIgnoreReasonLog:
    """Ignore-reason log in a list (tests, harness)."""

    def __init__(self):
        self._lock = threading.Lock()
        self._records: List[IgnoreReasonRecord] = []

    def append(self, record: IgnoreReasonRecord) -> IgnoreReasonRecord:
        with self._lock:
            self._records.append(record)
            self._commit()
            return record

    def list_records(self, user_id: str, limit: Optional[int] = None) -> List[IgnoreReasonRecord]:
        with self._lock:
            mine = [r for r in self._records if r.user_id == user_id]
        return newest_first(mine, limit)

    def _commit(self) -> None:
        pass


def _write_json(path: Path, payload: dict) -> None:
    tmp = path.with_suffix(path.suffix + ".tmp")
    with open(tmp, "w") as f:
        json.dump(payload, f, indent=2)
    os.replace(tmp, path)


def _read_json(path: Path) -> dict:
    if not path.exists():
        return {}
    try:
        with open(path) as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise StorageError(f"Could not read {path}: {e}") from e


class JsonDecisionStore(InMemoryDecisionStore):
    """Decision store backed by a JSON file (e.g. data/decisions.json)."""

    def __init__(self, path: Union[Path, str]):
        super().__init__()
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        for raw in _read_json(self._path).get("decisions", []):
            d = Decision.model_validate(raw)
            self._decisions[(d.user_id, d.article_id)] = d

    def _commit(self, decision: Decision) -> None:
        key = (decision.user_id, decision.article_id)
        previous = self._decisions.get(key)
        super()._commit(decision)
        payload = {"decisions": [d.model_dump(mode="json") for d in self._decisions.values()]}
        try:
            _write_json(self._path, payload)
        except OSError as e:
            # Keep memory consistent with disk
            if previous is None:
                self._decisions.pop(key, None)
            else:
                self._decisions[key] = previous
            raise StorageError(f"Could not write decisions to {self._path}: {e}") from e


class JsonIgnoreReasonLog(InMemoryIgnoreReasonLog):
    """Ignore-reason log backed by a JSON file (e.g. data/ignore_reasons.json)."""

    def __init__(self, path: Union[Path, str]):
        super().__init__()
        self._path = Path(path)
        self._path.parent.mkdir(parents=True, exist_ok=True)
        self._records = [
            IgnoreReasonRecord.model_validate(raw)
            for raw in _read_json(self._path).get("ignore_reasons", [])
        ]

    def _commit(self) -> None:
        payload = {"ignore_reasons": [r.model_dump(mode="json") for r in self._records]}
        try:
            _write_json(self._path, payload)
        except OSError as e:
            self._records.pop()
            raise StorageError(f"Could not write ignore reasons to {self._path}: {e}") from e
