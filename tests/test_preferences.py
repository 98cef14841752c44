"""
Preference Control Tests: mute, unmute, reset, manual adjust, summary.
"""

import pytest

from personalization.errors import ValidationError
from personalization.models import PersonalizationConfig, WeightState
from personalization.stages import score_articles

from feedback.preferences import PreferenceService


@pytest.fixture
def prefs(weight_store):
    return PreferenceService(weight_store)


class TestPreferenceService:
    def test_mute_excludes_from_scoring(self, prefs, weight_store, make_article, now):
        prefs.adjust("alice", "concept", "crypto", -5.0, now=now)
        muted = prefs.mute("alice", "concept", "Crypto", now=now)
        assert muted.state == WeightState.MUTED
        assert muted.weight == -5.0

        article = make_article(base_score=50, concepts=["concept:crypto"])
        [scored] = score_articles([article], weight_store.list_weights("alice"), now=now)
        assert scored.adjusted_score == 50
        assert scored.suppressed == []

        prefs.unmute("alice", "concept", "crypto", now=now)
        [scored] = score_articles([article], weight_store.list_weights("alice"), now=now)
        assert scored.adjusted_score == pytest.approx(48.0)

    def test_mute_unknown_feature_creates_record(self, prefs, weight_store, now):
        prefs.mute("alice", "entity", "Elon Musk", now=now)
        w = weight_store.get_weight("alice", "entity:elon_musk")
        assert w.state == WeightState.MUTED
        assert w.weight == 0.0

    def test_reset(self, prefs, now):
        prefs.adjust("alice", "category", "agents", 7.0, now=now)
        prefs.mute("alice", "category", "agents", now=now)
        w = prefs.reset("alice", "category", "agents", now=now)
        assert w.weight == 0.0
        assert w.state == WeightState.ACTIVE

    def test_adjust_is_not_a_decision(self, prefs, now):
        w = prefs.adjust("alice", "Tool", "Cursor IDE", 1.5, now=now)
        assert w.feature_key == "tool:cursor_ide"
        assert w.weight == 1.5
        assert w.decision_count == 0

    def test_adjust_clamps(self, prefs, now):
        prefs.adjust("alice", "concept", "rag", 8.0, now=now)
        assert prefs.adjust("alice", "concept", "rag", 8.0, now=now).weight == 10.0

    def test_adjust_uses_configured_max_weight(self, weight_store, now):
        prefs = PreferenceService(weight_store, PersonalizationConfig(max_weight=3.0))
        assert prefs.adjust("alice", "concept", "rag", 8.0, now=now).weight == 3.0
        assert prefs.adjust("alice", "concept", "crypto", -8.0, now=now).weight == -3.0

    @pytest.mark.parametrize("type_,value", [("concept", "!!!"), ("topic", "agents"), ("concept", "")])
    def test_invalid_feature(self, prefs, type_, value):
        with pytest.raises(ValidationError):
            prefs.mute("alice", type_, value)

    def test_adjust_requires_delta(self, prefs):
        with pytest.raises(ValidationError):
            prefs.adjust("alice", "concept", "rag", None)


class TestPreferenceSummary:
    def test_groups_and_orders(self, prefs, now):
        prefs.adjust("alice", "concept", "rag", 3.0, now=now)
        prefs.adjust("alice", "concept", "crypto", -4.0, now=now)
        prefs.adjust("alice", "category", "agents", 1.0, now=now)
        prefs.adjust("alice", "category", "hype", -1.0, now=now)
        prefs.adjust("alice", "entity", "muted_co", 9.0, now=now)
        prefs.mute("alice", "entity", "muted_co", now=now)
        prefs.adjust("bob", "concept", "rag", -3.0, now=now)

        summary = prefs.summary("alice", now=now)
        assert summary.total == 5
        assert [e.feature_key for e in summary.by_type["concept"]] == ["concept:rag", "concept:crypto"]
        assert [e.feature_key for e in summary.boosts] == ["concept:rag", "category:agents"]
        assert [e.feature_key for e in summary.suppressions] == ["concept:crypto", "category:hype"]
        assert summary.by_type["entity"][0].state == WeightState.MUTED
        assert summary.boosts[0].display == "+3.0"

    def test_limit(self, prefs, now):
        for i in range(5):
            prefs.adjust("alice", "concept", f"c{i}", float(i + 1), now=now)
        assert len(prefs.summary("alice", now=now, limit=2).boosts) == 2

    def test_empty(self, prefs, now):
        summary = prefs.summary("nobody", now=now)
        assert summary.total == 0 and summary.by_type == {}
