"""
Blind Spot Tests

Active weights below -1, last decision at least 6 whole weeks ago, at least
3 decisions; most negative first; at most 2 alerts.
"""

from personalization.models import WeightState
from personalization.stages import annotate_blind_spots, find_blind_spots, score_articles


class TestFindBlindSpots:
    def test_qualifying_weight(self, make_weight, now):
        [alert] = find_blind_spots([make_weight("category:crypto", -4.0, weeks_ago=8, decision_count=5)], now)
        assert alert.feature_key == "category:crypto"
        assert alert.feature_value == "crypto"
        assert alert.weeks_ignored == 8
        assert alert.ignore_count == 5
        assert alert.weight == -4.0
        assert "crypto" in alert.message and "8 weeks" in alert.message

    def test_thresholds(self, make_weight, now):
        weights = [
            make_weight("concept:too_recent", -5.0, weeks_ago=5.9, decision_count=9),
            make_weight("concept:too_few", -5.0, weeks_ago=10, decision_count=2),
            make_weight("concept:too_mild", -1.0, weeks_ago=10, decision_count=9),
            make_weight("concept:muted", -6.0, weeks_ago=10, decision_count=9, state=WeightState.MUTED),
            make_weight("concept:positive", 6.0, weeks_ago=10, decision_count=9),
        ]
        assert find_blind_spots(weights, now) == []

    def test_exactly_six_weeks_qualifies(self, make_weight, now):
        assert len(find_blind_spots([make_weight("concept:x", -2.0, weeks_ago=6, decision_count=3)], now)) == 1

    def test_most_negative_first_and_capped(self, make_weight, now):
        weights = [
            make_weight("concept:a", -2.0, weeks_ago=7, decision_count=3),
            make_weight("concept:b", -9.0, weeks_ago=7, decision_count=3),
            make_weight("concept:c", -5.0, weeks_ago=7, decision_count=3),
        ]
        alerts = find_blind_spots(weights, now)
        assert [a.feature_key for a in alerts] == ["concept:b", "concept:c"]

    def test_cap_counts_qualifying_only(self, make_weight, now):
        weights = [
            make_weight("concept:recent", -9.0, weeks_ago=1, decision_count=3),
            make_weight("concept:a", -4.0, weeks_ago=7, decision_count=3),
        ]
        assert [a.feature_key for a in find_blind_spots(weights, now)] == ["concept:a"]

    def test_message_is_deterministic(self, make_weight, now):
        weights = [make_weight("concept:vector_dbs", -3.0, weeks_ago=9, decision_count=4)]
        first = find_blind_spots(weights, now)[0].message
        assert find_blind_spots(weights, now)[0].message == first
        assert "vector dbs" in first


class TestAnnotateBlindSpots:
    def test_marks_matching_articles(self, make_article, make_weight, now):
        weights = [make_weight("category:crypto", -4.0, weeks_ago=8, decision_count=5)]
        articles = [
            make_article("c", 40, categories=["category:crypto"]),
            make_article("x", 70, categories=["category:agents"]),
        ]
        scored = score_articles(articles, weights, now=now)
        annotated = annotate_blind_spots(scored, find_blind_spots(weights, now))
        by_id = {s.article_id: s for s in annotated}
        assert by_id["c"].is_blind_spot_injection
        assert "crypto" in by_id["c"].blind_spot_message
        assert not by_id["x"].is_blind_spot_injection
        assert [s.article_id for s in annotated] == [s.article_id for s in scored]
        assert not scored[0].is_blind_spot_injection

    def test_no_alerts(self, make_article, now):
        scored = score_articles([make_article("a")], [], now=now)
        assert annotate_blind_spots(scored, []) == scored
