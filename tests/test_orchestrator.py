"""
Ranking Pipeline Tests: score -> blind spots -> serendipity -> ranks and actions,
with graceful degradation to base scores.
"""

import numpy as np
import pytest

from personalization.models import DecisionAction
from personalization.stages import orchestrator, rank_articles


def _articles(make_article, n, step=3.0):
    return [
        make_article(f"a{i:02d}", base_score=90 - step * i, concepts=[f"concept:c{i}"], intent_label="news")
        for i in range(n)
    ]


class TestRankArticles:
    def test_sorted_ranked_and_actioned(self, make_article, make_weight, now):
        articles = _articles(make_article, 5, step=0.5)
        # Boost the last article to the top
        weights = [make_weight("concept:c4", 10.0)]
        result = rank_articles(articles, weights, now=now, rng=np.random.default_rng(0))
        assert [s.article_id for s in result.articles] == ["a04", "a00", "a01", "a02", "a03"]
        assert [s.rank for s in result.articles] == [1, 2, 3, 4, 5]
        assert result.articles[0].adjusted_score == pytest.approx(92.0)
        assert all(s.suggested_action is not None and s.action_rationale for s in result.articles)
        assert not result.degraded
        assert result.generated_at == now

    def test_action_uses_adjusted_score(self, make_article, make_weight, now):
        article = make_article("r", base_score=72, concepts=["concept:llm"], intent_label="release")
        plain = rank_articles([article], [], now=now).articles[0]
        boosted = rank_articles([article], [make_weight("concept:llm", 10.0)], now=now).articles[0]
        assert plain.suggested_action == DecisionAction.EXPERIMENT
        assert boosted.suggested_action == DecisionAction.INTEGRATE

    def test_serendipity_and_top_n(self, make_article, now):
        result = rank_articles(_articles(make_article, 20), [], now=now, rng=np.random.default_rng(11), top_n=10)
        assert len(result.articles) == 10
        assert [s.rank for s in result.articles] == list(range(1, 11))
        assert [i for i, s in enumerate(result.articles) if s.is_serendipity] == [5, 8]

    def test_blind_spots_reported_and_annotated(self, make_article, make_weight, now):
        articles = [
            make_article("crypto", 50, categories=["category:crypto"]),
            make_article("agents", 60, categories=["category:agents"]),
        ]
        weights = [make_weight("category:crypto", -6.0, weeks_ago=10, decision_count=4)]
        result = rank_articles(articles, weights, now=now)
        assert [a.feature_key for a in result.blind_spot_alerts] == ["category:crypto"]
        by_id = {s.article_id: s for s in result.articles}
        assert by_id["crypto"].is_blind_spot_injection
        assert not by_id["agents"].is_blind_spot_injection

    def test_given_alerts_are_used(self, make_article, make_weight, now):
        weights = [make_weight("category:crypto", -6.0, weeks_ago=10, decision_count=4)]
        result = rank_articles([make_article("a", categories=["category:crypto"])], weights, now=now, blind_spot_alerts=[])
        assert result.blind_spot_alerts == []
        assert not result.articles[0].is_blind_spot_injection

    def test_empty_input(self, now):
        result = rank_articles([], [], now=now)
        assert result.articles == []
        assert not result.degraded

    def test_degrades_to_base_scores(self, make_article, make_weight, now, monkeypatch):
        def boom(*args, **kwargs):
            raise RuntimeError("weights corrupted")

        monkeypatch.setattr(orchestrator, "score_articles", boom)
        articles = _articles(make_article, 4)
        result = rank_articles(articles, [make_weight("concept:c3", 10.0)], now=now)
        assert result.degraded
        assert [s.article_id for s in result.articles] == ["a00", "a01", "a02", "a03"]
        for s in result.articles:
            assert s.adjusted_score == s.base_score
            assert not s.is_personalized
            assert s.rank is not None and s.suggested_action is not None
