"""
Serendipity Tests

Lists of 10+ only. Top 30% excluded, base_score >= 40 required,
floor(total * 15%) picks re-inserted at min(5 + 3i, len).
"""

import numpy as np
import pytest

from personalization.models import ArticleSignals, PersonalizationConfig, ScoredArticle
from personalization.stages import SERENDIPITY_REASON, apply_serendipity


def _scored(n, base=lambda i: 90 - 2 * i):
    return [
        ScoredArticle(
            article=ArticleSignals(article_id=f"a{i:02d}", base_score=base(i)),
            base_score=base(i),
            adjusted_score=base(i),
        )
        for i in range(n)
    ]


class TestApplySerendipity:
    def test_twenty_articles_get_three_picks_outside_top_six(self):
        scored = _scored(20)
        result = apply_serendipity(scored, rng=np.random.default_rng(7))
        picks = [s for s in result if s.is_serendipity]
        assert len(picks) == 3
        top_six = {s.article_id for s in scored[:6]}
        assert not top_six & {s.article_id for s in picks}
        assert all(s.serendipity_reason == SERENDIPITY_REASON for s in picks)
        assert sorted(s.article_id for s in result) == sorted(s.article_id for s in scored)

    def test_insert_positions(self):
        result = apply_serendipity(_scored(20), rng=np.random.default_rng(1))
        assert [i for i, s in enumerate(result) if s.is_serendipity] == [5, 8, 11]

    def test_non_picks_stay_sorted(self):
        result = apply_serendipity(_scored(20)[::-1], rng=np.random.default_rng(3))
        rest = [s.adjusted_score for s in result if not s.is_serendipity]
        assert rest == sorted(rest, reverse=True)

    def test_seeded_rng_is_reproducible(self):
        first = apply_serendipity(_scored(30), rng=np.random.default_rng(42))
        second = apply_serendipity(_scored(30), rng=np.random.default_rng(42))
        assert [s.article_id for s in first] == [s.article_id for s in second]
        assert [s.is_serendipity for s in first] == [s.is_serendipity for s in second]

    def test_every_candidate_can_be_picked(self):
        seen = set()
        for seed in range(200):
            result = apply_serendipity(_scored(20), rng=np.random.default_rng(seed))
            seen.update(s.article_id for s in result if s.is_serendipity)
        assert seen == {f"a{i:02d}" for i in range(6, 20)}

    @pytest.mark.parametrize("n", [0, 1, 9])
    def test_short_lists_untouched(self, n):
        result = apply_serendipity(_scored(n), rng=np.random.default_rng(0))
        assert not any(s.is_serendipity for s in result)
        assert len(result) == n

    def test_low_base_scores_are_not_candidates(self):
        # Only a06 and a07 clear the base score floor outside the top 30%
        scored = _scored(20, base=lambda i: 90 - 2 * i if i < 8 else 30 - i)
        result = apply_serendipity(scored, rng=np.random.default_rng(0))
        picks = {s.article_id for s in result if s.is_serendipity}
        assert picks == {"a06", "a07"}

    def test_disabled(self):
        config = PersonalizationConfig(serendipity_enabled=False)
        result = apply_serendipity(_scored(20), config, rng=np.random.default_rng(0))
        assert not any(s.is_serendipity for s in result)

    def test_inputs_not_mutated(self):
        scored = _scored(20)
        apply_serendipity(scored, rng=np.random.default_rng(5))
        assert not any(s.is_serendipity for s in scored)
        assert [s.article_id for s in scored] == [f"a{i:02d}" for i in range(20)]

    def test_works_without_explicit_rng(self):
        assert sum(s.is_serendipity for s in apply_serendipity(_scored(20))) == 3
