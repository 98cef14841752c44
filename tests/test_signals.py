"""
Signal Catalog Tests: feature keys, parsing and the article input model.
"""

import pytest

from personalization.models import (
    SIGNAL_MULTIPLIERS,
    ArticleSignals,
    Feature,
    SignalType,
    normalize_feature_key,
    parse_feature_key,
)


class TestFeatureKeys:
    def test_key_format(self):
        assert Feature(type=SignalType.CONCEPT, value="agents").key == "concept:agents"

    def test_feature_is_immutable(self):
        feature = Feature(type=SignalType.CONCEPT, value="agents")
        with pytest.raises(Exception):
            feature.value = "other"

    def test_normalize_user_input(self):
        feature = normalize_feature_key(" Category ", "  Machine   Learning! ")
        assert feature.key == "category:machine_learning"

    def test_normalize_keeps_dash_and_digits(self):
        assert normalize_feature_key("tool", "GPT-4o").key == "tool:gpt-4o"

    def test_normalize_rejects_empty_value(self):
        with pytest.raises(ValueError):
            normalize_feature_key("concept", "!!!")

    def test_normalize_rejects_unknown_type(self):
        with pytest.raises(ValueError):
            normalize_feature_key("topic", "agents")

    def test_parse_splits_on_first_colon(self):
        feature = parse_feature_key("context:entity:grok|concept:undress")
        assert feature.type == SignalType.CONTEXT
        assert feature.value == "entity:grok|concept:undress"
        assert feature.key == "context:entity:grok|concept:undress"

    @pytest.mark.parametrize("key", ["agents", "concept:", "nope:agents"])
    def test_parse_rejects_malformed(self, key):
        with pytest.raises(ValueError):
            parse_feature_key(key)

    def test_multiplier_table(self):
        assert SIGNAL_MULTIPLIERS == {
            SignalType.CONTEXT: 0.70,
            SignalType.CONCEPT: 0.40,
            SignalType.ENTITY: 0.15,
            SignalType.TOOL: 0.15,
            SignalType.CATEGORY: 0.05,
        }


class TestArticleSignals:
    def test_iter_keys_is_distinct_and_typed(self):
        article = ArticleSignals(
            article_id="a",
            categories=["category:agents", "category:agents"],
            concepts=["concept:rag"],
            contexts=["context:entity:x|concept:rag"],
        )
        assert list(article.iter_keys()) == [
            (SignalType.CATEGORY, "category:agents"),
            (SignalType.CONCEPT, "concept:rag"),
            (SignalType.CONTEXT, "context:entity:x|concept:rag"),
        ]

    def test_null_lists_become_empty(self):
        article = ArticleSignals.model_validate({"article_id": "a", "tools": None})
        assert article.tools == []
        assert article.base_score == 50.0

    def test_snapshot(self, agents_article):
        snap = agents_article.snapshot()
        assert snap["categories"] == ["category:agents", "category:tools"]
        assert set(snap) == {"categories", "entities", "tools", "concepts", "contexts"}
