"""
Shared fixtures: a fixed clock, weight and article builders, and in-memory stores.
"""

from datetime import datetime, timedelta, timezone

import pytest

from personalization.models import (
    ArticleSignals,
    ConfidenceLevel,
    SignalWeight,
    WeightState,
    parse_feature_key,
)

from feedback.services import (
    InMemoryArticleProvider,
    InMemoryDecisionStore,
    InMemoryIgnoreReasonLog,
    InMemoryWeightStore,
)

NOW = datetime(2026, 3, 2, 12, 0, tzinfo=timezone.utc)


@pytest.fixture
def now():
    return NOW


@pytest.fixture
def make_weight():
    """Build a SignalWeight whose last decision was weeks_ago before NOW."""

    def _make(
        key,
        weight,
        weeks_ago=0.0,
        user_id="alice",
        state=WeightState.ACTIVE,
        decision_count=1,
        confidence=ConfidenceLevel.MEDIUM,
    ):
        feature = parse_feature_key(key)
        last = NOW - timedelta(weeks=weeks_ago) if decision_count else None
        return SignalWeight(
            user_id=user_id,
            feature_key=feature.key,
            feature_type=feature.type,
            feature_value=feature.value,
            weight=weight,
            state=state,
            decision_count=decision_count,
            last_decision_at=last,
            last_confidence=confidence,
            created_at=NOW - timedelta(weeks=52),
            updated_at=last or NOW,
        )

    return _make


@pytest.fixture
def make_article():
    def _make(article_id="a1", base_score=60.0, **signals):
        return ArticleSignals(article_id=article_id, base_score=base_score, **signals)

    return _make


@pytest.fixture
def agents_article(make_article):
    return make_article(
        "agents-1",
        base_score=70.0,
        title="Agent frameworks compared",
        categories=["category:agents", "category:tools"],
        entities=["entity:openai"],
        tools=["tool:langgraph"],
        concepts=["concept:rag"],
        contexts=["context:entity:openai|concept:rag"],
        intent_label="benchmark",
    )


@pytest.fixture
def weight_store():
    return InMemoryWeightStore()


@pytest.fixture
def decision_store():
    return InMemoryDecisionStore()


@pytest.fixture
def ignore_log():
    return InMemoryIgnoreReasonLog()


@pytest.fixture
def article_provider(agents_article, make_article):
    return InMemoryArticleProvider(
        [
            agents_article,
            make_article("tools-only", base_score=55.0, tools=["tool:cursor"]),
        ]
    )
