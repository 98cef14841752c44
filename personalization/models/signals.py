"""
Signal catalog: feature types, scoring multipliers, and the per-article signal input.

Contains:
- SignalType: the five feature types extracted upstream from content
- Feature: an immutable (type, value) pair with its stable feature_key
- normalize_feature_key / parse_feature_key: build keys from user input or read upstream keys
- ArticleSignals: one content item's feature keys plus its base relevance score
"""

import re
from enum import Enum
from typing import Any, Dict, Iterator, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SignalType(str, Enum):
    """Feature types detected on an article by the upstream signal extractor."""

    CATEGORY = "category"
    ENTITY = "entity"
    TOOL = "tool"
    CONCEPT = "concept"
    CONTEXT = "context"


# Scoring multiplier per feature type. Narrow signals (entity+concept contexts,
# concepts) move the score far more than broad categories.
SIGNAL_MULTIPLIERS: Dict[SignalType, float] = {
    SignalType.CONTEXT: 0.70,
    SignalType.CONCEPT: 0.40,
    SignalType.ENTITY: 0.15,
    SignalType.TOOL: 0.15,
    SignalType.CATEGORY: 0.05,
}

# Order used whenever signals are iterated by type.
SIGNAL_TYPE_ORDER: Tuple[SignalType, ...] = (
    SignalType.CATEGORY,
    SignalType.ENTITY,
    SignalType.TOOL,
    SignalType.CONCEPT,
    SignalType.CONTEXT,
)

_WHITESPACE = re.compile(r"\s+")
_DISALLOWED = re.compile(r"[^a-z0-9_\-]")


class Feature(BaseModel):
    """A (type, value) pair derived from content, e.g. concept:agents."""

    model_config = ConfigDict(frozen=True)

    type: SignalType
    value: str

    @property
    def key(self) -> str:
        """Stable serialization used as the weight store key."""
        return f"{self.type.value}:{self.value}"

    def __str__(self) -> str:
        return self.key


def normalize_feature_key(type_: Union[SignalType, str], value: str) -> Feature:
    """
    Build a Feature from user-supplied names.

    Type is lowercased; value is lowercased, trimmed, whitespace runs become
    underscores, and anything outside [a-z0-9_-] is dropped.
    """
    norm_type = SignalType(str(getattr(type_, "value", type_)).strip().lower())
    norm_value = _WHITESPACE.sub("_", value.strip().lower())
    norm_value = _DISALLOWED.sub("", norm_value)
    if not norm_value:
        raise ValueError(f"Feature value {value!r} is empty after normalization")
    return Feature(type=norm_type, value=norm_value)


def parse_feature_key(key: str) -> Feature:
    """
    Parse a feature key produced upstream ("concept:agents").

    Splits on the first colon only: context values embed other keys
    ("context:entity:grok|concept:undress").
    """
    type_part, sep, value = key.partition(":")
    if not sep or not value:
        raise ValueError(f"Malformed feature key: {key!r}")
    return Feature(type=SignalType(type_part.strip().lower()), value=value)


class ArticleSignals(BaseModel):
    """
    Read-only input for one content item.

    Per-type lists hold full feature keys ("category:agents"). base_score is the
    externally supplied relevance score (0-100). intent_label/intent_confidence
    come from upstream intent detection when available.
    """

    model_config = ConfigDict(extra="allow")

    article_id: str
    base_score: float = 50.0
    title: Optional[str] = None
    categories: List[str] = Field(default_factory=list)
    entities: List[str] = Field(default_factory=list)
    tools: List[str] = Field(default_factory=list)
    concepts: List[str] = Field(default_factory=list)
    contexts: List[str] = Field(default_factory=list)
    intent_label: Optional[str] = None
    intent_confidence: Optional[float] = None

    @field_validator("categories", "entities", "tools", "concepts", "contexts", mode="before")
    @classmethod
    def _none_to_empty(cls, v: Any) -> Any:
        return [] if v is None else v

    def keys_for(self, signal_type: SignalType) -> List[str]:
        """Feature keys of one type, in upstream order."""
        return {
            SignalType.CATEGORY: self.categories,
            SignalType.ENTITY: self.entities,
            SignalType.TOOL: self.tools,
            SignalType.CONCEPT: self.concepts,
            SignalType.CONTEXT: self.contexts,
        }[signal_type]

    def iter_keys(self) -> Iterator[Tuple[SignalType, str]]:
        """Yield (type, key) for every distinct key on the article."""
        seen = set()
        for signal_type in SIGNAL_TYPE_ORDER:
            for key in self.keys_for(signal_type):
                if key and key not in seen:
                    seen.add(key)
                    yield signal_type, key

    @property
    def all_keys(self) -> List[str]:
        return [key for _, key in self.iter_keys()]

    def snapshot(self) -> Dict[str, List[str]]:
        """Per-type key lists, as recorded alongside ignore reasons."""
        return {
            "categories": list(self.categories),
            "entities": list(self.entities),
            "tools": list(self.tools),
            "concepts": list(self.concepts),
            "contexts": list(self.contexts),
        }


def ensure_articles(
    items: List[Union[Dict[str, Any], "ArticleSignals"]],
) -> List["ArticleSignals"]:
    """Convert list of dicts or ArticleSignals to ArticleSignals models for the pipeline."""
    return [
        ArticleSignals.model_validate(a) if isinstance(a, dict) else a
        for a in items
    ]
