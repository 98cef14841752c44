"""
Suggested actions: map an adjusted score and detected intent to a next step.

Rules are evaluated top-down, first match wins; a high-scoring controversy
then overrides whatever was picked.
"""

from typing import Optional, Tuple

from ..models.config import PersonalizationConfig, resolve_config
from ..models.decisions import DecisionAction

RATIONALES = {
    "release": "New release with high relevance. Consider adopting it now.",
    "how-to": "High-value how-to guide. Follow the steps and fold it into your workflow.",
    "benchmark": "Strong benchmark results. Run your own test to validate.",
    "experiment_controversy": "Significant controversy. Understand the risks before deciding.",
    "experiment_research": "Promising research. Spike it to test fit for your use case.",
    "experiment": "Worth exploring. Schedule a time-boxed spike this week.",
    "monitor_opinion": "Interesting perspective. Save it for future reference.",
    "monitor": "Not actionable yet. Keep watching for developments.",
    "controversy_override": "High-impact controversy. Assess the risk to your projects now.",
}


def _normalize_intent(intent: Optional[str]) -> str:
    return (intent or "").strip().lower()


def suggest_action(
    score: float,
    intent: Optional[str] = None,
    config: Optional[PersonalizationConfig] = None,
) -> Tuple[DecisionAction, str]:
    """Return (action, rationale) for one article."""
    config = resolve_config(config)
    intent = _normalize_intent(intent)

    if score >= config.integrate_threshold and intent in ("release", "how-to"):
        action, rationale = DecisionAction.INTEGRATE, RATIONALES[intent]
    elif score >= config.integrate_threshold and intent == "benchmark":
        action, rationale = DecisionAction.EXPERIMENT, RATIONALES["benchmark"]
    elif score >= config.experiment_threshold:
        action = DecisionAction.EXPERIMENT
        if intent in ("controversy", "research"):
            rationale = RATIONALES[f"experiment_{intent}"]
        else:
            rationale = RATIONALES["experiment"]
    else:
        action = DecisionAction.MONITOR
        rationale = RATIONALES["monitor_opinion"] if intent == "opinion" else RATIONALES["monitor"]

    if intent == "controversy" and score >= config.controversy_threshold:
        action, rationale = DecisionAction.EXPERIMENT, RATIONALES["controversy_override"]

    return action, rationale
