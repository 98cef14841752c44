"""
Feedback service: stores, decision intake, ranking and preference controls
around the personalization engine.

- services/: weight store, decision store, ignore-reason log, article provider
- decisions: DecisionService
- ranking: RankingService
- preferences: PreferenceService
- config / logging_config / state: environment, logging, wiring
"""

from .decisions import DecisionOutcome, DecisionService, IgnoreReasonOutcome
from .preferences import PreferenceEntry, PreferenceService, PreferenceSummary
from .ranking import RankingService

__all__ = [
    "DecisionOutcome",
    "DecisionService",
    "IgnoreReasonOutcome",
    "PreferenceEntry",
    "PreferenceService",
    "PreferenceSummary",
    "RankingService",
]
