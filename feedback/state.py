"""Application state: stores, engine config, and the services built on them."""

import logging
from typing import Optional

from personalization.models import PersonalizationConfig

from .config import ServiceConfig, get_config
from .decisions import DecisionService
from .preferences import PreferenceService
from .ranking import RankingService
from .services import (
    ArticleSignalProvider,
    DecisionStore,
    IgnoreReasonLog,
    InMemoryArticleProvider,
    InMemoryDecisionStore,
    InMemoryIgnoreReasonLog,
    InMemoryWeightStore,
    JsonDecisionStore,
    JsonIgnoreReasonLog,
    JsonWeightStore,
    WeightStore,
)

logger = logging.getLogger(__name__)


class AppState:
    """Global application state."""

    def __init__(
        self,
        config: ServiceConfig,
        articles: Optional[ArticleSignalProvider] = None,
    ):
        self.config = config
        self.personalization_config: PersonalizationConfig = config.load_personalization_config()

        # Stores: memory, JSON files, or Firestore per WEIGHT_STORE
        self.weight_store: WeightStore
        self.decision_store: DecisionStore
        self.ignore_log: IgnoreReasonLog
        self._create_stores(config)
        logger.info("Weight store: %s", type(self.weight_store).__name__)

        self.articles = articles if articles is not None else self._create_article_provider(config)

        # Services
        self.decisions = DecisionService(
            self.weight_store,
            self.decision_store,
            self.ignore_log,
            self.articles,
            self.personalization_config,
        )
        self.ranking = RankingService(self.weight_store, self.personalization_config)
        self.preferences = PreferenceService(self.weight_store, self.personalization_config)

    def _create_stores(self, config: ServiceConfig) -> None:
        if config.weight_store == "firebase":
            from .services.firestore_store import (
                FirestoreDecisionStore,
                FirestoreIgnoreReasonLog,
                FirestoreWeightStore,
                init_firestore,
            )

            client = init_firestore(config.firebase_project_id, config.firebase_credentials_path)
            self.weight_store = FirestoreWeightStore(client=client)
            self.decision_store = FirestoreDecisionStore(client=client)
            self.ignore_log = FirestoreIgnoreReasonLog(client=client)
        elif config.weight_store == "json":
            self.weight_store = JsonWeightStore(config.weights_json_path)
            self.decision_store = JsonDecisionStore(config.decisions_json_path)
            self.ignore_log = JsonIgnoreReasonLog(config.ignore_reasons_json_path)
        else:
            self.weight_store = InMemoryWeightStore()
            self.decision_store = InMemoryDecisionStore()
            self.ignore_log = InMemoryIgnoreReasonLog()

    def _create_article_provider(self, config: ServiceConfig) -> ArticleSignalProvider:
        if config.articles_json_path is not None:
            return InMemoryArticleProvider.from_json(config.articles_json_path)
        return InMemoryArticleProvider()


_state: Optional[AppState] = None


def get_state() -> AppState:
    """Get the global application state, building it from get_config() on first use."""
    global _state
    if _state is None:
        config = get_config()
        ok, errors = config.validate()
        if not ok:
            raise ValueError("Invalid configuration: " + "; ".join(errors))
        _state = AppState(config)
    return _state


def reset_state() -> None:
    global _state
    _state = None
