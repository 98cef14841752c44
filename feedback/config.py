"""
Service Configuration

Loads configuration from environment variables and provides defaults.
Reads the project .env with python-dotenv.
"""

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv

from personalization.models.config import PersonalizationConfig

BASE_DIR = Path(__file__).resolve().parent.parent

load_dotenv(BASE_DIR / ".env")

WEIGHT_STORE_CHOICES = ("memory", "json", "firebase")
LOG_FORMAT_CHOICES = ("json", "text")


@dataclass
class ServiceConfig:
    """Service configuration."""

    # Store backend: "memory" | "json" | "firebase"
    weight_store: str = "memory"

    # When weight_store=json: files holding weights and decisions/ignore reasons
    weights_json_path: Path = BASE_DIR / "data" / "signal_weights.json"
    decisions_json_path: Path = BASE_DIR / "data" / "decisions.json"
    ignore_reasons_json_path: Path = BASE_DIR / "data" / "ignore_reasons.json"

    # Optional JSON dump of article signals for the local provider
    articles_json_path: Optional[Path] = None

    # When weight_store=firebase: service account JSON and optional project id
    firebase_credentials_path: Optional[Path] = None
    firebase_project_id: Optional[str] = None

    # Optional JSON file with engine parameter overrides (PersonalizationConfig.from_dict)
    personalization_config_path: Optional[Path] = None

    # Logging
    log_level: str = "INFO"
    log_format: str = "json"

    @classmethod
    def from_env(cls) -> "ServiceConfig":
        """Load configuration from environment variables."""

        def _path_env(key: str, default: Optional[Path] = None) -> Optional[Path]:
            v = os.getenv(key)
            if not v:
                return default
            p = Path(v)
            return p if p.is_absolute() else (BASE_DIR / p).resolve()

        return cls(
            weight_store=os.getenv("WEIGHT_STORE", "memory").strip().lower() or "memory",
            weights_json_path=_path_env("WEIGHTS_JSON_PATH", cls.weights_json_path),
            decisions_json_path=_path_env("DECISIONS_JSON_PATH", cls.decisions_json_path),
            ignore_reasons_json_path=_path_env(
                "IGNORE_REASONS_JSON_PATH", cls.ignore_reasons_json_path
            ),
            articles_json_path=_path_env("ARTICLES_JSON_PATH"),
            firebase_credentials_path=(
                _path_env("FIREBASE_CREDENTIALS_PATH") or _path_env("GOOGLE_APPLICATION_CREDENTIALS")
            ),
            firebase_project_id=os.getenv("FIREBASE_PROJECT_ID") or None,
            personalization_config_path=_path_env("PERSONALIZATION_CONFIG_PATH"),
            log_level=os.getenv("LOG_LEVEL", "INFO").strip().upper() or "INFO",
            log_format=os.getenv("LOG_FORMAT", "json").strip().lower() or "json",
        )

    def validate(self) -> tuple[bool, list[str]]:
        """
        Validate the configuration.

        Returns:
            (is_valid, list_of_errors)
        """
        errors = []

        if self.weight_store not in WEIGHT_STORE_CHOICES:
            errors.append(
                f"WEIGHT_STORE must be one of {', '.join(WEIGHT_STORE_CHOICES)}, got {self.weight_store!r}"
            )
        if self.weight_store == "firebase" and self.firebase_credentials_path is not None:
            if not self.firebase_credentials_path.is_file():
                errors.append(f"Firebase credentials file not found: {self.firebase_credentials_path}")
        if self.articles_json_path is not None and not self.articles_json_path.is_file():
            errors.append(f"Articles file not found: {self.articles_json_path}")
        if self.personalization_config_path is not None and not self.personalization_config_path.is_file():
            errors.append(f"Personalization config not found: {self.personalization_config_path}")
        if self.log_format not in LOG_FORMAT_CHOICES:
            errors.append(f"LOG_FORMAT must be json or text, got {self.log_format!r}")

        return len(errors) == 0, errors

    def load_personalization_config(self) -> PersonalizationConfig:
        """Engine parameters: defaults merged with the optional JSON override file."""
        if self.personalization_config_path is None:
            return PersonalizationConfig()
        with open(self.personalization_config_path) as f:
            return PersonalizationConfig.from_dict(json.load(f))


# Global config instance
_config: Optional[ServiceConfig] = None


def get_config() -> ServiceConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = ServiceConfig.from_env()
    return _config


def reload_config() -> ServiceConfig:
    """Reload configuration from environment."""
    global _config
    _config = None
    return get_config()
