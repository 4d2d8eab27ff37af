"""Configuration management for InsightSnap."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml
from dotenv import load_dotenv

from src.models import MAX_QUERY_LENGTH

# Load environment variables from .env file
load_dotenv()


@dataclass
class ClassifierConfig:
    """Scoring and allocation configuration."""
    per_category_limit: int = 3
    engagement_damping: float = 8.0  # ln(engagement + 1) / damping
    question_bonus: float = 0.8  # Per "?", content only
    exclamation_bonus: float = 0.3  # Per "!", trending only
    emotional_bonus: float = 0.4  # Per distinct emotional word
    emotional_categories: list[str] = field(default_factory=lambda: ["pain"])
    platform_bonuses: dict[str, float] = field(default_factory=lambda: {
        "reddit": 0.2,  # Longer discussions
        "x": 0.1,  # Trending-heavy
        "youtube": 0.0,
    })
    # Per-category keyword overrides: {category: {keyword: weight}}
    lexicons: dict[str, dict[str, int]] = field(default_factory=dict)


@dataclass
class SearchConfig:
    """Search orchestration configuration."""
    platforms: list[str] = field(default_factory=lambda: ["reddit", "x", "youtube"])
    language: str = "en"
    time_filter: str = "week"  # hour / day / week / month / year / all
    timeout_seconds: float = 25.0
    max_query_length: int = 500
    # Platform -> JSON file of already-fetched posts
    sources: dict[str, str] = field(default_factory=dict)


@dataclass
class UIConfig:
    """UI configuration."""
    host: str = "127.0.0.1"
    port: int = 8000
    debug: bool = False


@dataclass
class LoggingConfig:
    """Logging configuration."""
    level: str = "INFO"
    format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    datefmt: str = "%H:%M:%S"


@dataclass
class Config:
    """Main configuration container."""
    classifier: ClassifierConfig = field(default_factory=ClassifierConfig)
    search: SearchConfig = field(default_factory=SearchConfig)
    ui: UIConfig = field(default_factory=UIConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)


def _dict_to_dataclass(data: dict[str, Any], cls: type) -> Any:
    """Convert a dictionary to a dataclass instance."""
    if not data:
        return cls()

    field_names = set(cls.__dataclass_fields__)

    kwargs = {}
    for key, value in data.items():
        if key in field_names:
            kwargs[key] = value

    return cls(**kwargs)


def load_config(config_path: str | Path | None = None) -> Config:
    """Load configuration from YAML file.

    Args:
        config_path: Path to config file. If None, uses INSIGHTSNAP_CONFIG,
            then config/local.yaml, then config/default.yaml.

    Returns:
        Config object with all settings.
    """
    if config_path is None:
        config_path = os.getenv("INSIGHTSNAP_CONFIG") or None

    if config_path is None:
        local_config = Path("config/local.yaml")
        default_config = Path("config/default.yaml")

        if local_config.exists():
            config_path = local_config
        elif default_config.exists():
            config_path = default_config
        else:
            return _apply_env_overrides(Config())

    config_path = Path(config_path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with open(config_path, "r") as f:
        data = yaml.safe_load(f) or {}

    config = Config(
        classifier=_dict_to_dataclass(data.get("classifier", {}), ClassifierConfig),
        search=_dict_to_dataclass(data.get("search", {}), SearchConfig),
        ui=_dict_to_dataclass(data.get("ui", {}), UIConfig),
        logging=_dict_to_dataclass(data.get("logging", {}), LoggingConfig),
    )

    return _apply_env_overrides(config)


def _apply_env_overrides(config: Config) -> Config:
    """Apply environment variable overrides."""
    level = os.getenv("LOG_LEVEL")
    if level:
        config.logging.level = level.upper()
    return config


def validate_config(config: Config) -> list[str]:
    """Check configuration values.

    Returns:
        List of problems (empty if the configuration is usable).
    """
    errors = []
    clf = config.classifier

    if clf.per_category_limit < 1:
        errors.append("classifier.per_category_limit must be at least 1")
    if clf.engagement_damping <= 0:
        errors.append("classifier.engagement_damping must be positive")

    for name in ("question_bonus", "exclamation_bonus", "emotional_bonus"):
        if getattr(clf, name) < 0:
            errors.append(f"classifier.{name} cannot be negative")

    for platform, bonus in clf.platform_bonuses.items():
        if bonus < 0:
            errors.append(f"classifier.platform_bonuses.{platform} cannot be negative")

    for category in clf.emotional_categories:
        if category not in ("pain", "trending", "content"):
            errors.append(f"classifier.emotional_categories: unknown category '{category}'")

    for category, overrides in clf.lexicons.items():
        if category not in ("pain", "trending", "content"):
            errors.append(f"classifier.lexicons: unknown category '{category}'")
            continue
        for keyword, weight in (overrides or {}).items():
            if not isinstance(weight, int) or isinstance(weight, bool) or weight < 1:
                errors.append(
                    f"classifier.lexicons.{category}.{keyword}: weight must be a positive integer"
                )

    if config.search.timeout_seconds <= 0:
        errors.append("search.timeout_seconds must be positive")
    if not 1 <= config.search.max_query_length <= MAX_QUERY_LENGTH:
        errors.append(f"search.max_query_length must be between 1 and {MAX_QUERY_LENGTH}")

    for platform, path in config.search.sources.items():
        if not Path(path).exists():
            errors.append(f"search.sources.{platform}: file not found: {path}")

    if logging.getLevelName(config.logging.level.upper()) == f"Level {config.logging.level.upper()}":
        errors.append(f"logging.level: unknown level '{config.logging.level}'")

    return errors


def setup_logging(config: Config | None = None, verbose: bool = False) -> None:
    """Configure root logging for CLI and server entry points."""
    if config is None:
        config = get_config()

    level = logging.DEBUG if verbose else config.logging.level.upper()
    logging.basicConfig(
        level=level,
        format=config.logging.format,
        datefmt=config.logging.datefmt,
    )
    logging.getLogger("src").setLevel(level)


# Global config instance (lazy loaded)
_config: Config | None = None


def get_config() -> Config:
    """Get the global config instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reload_config(config_path: str | Path | None = None) -> Config:
    """Reload configuration from file."""
    global _config
    _config = load_config(config_path)
    return _config
