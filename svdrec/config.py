"""
Configuration for the decomposition engine and the recommender layer
Defaults ship as svdrec/config.yaml; every section is optional
"""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Any, Dict, Optional, Union

import structlog
import yaml

from .exceptions import ConfigError

logger = structlog.get_logger()

DEFAULT_CONFIG_PATH = Path(__file__).resolve().parent / "config.yaml"


@dataclass(frozen=True)
class SVDConfig:
    """Numerical constants for power iteration with deflation"""

    stop_tolerance: float = 1e-10
    null_tolerance: float = 1e-14
    max_iterations: int = 300

    def __post_init__(self):
        if self.stop_tolerance <= 0 or self.null_tolerance <= 0:
            raise ConfigError("SVD tolerances must be positive")
        if self.max_iterations < 1:
            raise ConfigError(f"max_iterations must be >= 1, got {self.max_iterations}")


@dataclass(frozen=True)
class RatingScale:
    """Rating bounds; a rating equal to ``minimum`` means "not rated" """

    minimum: float = 0.0
    maximum: float = 5.0
    neutral: float = 2.5

    def __post_init__(self):
        if not self.minimum < self.maximum:
            raise ConfigError(f"Invalid rating scale [{self.minimum}, {self.maximum}]")
        if not self.minimum <= self.neutral <= self.maximum:
            raise ConfigError(f"Neutral rating {self.neutral} outside the rating scale")


@dataclass(frozen=True)
class DiscoveryRules:
    """Thresholds that flag a predicted rating as a discovery"""

    min_predicted: float = 3.0
    low_rating: float = 2.0
    min_uplift: float = 1.5


@dataclass(frozen=True)
class Settings:
    svd: SVDConfig = field(default_factory=SVDConfig)
    ratings: RatingScale = field(default_factory=RatingScale)
    discovery: DiscoveryRules = field(default_factory=DiscoveryRules)
    default_rank: int = 3
    cache_size: int = 32


def _build(cls, section: Optional[Dict[str, Any]], name: str):
    """Instantiate a config dataclass from a YAML mapping, rejecting unknown keys"""
    if section is None:
        return cls()
    if not isinstance(section, dict):
        raise ConfigError(f"Section '{name}' must be a mapping")

    known = {f.name for f in fields(cls)}
    unknown = set(section) - known
    if unknown:
        raise ConfigError(f"Unknown keys in section '{name}': {sorted(unknown)}")

    return cls(**section)


def settings_from_dict(config: Dict[str, Any]) -> Settings:
    """Build Settings from an already parsed configuration mapping"""
    config = dict(config or {})

    svd = _build(SVDConfig, config.pop("svd", None), "svd")
    ratings = _build(RatingScale, config.pop("ratings", None), "ratings")
    discovery = _build(DiscoveryRules, config.pop("discovery", None), "discovery")

    session = config.pop("session", None) or {}
    if config:
        raise ConfigError(f"Unknown configuration sections: {sorted(config)}")

    unknown = set(session) - {"default_rank", "cache_size"}
    if unknown:
        raise ConfigError(f"Unknown keys in section 'session': {sorted(unknown)}")

    default_rank = int(session.get("default_rank", 3))
    cache_size = int(session.get("cache_size", 32))
    if default_rank < 1:
        raise ConfigError(f"default_rank must be >= 1, got {default_rank}")
    if cache_size < 1:
        raise ConfigError(f"cache_size must be >= 1, got {cache_size}")

    return Settings(
        svd=svd,
        ratings=ratings,
        discovery=discovery,
        default_rank=default_rank,
        cache_size=cache_size,
    )


def load_settings(config_path: Optional[Union[str, Path]] = None) -> Settings:
    """Load settings from YAML, falling back to defaults when the file is absent"""
    path = Path(config_path) if config_path is not None else DEFAULT_CONFIG_PATH

    if not path.exists():
        logger.warning("Config file not found, using defaults", path=str(path))
        return Settings()

    with open(path, "r") as f:
        config = yaml.safe_load(f)

    if config is not None and not isinstance(config, dict):
        raise ConfigError(f"Top level of {path} must be a mapping")

    settings = settings_from_dict(config or {})
    logger.info("Configuration loaded", path=str(path))
    return settings
