"""
Settings for the correlation and matching engine.

Each concern gets a dataclass section whose defaults come from
``thresholds``.  ``load_settings()`` applies environment overrides (after
loading a ``.env`` file) and ``SettingsService`` offers dict views and
in-place updates for admin tooling.
"""

import logging
import os
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, Optional, Tuple

from dotenv import load_dotenv

from .thresholds import (
    TITLE_SIMILARITY_GATE,
    TITLE_WEIGHT,
    DESCRIPTION_SIMILARITY_GATE,
    DESCRIPTION_WEIGHT,
    CATEGORY_WEIGHT,
    SEVERITY_WEIGHT,
    PROXIMITY_RADIUS_KM,
    PROXIMITY_WEIGHT,
    TIME_WINDOW_HOURS,
    TIME_SIMILARITY_GATE,
    TIME_WEIGHT,
    TEXT_JACCARD_WEIGHT,
    TEXT_EDIT_WEIGHT,
    SIMILARITY_THRESHOLD,
    MIN_CORROBORATING_SIGNALS,
    DUPLICATE_THRESHOLD,
    LINK_CONFIDENCE_THRESHOLD,
    MAX_LINKS_PER_REPORT,
    MAX_POOL_SIZE,
    MATCH_BASE_SCORE,
    MATCH_MAX_SUFFICIENCY_BONUS,
    MATCH_PROXIMITY_BANDS,
    MATCH_DEFAULT_PROXIMITY_BONUS,
    MATCH_URGENCY_BONUS,
    MIN_MATCH_SCORE,
    MAX_MATCHES,
    SCORER_TIMEOUT_SECONDS,
)

logger = logging.getLogger(__name__)

DEFAULT_LLM_MODEL = "claude-sonnet-4-20250514"


@dataclass
class SimilaritySettings:
    """Per-signal gates and weights for pairwise report similarity."""
    title_gate: float = TITLE_SIMILARITY_GATE
    title_weight: float = TITLE_WEIGHT
    description_gate: float = DESCRIPTION_SIMILARITY_GATE
    description_weight: float = DESCRIPTION_WEIGHT
    category_weight: float = CATEGORY_WEIGHT
    severity_weight: float = SEVERITY_WEIGHT
    proximity_radius_km: float = PROXIMITY_RADIUS_KM
    proximity_weight: float = PROXIMITY_WEIGHT
    time_window_hours: float = TIME_WINDOW_HOURS
    time_gate: float = TIME_SIMILARITY_GATE
    time_weight: float = TIME_WEIGHT
    text_jaccard_weight: float = TEXT_JACCARD_WEIGHT
    text_edit_weight: float = TEXT_EDIT_WEIGHT


@dataclass
class DuplicateDetectionSettings:
    """Duplicate detection and clustering thresholds."""
    min_similarity: float = SIMILARITY_THRESHOLD
    min_reasons: int = MIN_CORROBORATING_SIGNALS
    duplicate_threshold: float = DUPLICATE_THRESHOLD
    link_confidence_threshold: float = LINK_CONFIDENCE_THRESHOLD
    max_links: int = MAX_LINKS_PER_REPORT
    max_pool_size: int = MAX_POOL_SIZE


@dataclass
class MatchingSettings:
    """Request/offer matching configuration."""
    base_score: int = MATCH_BASE_SCORE
    max_sufficiency_bonus: int = MATCH_MAX_SUFFICIENCY_BONUS
    proximity_bands: Tuple[Tuple[float, int], ...] = MATCH_PROXIMITY_BANDS
    default_proximity_bonus: int = MATCH_DEFAULT_PROXIMITY_BONUS
    urgency_bonus: Dict[str, int] = field(default_factory=lambda: dict(MATCH_URGENCY_BONUS))
    min_match_score: float = MIN_MATCH_SCORE
    max_matches: int = MAX_MATCHES
    scorer_timeout_seconds: float = SCORER_TIMEOUT_SECONDS
    enable_external_scoring: bool = False


@dataclass
class LLMSettings:
    """LLM provider routing for the external match scorer."""
    provider: str = "anthropic"
    model: str = DEFAULT_LLM_MODEL
    fallback_provider: Optional[str] = None
    fallback_model: Optional[str] = None
    ollama_base_url: str = "http://localhost:11434/v1"
    max_tokens: int = 1500


@dataclass
class AllSettings:
    """All engine settings combined."""
    similarity: SimilaritySettings = field(default_factory=SimilaritySettings)
    duplicate_detection: DuplicateDetectionSettings = field(default_factory=DuplicateDetectionSettings)
    matching: MatchingSettings = field(default_factory=MatchingSettings)
    llm: LLMSettings = field(default_factory=LLMSettings)


SECTIONS = ("similarity", "duplicate_detection", "matching", "llm")


def _env_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


# env var -> (section, key, converter)
ENV_OVERRIDES = {
    "RELIEF_DUPLICATE_THRESHOLD": ("duplicate_detection", "duplicate_threshold", float),
    "RELIEF_CLUSTER_THRESHOLD": ("duplicate_detection", "min_similarity", float),
    "RELIEF_MIN_REASONS": ("duplicate_detection", "min_reasons", int),
    "RELIEF_MAX_POOL_SIZE": ("duplicate_detection", "max_pool_size", int),
    "RELIEF_ENABLE_EXTERNAL_SCORING": ("matching", "enable_external_scoring", _env_bool),
    "RELIEF_SCORER_TIMEOUT": ("matching", "scorer_timeout_seconds", float),
    "RELIEF_LLM_PROVIDER": ("llm", "provider", str),
    "RELIEF_LLM_MODEL": ("llm", "model", str),
    "OLLAMA_BASE_URL": ("llm", "ollama_base_url", str),
}


def load_settings(environ: Optional[Dict[str, str]] = None) -> AllSettings:
    """
    Build settings from defaults plus environment overrides.

    When ``environ`` is None the process environment is used, after
    loading a ``.env`` file if one exists.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ

    settings = AllSettings()
    for var, (section, key, convert) in ENV_OVERRIDES.items():
        raw = environ.get(var)
        if raw is None or raw == "":
            continue
        try:
            value = convert(raw)
        except ValueError:
            logger.warning(f"Ignoring invalid value for {var}: {raw!r}")
            continue
        setattr(getattr(settings, section), key, value)
        logger.debug(f"{var} -> {section}.{key} = {value}")
    return settings


class SettingsService:
    """Service for reading and updating engine settings."""

    def __init__(self, settings: Optional[AllSettings] = None):
        self._settings = settings or AllSettings()

    @property
    def settings(self) -> AllSettings:
        return self._settings

    def get_all(self) -> dict:
        """Get all settings as a dict."""
        return {name: self.get_section(name) for name in SECTIONS}

    def get_section(self, name: str) -> dict:
        """Get one settings section as a dict."""
        if name not in SECTIONS:
            raise KeyError(f"Unknown settings section: {name}")
        return asdict(getattr(self._settings, name))

    def update_section(self, name: str, config: Dict[str, Any]) -> dict:
        """Update a settings section in place, ignoring unknown keys."""
        if name not in SECTIONS:
            raise KeyError(f"Unknown settings section: {name}")
        section = getattr(self._settings, name)
        for key, value in config.items():
            if hasattr(section, key):
                setattr(section, key, value)
                logger.info(f"Updated {name}.{key} = {value}")
            else:
                logger.debug(f"Ignoring unknown setting {name}.{key}")
        return self.get_section(name)
