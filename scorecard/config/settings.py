"""
Application settings using Pydantic Settings.

Environment variables are loaded from .env file. Build one Settings
instance at startup and hand it to every component that needs it.
"""
from typing import Dict, List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from scorecard.config.constants import (
    CATEGORY_NAMES,
    CONGRESS_GOV,
    DEFAULT_CACHE_DURATION_MS,
    DEFAULT_CATEGORY_AXES,
    DEFAULT_CATEGORY_WEIGHT,
    DEFAULT_RATE_LIMITS,
    DEFAULT_SOURCES,
    GOVTRACK,
    PROMISE_TRACKER,
    RATE_LIMIT_WINDOW_SECONDS,
)


class Settings(BaseSettings):
    """
    Evaluation configuration loaded from environment variables.

    Create a .env file in the project root with these values.
    """
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    # ========================================================================
    # External APIs
    # ========================================================================

    # Congress.gov API (get key at: https://api.congress.gov/sign-up/)
    CONGRESS_GOV_API_KEY: Optional[str] = None

    # GovTrack does not require a key, but one can be supplied for proxies
    GOVTRACK_API_KEY: Optional[str] = None

    # Campaign promise tracker
    PROMISE_TRACKER_API_KEY: Optional[str] = None

    ENABLED_SOURCES: List[str] = Field(default_factory=lambda: list(DEFAULT_SOURCES))

    HTTP_TIMEOUT_SECONDS: float = 30.0
    SOURCE_TIMEOUT_SECONDS: float = 60.0

    # ========================================================================
    # Rate limiting & caching
    # ========================================================================
    RATE_LIMITS: Dict[str, int] = Field(default_factory=lambda: dict(DEFAULT_RATE_LIMITS))
    RATE_LIMIT_WINDOW_SECONDS: float = RATE_LIMIT_WINDOW_SECONDS
    RATE_LIMIT_WAIT_TIMEOUT_SECONDS: float = 30.0

    CACHE_ENABLED: bool = True
    CACHE_DURATION_MS: int = DEFAULT_CACHE_DURATION_MS

    # ========================================================================
    # Orchestration
    # ========================================================================
    MAX_CONCURRENT_EVALUATIONS: int = 4
    EVALUATION_TIMEOUT_SECONDS: float = 300.0
    STEP_RETRY_ATTEMPTS: int = 2  # first attempt + one retry
    RETRY_BACKOFF_SECONDS: float = 1.0

    # ========================================================================
    # Scoring
    # ========================================================================
    CATEGORY_WEIGHTS: Dict[str, float] = Field(
        default_factory=lambda: {name: DEFAULT_CATEGORY_WEIGHT for name in CATEGORY_NAMES}
    )
    # confidence(n) = 1 - exp(-n / CONFIDENCE_GROWTH_RATE)
    CONFIDENCE_GROWTH_RATE: float = 5.0
    COVERAGE_PENALTY: float = 0.5
    CONFIDENCE_THRESHOLD: float = 0.7

    # ========================================================================
    # Bias detection
    # ========================================================================
    BIAS_DETECTION_ENABLED: bool = True
    SOURCE_CONCENTRATION_THRESHOLD: float = 0.7
    SOURCE_CONCENTRATION_PENALTY: float = 0.8
    CATEGORY_AXES: Dict[str, str] = Field(default_factory=lambda: dict(DEFAULT_CATEGORY_AXES))
    WEIGHT_SKEW_TOLERANCE: float = 0.15
    TEMPORAL_WINDOW_FRACTION: float = 0.1
    TEMPORAL_CONCENTRATION_THRESHOLD: float = 0.8
    TEMPORAL_MIN_RECORDS: int = 3
    TEMPORAL_PENALTY: float = 0.9
    EXTREME_SCORE_THRESHOLD: float = 90.0
    MIN_EVIDENCE_FOR_EXTREME_SCORE: int = 10
    ALGORITHMIC_CONFIDENCE_CAP: float = 0.3

    # ========================================================================
    # Storage (optional)
    # ========================================================================
    MONGODB_URI: Optional[str] = None
    MONGODB_DATABASE: str = "politician_scorecard"

    # ========================================================================
    # Logging
    # ========================================================================
    LOG_LEVEL: str = "INFO"
    LOG_FORMAT: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

    @field_validator("CATEGORY_WEIGHTS")
    @classmethod
    def _check_weights(cls, value: Dict[str, float]) -> Dict[str, float]:
        for name, weight in value.items():
            if name not in CATEGORY_NAMES:
                raise ValueError(f"Unknown category in CATEGORY_WEIGHTS: {name}")
            if not 0.0 <= weight <= 1.0:
                raise ValueError(f"Weight for {name} must be within [0, 1], got {weight}")
        return value

    @field_validator("CATEGORY_AXES")
    @classmethod
    def _check_axes(cls, value: Dict[str, str]) -> Dict[str, str]:
        unknown = [name for name in value if name not in CATEGORY_NAMES]
        if unknown:
            raise ValueError(f"Unknown categories in CATEGORY_AXES: {unknown}")
        return value

    @field_validator("RATE_LIMITS")
    @classmethod
    def _check_rate_limits(cls, value: Dict[str, int]) -> Dict[str, int]:
        for source, limit in value.items():
            if limit <= 0:
                raise ValueError(f"Rate limit for {source} must be positive, got {limit}")
        return value

    @field_validator(
        "CONFIDENCE_THRESHOLD",
        "COVERAGE_PENALTY",
        "SOURCE_CONCENTRATION_THRESHOLD",
        "SOURCE_CONCENTRATION_PENALTY",
        "WEIGHT_SKEW_TOLERANCE",
        "TEMPORAL_WINDOW_FRACTION",
        "TEMPORAL_CONCENTRATION_THRESHOLD",
        "TEMPORAL_PENALTY",
        "ALGORITHMIC_CONFIDENCE_CAP",
    )
    @classmethod
    def _check_fraction(cls, value: float) -> float:
        if not 0.0 <= value <= 1.0:
            raise ValueError(f"Value must be within [0, 1], got {value}")
        return value

    @field_validator(
        "CACHE_DURATION_MS",
        "MAX_CONCURRENT_EVALUATIONS",
        "STEP_RETRY_ATTEMPTS",
        "CONFIDENCE_GROWTH_RATE",
        "RATE_LIMIT_WINDOW_SECONDS",
    )
    @classmethod
    def _check_positive(cls, value):
        if value <= 0:
            raise ValueError(f"Value must be positive, got {value}")
        return value

    @property
    def api_keys_by_source(self) -> dict[str, Optional[str]]:
        """API key for each known source (None when not configured)"""
        return {
            CONGRESS_GOV: self.CONGRESS_GOV_API_KEY,
            GOVTRACK: self.GOVTRACK_API_KEY,
            PROMISE_TRACKER: self.PROMISE_TRACKER_API_KEY,
        }

    @property
    def rate_limits_by_source(self) -> dict[str, int]:
        return dict(self.RATE_LIMITS)

    @property
    def cache_ttl_seconds(self) -> float:
        return self.CACHE_DURATION_MS / 1000.0

    def category_weight(self, category: str) -> float:
        """Declared weight for a category, falling back to the uniform default"""
        return self.CATEGORY_WEIGHTS.get(category, DEFAULT_CATEGORY_WEIGHT)


def load_settings(**overrides) -> Settings:
    """Build the Settings object once at startup."""
    return Settings(**overrides)
