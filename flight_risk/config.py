"""
Flight Risk Scoring Engine - Configuration.

============================================================
PURPOSE
============================================================
Defines all configuration dataclasses and threshold values
for the Flight Risk Scoring Engine.

============================================================
DESIGN PRINCIPLES
============================================================
- Immutable configurations
- Defaults reproduce the production behavior
- Each threshold has documentation
- Environment overrides are loaded explicitly, never on import

============================================================
ENVIRONMENT VARIABLES
============================================================
FLIGHT_RISK_SCORER_URL       Predictive scorer endpoint
FLIGHT_RISK_SCORER_API_KEY   Bearer token for the scorer
FLIGHT_RISK_SCORER_TIMEOUT   Per-request timeout (seconds)
FLIGHT_RISK_MAX_CONCURRENCY  Max in-flight scorer requests (0 = unbounded)
FLIGHT_RISK_LOOKBACK_DAYS    Attendance lookback window (days)

============================================================
"""

import os
from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from dotenv import load_dotenv

from .types import ConfigurationError


# ============================================================
# FEATURE EXTRACTION CONFIGURATION
# ============================================================


@dataclass(frozen=True)
class FeatureConfig:
    """
    Configuration for feature extraction and eligibility.

    ============================================================
    VALUES
    ============================================================
    lookback_days:
    - Attendance older than this many days is ignored

    average_month_days:
    - Divisor for tenure in months (365.25 / 12, rounded)

    max_recent_scores:
    - Number of most recent evaluation scores sent to the scorer

    min_evaluations:
    - Fewer evaluations than this means no trend can be
      established and the person is not scored

    ============================================================
    """

    lookback_days: int = 90
    average_month_days: float = 30.44
    max_recent_scores: int = 3
    min_evaluations: int = 2

    def __post_init__(self) -> None:
        if self.lookback_days < 0:
            raise ConfigurationError(f"lookback_days must be >= 0, got {self.lookback_days}")
        if self.average_month_days <= 0:
            raise ConfigurationError(
                f"average_month_days must be > 0, got {self.average_month_days}"
            )
        # The scorer accepts at most three scores
        if not 2 <= self.max_recent_scores <= 3:
            raise ConfigurationError(
                f"max_recent_scores must be 2 or 3, got {self.max_recent_scores}"
            )
        if self.min_evaluations < 1:
            raise ConfigurationError(f"min_evaluations must be >= 1, got {self.min_evaluations}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            "lookback_days": self.lookback_days,
            "average_month_days": self.average_month_days,
            "max_recent_scores": self.max_recent_scores,
            "min_evaluations": self.min_evaluations,
        }


# ============================================================
# CLASSIFICATION CONFIGURATION
# ============================================================


@dataclass(frozen=True)
class ClassificationConfig:
    """
    Risk level thresholds.

    Both cuts are strict greater-than, so a boundary value
    belongs to the lower band:
    - HIGH if score > high_threshold
    - MEDIUM if score > medium_threshold
    - LOW otherwise
    """

    high_threshold: float = 70.0
    medium_threshold: float = 40.0

    def __post_init__(self) -> None:
        if self.medium_threshold >= self.high_threshold:
            raise ConfigurationError(
                f"medium_threshold ({self.medium_threshold}) must be below "
                f"high_threshold ({self.high_threshold})"
            )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "high_threshold": self.high_threshold,
            "medium_threshold": self.medium_threshold,
        }


# ============================================================
# SCORER CONFIGURATION
# ============================================================


@dataclass(frozen=True)
class ScorerConfig:
    """
    Configuration for the remote predictive scorer.

    request_timeout_seconds bounds every single request; an
    expired request counts as a scorer failure. A value of 0
    disables the engine-side timeout.
    """

    endpoint_url: Optional[str] = None
    api_key: Optional[str] = None
    request_timeout_seconds: float = 30.0
    max_concurrent_requests: int = 0      # 0 = one in-flight request per person
    include_prompt: bool = False          # Attach the analyst prompt to the payload

    def __post_init__(self) -> None:
        if self.request_timeout_seconds < 0:
            raise ConfigurationError(
                f"request_timeout_seconds must be >= 0, got {self.request_timeout_seconds}"
            )
        if self.max_concurrent_requests < 0:
            raise ConfigurationError(
                f"max_concurrent_requests must be >= 0, got {self.max_concurrent_requests}"
            )

    def to_dict(self) -> Dict[str, Any]:
        # The api key is never exported
        return {
            "endpoint_url": self.endpoint_url,
            "has_api_key": bool(self.api_key),
            "request_timeout_seconds": self.request_timeout_seconds,
            "max_concurrent_requests": self.max_concurrent_requests,
            "include_prompt": self.include_prompt,
        }


# ============================================================
# MASTER CONFIGURATION
# ============================================================


@dataclass(frozen=True)
class FlightRiskConfig:
    """
    Master configuration for the Flight Risk Scoring Engine.
    """

    features: FeatureConfig = field(default_factory=FeatureConfig)
    classification: ClassificationConfig = field(default_factory=ClassificationConfig)
    scorer: ScorerConfig = field(default_factory=ScorerConfig)

    engine_version: str = "1.0.0"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "features": self.features.to_dict(),
            "classification": self.classification.to_dict(),
            "scorer": self.scorer.to_dict(),
            "engine_version": self.engine_version,
        }


# ============================================================
# DEFAULT CONFIGURATION
# ============================================================


def get_default_config() -> FlightRiskConfig:
    """Return the default Flight Risk Scoring Engine configuration."""
    return FlightRiskConfig()


def _env_number(name: str, default, cast):
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return cast(raw.strip())
    except ValueError as e:
        raise ConfigurationError(f"{name} must be a number, got {raw!r}") from e


def load_config_from_env(dotenv_path: Optional[str] = None) -> FlightRiskConfig:
    """
    Build a configuration from environment variables.

    Loads a .env file first (existing environment variables
    win), then applies the FLIGHT_RISK_* overrides on top of
    the defaults.

    Raises:
        ConfigurationError: If a numeric variable cannot be parsed
    """
    load_dotenv(dotenv_path)

    defaults = FlightRiskConfig()

    features = FeatureConfig(
        lookback_days=_env_number(
            "FLIGHT_RISK_LOOKBACK_DAYS", defaults.features.lookback_days, int
        ),
    )
    scorer = ScorerConfig(
        endpoint_url=os.getenv("FLIGHT_RISK_SCORER_URL") or None,
        api_key=os.getenv("FLIGHT_RISK_SCORER_API_KEY") or None,
        request_timeout_seconds=_env_number(
            "FLIGHT_RISK_SCORER_TIMEOUT", defaults.scorer.request_timeout_seconds, float
        ),
        max_concurrent_requests=_env_number(
            "FLIGHT_RISK_MAX_CONCURRENCY", defaults.scorer.max_concurrent_requests, int
        ),
    )

    return FlightRiskConfig(features=features, scorer=scorer)
