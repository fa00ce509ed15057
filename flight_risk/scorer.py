"""
Flight Risk Scoring Engine - Predictive Scorer Adapter.

============================================================
PURPOSE
============================================================
Boundary to the external predictive capability that turns a
feature vector into a risk score and a short narrative.

============================================================
CONTRACT
============================================================
Request:  {tenureMonths, evaluationScores (<=3, most-recent-first),
           absences90d, lates90d}
Response: {riskScore (0-100, or -1 for failure), summary}

- One request per eligible person, no retries
- Stateless: nothing is cached across people or runs
- Every failure (transport, HTTP status, bad JSON, wrong
  shape) comes back as the failure sentinel
- Scores are passed through as received, never clamped

============================================================
USAGE
============================================================
    scorer = HttpRiskScorer(endpoint_url="https://scorer.internal/v1/flight-risk")
    result = await scorer.score(features)
    if result.is_failure:
        ...

Tests substitute any object with an async score() method.

============================================================
"""

import logging
from typing import Any, List, Optional, Protocol

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .config import ScorerConfig
from .types import (
    FAILURE_SENTINEL,
    FeatureVector,
    MalformedScorerResponseError,
    ScorerError,
    ScorerResult,
    ScorerUnavailableError,
)


logger = logging.getLogger(__name__)


# ============================================================
# WIRE SCHEMAS
# ============================================================


class ScoringRequest(BaseModel):
    """Request body sent to the predictive scorer."""

    model_config = ConfigDict(populate_by_name=True)

    tenure_months: int = Field(alias="tenureMonths", ge=0)
    evaluation_scores: List[float] = Field(alias="evaluationScores", min_length=1, max_length=3)
    absences_90d: int = Field(alias="absences90d", ge=0)
    lates_90d: int = Field(alias="lates90d", ge=0)

    @classmethod
    def from_features(cls, features: FeatureVector) -> "ScoringRequest":
        return cls(
            tenure_months=features.tenure_months,
            evaluation_scores=list(features.recent_scores),
            absences_90d=features.absences_90d,
            lates_90d=features.lates_90d,
        )


class ScorerResponse(BaseModel):
    """Response body returned by the predictive scorer."""

    model_config = ConfigDict(populate_by_name=True)

    risk_score: float = Field(alias="riskScore", strict=True, allow_inf_nan=False)
    summary: str


# ============================================================
# SCORER PROTOCOL
# ============================================================


class RiskScorer(Protocol):
    """
    Protocol for predictive scorer implementations.

    Implementations should return failure_result() instead of
    raising; the engine still contains anything they raise.
    """

    async def score(self, features: FeatureVector) -> ScorerResult:
        """
        Score one person.

        Args:
            features: The person's feature vector

        Returns:
            ScorerResult, possibly the failure sentinel
        """
        ...


# ============================================================
# HELPERS
# ============================================================


def failure_result(reason: str = "") -> ScorerResult:
    """Build the failure sentinel result."""
    return ScorerResult(
        risk_score=FAILURE_SENTINEL,
        summary=reason or "Risk analysis could not be generated.",
    )


def build_request_payload(features: FeatureVector) -> dict:
    """Serialize a feature vector to the scorer request body."""
    return ScoringRequest.from_features(features).model_dump(by_alias=True)


def parse_scorer_response(payload: Any) -> ScorerResult:
    """
    Validate a scorer response.

    Args:
        payload: Decoded JSON object, or raw JSON text/bytes

    Returns:
        ScorerResult (the sentinel passes through unchanged)

    Raises:
        MalformedScorerResponseError: If the payload has the wrong shape
    """
    try:
        if isinstance(payload, (str, bytes, bytearray)):
            response = ScorerResponse.model_validate_json(payload)
        else:
            response = ScorerResponse.model_validate(payload)
    except ValidationError as e:
        raise MalformedScorerResponseError(
            f"Unexpected scorer response: {e.error_count()} validation error(s)"
        ) from e

    return ScorerResult(risk_score=response.risk_score, summary=response.summary)


def build_risk_prompt(features: FeatureVector) -> str:
    """
    Analyst prompt for language-model backed scorers.

    Carries the same data as the request body plus the
    retention heuristics the model is asked to weigh.
    """
    scores = ", ".join(f"{s:g}" for s in features.recent_scores)
    return (
        "Act as an HR analyst specialized in talent retention.\n"
        "Analyze the following employee data to predict their flight risk.\n"
        "\n"
        "DATA:\n"
        f"- Tenure: {features.tenure_months} months.\n"
        f"- Latest evaluation scores (most recent first): [{scores}].\n"
        f"- Absences in the last 90 days: {features.absences_90d}.\n"
        f"- Late arrivals in the last 90 days: {features.lates_90d}.\n"
        "\n"
        "CONTEXT:\n"
        "1. Evaluation trend: a downward trend in scores is a very strong warning "
        "sign. Consistently low scores are also a risk.\n"
        "2. Attendance: many absences or late arrivals may point to low motivation "
        "or personal issues. More than 3 absences or 5 late arrivals in 90 days is "
        "worth noting.\n"
        "3. Tenure: risk is usually high during the first 18 months (adaptation) "
        "and after several years (3-5) without growth or change.\n"
        "\n"
        "TASK:\n"
        "Answer in JSON with 'riskScore', a number from 0 (no risk) to 100 "
        "(imminent departure), and 'summary', 2-3 sentences explaining the key "
        "factors behind the risk level."
    )


# ============================================================
# HTTP SCORER
# ============================================================


class HttpRiskScorer:
    """
    Predictive scorer reached over HTTP.

    ============================================================
    USAGE
    ============================================================
    POSTs the request body as JSON to endpoint_url and expects
    the response body as JSON. An api key, when configured, is
    sent as a bearer token.

    A shared httpx.AsyncClient may be injected; otherwise a
    short-lived client is opened per request.

    ============================================================
    """

    def __init__(
        self,
        endpoint_url: Optional[str] = None,
        api_key: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        include_prompt: Optional[bool] = None,
        client: Optional[httpx.AsyncClient] = None,
        config: Optional[ScorerConfig] = None,
    ):
        """
        Initialize HTTP scorer.

        Args:
            endpoint_url: Scorer URL (or from config)
            api_key: Bearer token (or from config)
            timeout_seconds: HTTP timeout (or from config)
            include_prompt: Attach build_risk_prompt() as "prompt"
            client: Optional shared httpx client
            config: ScorerConfig supplying any value not given
        """
        config = config or ScorerConfig()

        self._endpoint_url = endpoint_url or config.endpoint_url
        self._api_key = api_key or config.api_key
        self._timeout = timeout_seconds if timeout_seconds is not None else config.request_timeout_seconds
        self._include_prompt = include_prompt if include_prompt is not None else config.include_prompt
        self._client = client

        if not self._endpoint_url:
            raise ValueError("HttpRiskScorer requires an endpoint_url")

    @property
    def endpoint_url(self) -> str:
        return self._endpoint_url

    async def score(self, features: FeatureVector) -> ScorerResult:
        """
        Score one person over HTTP.

        Returns:
            ScorerResult, or the failure sentinel on any error
        """
        payload = build_request_payload(features)
        if self._include_prompt:
            payload["prompt"] = build_risk_prompt(features)

        try:
            body = await self._post(payload)
            return parse_scorer_response(body)
        except ScorerError as e:
            logger.warning(f"Flight risk scorer failed: {e}")
            return failure_result(str(e))

    async def _post(self, payload: dict) -> Any:
        """
        Send one request and decode the JSON body.

        Raises:
            ScorerUnavailableError: On transport errors or error status
            MalformedScorerResponseError: If the body is not JSON
        """
        headers = {"Accept": "application/json"}
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        try:
            if self._client is not None:
                response = await self._client.post(
                    self._endpoint_url, json=payload, headers=headers, timeout=self._timeout or None
                )
            else:
                async with httpx.AsyncClient(timeout=self._timeout or None) as client:
                    response = await client.post(self._endpoint_url, json=payload, headers=headers)

            response.raise_for_status()
            return response.json()

        except httpx.HTTPStatusError as e:
            raise ScorerUnavailableError(
                f"Scorer HTTP error {e.response.status_code}: {e.response.text[:200]}"
            ) from e
        except httpx.TimeoutException as e:
            raise ScorerUnavailableError(f"Scorer timeout: {e}") from e
        except httpx.RequestError as e:
            raise ScorerUnavailableError(f"Scorer request error: {e}") from e
        except ValueError as e:
            raise MalformedScorerResponseError(f"Scorer response is not JSON: {e}") from e
