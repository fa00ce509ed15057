"""
Predictive Scorer Adapter Tests.

Tests cover:
- Request serialization
- Response validation
- HTTP scorer success and every failure path
- Analyst prompt content
"""

import json

import httpx
import pytest

from flight_risk import (
    FAILURE_SENTINEL,
    FeatureVector,
    HttpRiskScorer,
    MalformedScorerResponseError,
    ScorerConfig,
    ScorerResult,
    build_request_payload,
    build_risk_prompt,
    failure_result,
    parse_scorer_response,
)


FEATURES = FeatureVector(tenure_months=13, recent_scores=(8.0, 5.0), absences_90d=4, lates_90d=6)
URL = "https://scorer.test/v1/flight-risk"


def _client(handler) -> httpx.AsyncClient:
    return httpx.AsyncClient(transport=httpx.MockTransport(handler))


# =============================================================
# TEST: Wire Format
# =============================================================

class TestRequestPayload:
    """Test request serialization."""

    def test_payload_matches_contract(self):
        assert build_request_payload(FEATURES) == {
            "tenureMonths": 13,
            "evaluationScores": [8.0, 5.0],
            "absences90d": 4,
            "lates90d": 6,
        }


class TestParseResponse:
    """Test response validation."""

    def test_valid_dict(self):
        assert parse_scorer_response({"riskScore": 75, "summary": "s"}) == ScorerResult(75.0, "s")

    def test_valid_json_text(self):
        result = parse_scorer_response('{"riskScore": 12.5, "summary": "ok"}')

        assert result == ScorerResult(12.5, "ok")

    def test_sentinel_passes_through(self):
        result = parse_scorer_response({"riskScore": -1, "summary": "error"})

        assert result.is_failure

    def test_integer_score_accepted(self):
        assert parse_scorer_response({"riskScore": 75, "summary": "s"}).risk_score == 75

    def test_out_of_range_not_clamped(self):
        """The adapter never clamps scores."""
        assert parse_scorer_response({"riskScore": 130, "summary": ""}).risk_score == 130

    @pytest.mark.parametrize(
        "payload",
        [
            {"summary": "missing score"},
            {"riskScore": 50},
            {"riskScore": "high", "summary": "s"},
            {"riskScore": True, "summary": "s"},
            {"riskScore": "75", "summary": "s"},
            '{"riskScore": "75", "summary": "s"}',
            ["not", "an", "object"],
            "not json",
            None,
        ],
    )
    def test_malformed(self, payload):
        with pytest.raises(MalformedScorerResponseError):
            parse_scorer_response(payload)

    def test_failure_result_is_sentinel(self):
        result = failure_result("boom")

        assert result.risk_score == FAILURE_SENTINEL
        assert result.summary == "boom"


# =============================================================
# TEST: HTTP Scorer
# =============================================================

class TestHttpRiskScorer:
    """Test the HTTP scorer against a mocked transport."""

    def test_requires_endpoint(self):
        with pytest.raises(ValueError):
            HttpRiskScorer()

    def test_endpoint_from_config(self):
        scorer = HttpRiskScorer(config=ScorerConfig(endpoint_url=URL))

        assert scorer.endpoint_url == URL

    @pytest.mark.asyncio
    async def test_success(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            seen["auth"] = request.headers.get("Authorization")
            return httpx.Response(200, json={"riskScore": 75, "summary": "Declining attendance."})

        async with _client(handler) as client:
            scorer = HttpRiskScorer(endpoint_url=URL, api_key="secret", client=client)
            result = await scorer.score(FEATURES)

        assert result == ScorerResult(75.0, "Declining attendance.")
        assert seen["body"] == build_request_payload(FEATURES)
        assert seen["auth"] == "Bearer secret"

    @pytest.mark.asyncio
    async def test_prompt_attached_when_enabled(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json={"riskScore": 10, "summary": "s"})

        async with _client(handler) as client:
            scorer = HttpRiskScorer(endpoint_url=URL, include_prompt=True, client=client)
            await scorer.score(FEATURES)

        assert seen["body"]["prompt"] == build_risk_prompt(FEATURES)

    @pytest.mark.asyncio
    async def test_http_error_is_sentinel(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(503, text="unavailable")

        async with _client(handler) as client:
            result = await HttpRiskScorer(endpoint_url=URL, client=client).score(FEATURES)

        assert result.is_failure

    @pytest.mark.asyncio
    async def test_transport_error_is_sentinel(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        async with _client(handler) as client:
            result = await HttpRiskScorer(endpoint_url=URL, client=client).score(FEATURES)

        assert result.is_failure

    @pytest.mark.asyncio
    async def test_timeout_is_sentinel(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        async with _client(handler) as client:
            result = await HttpRiskScorer(endpoint_url=URL, client=client).score(FEATURES)

        assert result.is_failure

    @pytest.mark.asyncio
    async def test_non_json_body_is_sentinel(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, text="<html>oops</html>")

        async with _client(handler) as client:
            result = await HttpRiskScorer(endpoint_url=URL, client=client).score(FEATURES)

        assert result.is_failure

    @pytest.mark.asyncio
    async def test_wrong_shape_is_sentinel(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(200, json={"score": 50})

        async with _client(handler) as client:
            result = await HttpRiskScorer(endpoint_url=URL, client=client).score(FEATURES)

        assert result.is_failure

    @pytest.mark.asyncio
    async def test_no_caching_between_calls(self):
        """Every call reaches the remote scorer."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json={"riskScore": len(calls), "summary": ""})

        async with _client(handler) as client:
            scorer = HttpRiskScorer(endpoint_url=URL, client=client)
            first = await scorer.score(FEATURES)
            second = await scorer.score(FEATURES)

        assert len(calls) == 2
        assert (first.risk_score, second.risk_score) == (1, 2)


# =============================================================
# TEST: Analyst Prompt
# =============================================================

class TestRiskPrompt:
    """Test the analyst prompt rendering."""

    def test_prompt_contains_features(self):
        prompt = build_risk_prompt(FEATURES)

        assert "Tenure: 13 months" in prompt
        assert "[8, 5]" in prompt
        assert "Absences in the last 90 days: 4" in prompt
        assert "Late arrivals in the last 90 days: 6" in prompt
        assert "riskScore" in prompt
