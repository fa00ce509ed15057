"""
Shared builders and doubles for Flight Risk Scoring Engine tests.
"""

import asyncio
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional, Sequence

from flight_risk import (
    AttendanceRecord,
    AttendanceStatus,
    EvaluationRecord,
    FeatureVector,
    Person,
    ScorerResult,
)


NOW = datetime(2024, 6, 15, 12, 0, tzinfo=timezone.utc)


def make_person(
    person_id: str,
    tenure_months: Optional[int] = 12,
    unit: Optional[str] = "Engineering",
    name: Optional[str] = None,
) -> Person:
    """Person whose tenure at NOW is exactly tenure_months (up to ~50)."""
    hire_date = None
    if tenure_months is not None:
        hire_date = (NOW - timedelta(days=31 * tenure_months)).date()
    return Person(id=person_id, hire_date=hire_date, organization_unit=unit, name=name)


def make_evaluations(person_id: str, scores: Sequence[float]) -> List[EvaluationRecord]:
    """Evaluations given most-recent-first, spaced 90 days apart."""
    return [
        EvaluationRecord(
            id=f"{person_id}-ev{i}",
            person_id=person_id,
            evaluated_at=NOW - timedelta(days=10 + 90 * i),
            overall_score=score,
        )
        for i, score in enumerate(scores)
    ]


def make_attendance(
    person_id: str,
    status: AttendanceStatus,
    count: int,
    days_ago_start: int = 1,
) -> List[AttendanceRecord]:
    return [
        AttendanceRecord(
            id=f"{person_id}-{status.name}-{i}",
            person_id=person_id,
            date=(NOW - timedelta(days=days_ago_start + i)).date(),
            status=status,
        )
        for i in range(count)
    ]


class StubScorer:
    """
    Deterministic scorer double.

    respond(features) returns a ScorerResult or a decoded dict;
    an exception instance is raised instead of returned.
    """

    def __init__(self, respond: Callable[[FeatureVector], object], delay: Callable[[FeatureVector], float] = None):
        self._respond = respond
        self._delay = delay
        self.calls: List[FeatureVector] = []
        self.in_flight = 0
        self.max_in_flight = 0

    async def score(self, features: FeatureVector):
        self.calls.append(features)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self._delay is not None:
                await asyncio.sleep(self._delay(features))
            result = self._respond(features)
            if isinstance(result, BaseException):
                raise result
            return result
        finally:
            self.in_flight -= 1


def by_tenure(scores: dict, default: float = 10.0) -> Callable[[FeatureVector], ScorerResult]:
    """Respond with a score looked up by tenure_months."""
    def respond(features: FeatureVector) -> ScorerResult:
        score = scores.get(features.tenure_months, default)
        return ScorerResult(risk_score=score, summary=f"tenure {features.tenure_months}")
    return respond
