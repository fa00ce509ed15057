"""
Flight Risk Scoring Engine - Feature Extraction.

============================================================
PURPOSE
============================================================
Turns raw per-person history into the fixed feature vector
sent to the predictive scorer, and gates who is scored.

1. Temporal window filter (attendance within the lookback)
2. Feature extractor (tenure, recent scores, absences, lates)
3. Eligibility gate (enough evaluations to show a trend)

============================================================
DESIGN PRINCIPLES
============================================================
- Pure functions: same input + same "now" = same output
- "now" is always a parameter, never read from the system
- Records belonging to other people are ignored, so callers
  may pass either the full record set or a pre-grouped slice

============================================================
"""

import math
from datetime import date, datetime, time, timedelta
from typing import Iterable, List, Optional, Sequence

from .config import FeatureConfig
from .types import (
    AttendanceRecord,
    AttendanceStatus,
    EvaluationRecord,
    FeatureVector,
    Person,
)


# ============================================================
# TEMPORAL WINDOW FILTER
# ============================================================


def window_start(now: datetime, lookback_days: int = 90) -> date:
    """First calendar day inside the lookback window."""
    return (now - timedelta(days=lookback_days)).date()


def filter_attendance_window(
    attendance: Iterable[AttendanceRecord],
    person_id: str,
    now: datetime,
    lookback_days: int = 90,
) -> List[AttendanceRecord]:
    """
    Select a person's attendance inside the trailing window.

    A record is kept when its date is on or after the calendar
    day of (now - lookback_days). Input order is preserved.
    """
    start = window_start(now, lookback_days)
    return [
        record for record in attendance
        if record.person_id == person_id and record.date >= start
    ]


def count_status(records: Iterable[AttendanceRecord], status: AttendanceStatus) -> int:
    return sum(1 for record in records if record.status == status)


# ============================================================
# EVALUATION HISTORY
# ============================================================


def select_evaluations(
    evaluations: Iterable[EvaluationRecord],
    person_id: str,
) -> List[EvaluationRecord]:
    """Return a person's evaluations, most recent first."""
    own = [e for e in evaluations if e.person_id == person_id]
    return sorted(own, key=lambda e: e.evaluated_at, reverse=True)


def is_eligible(evaluations: Sequence[EvaluationRecord], min_evaluations: int = 2) -> bool:
    """
    Eligibility gate.

    A person is scored only with at least min_evaluations
    evaluations; below that there is no trend to speak of and
    the person is left out of the result (not an error).

    Args:
        evaluations: The person's own evaluations
        min_evaluations: Minimum history required

    Returns:
        True if the person should be scored
    """
    return len(evaluations) >= min_evaluations


# ============================================================
# TENURE
# ============================================================


def compute_tenure_months(
    hire_date: Optional[date],
    now: datetime,
    average_month_days: float = 30.44,
) -> int:
    """
    Whole months elapsed since hire.

    floor((now - hire_date) / average_month_days), 0 when the
    hire date is unknown or in the future.
    """
    if hire_date is None:
        return 0

    hired_at = _as_datetime(hire_date, now)
    elapsed_days = (now - hired_at).total_seconds() / 86400.0
    if elapsed_days <= 0:
        return 0
    return int(math.floor(elapsed_days / average_month_days))


def _as_datetime(value: date, reference: datetime) -> datetime:
    # Midnight of the calendar day, in the reference's timezone
    if isinstance(value, datetime):
        if value.tzinfo is None and reference.tzinfo is not None:
            return value.replace(tzinfo=reference.tzinfo)
        if value.tzinfo is not None and reference.tzinfo is None:
            return value.replace(tzinfo=None)
        return value
    return datetime.combine(value, time.min, tzinfo=reference.tzinfo)


# ============================================================
# FEATURE EXTRACTOR
# ============================================================


def extract_features(
    person: Person,
    evaluations: Iterable[EvaluationRecord],
    attendance: Iterable[AttendanceRecord],
    now: datetime,
    config: Optional[FeatureConfig] = None,
) -> FeatureVector:
    """
    Derive the feature vector for one person.

    Args:
        person: The person to describe
        evaluations: Evaluation records (any person, any order)
        attendance: Attendance records (any person, any order)
        now: The instant of the analysis run
        config: Feature configuration (defaults if omitted)

    Returns:
        FeatureVector for the person

    Raises:
        ValueError: If the person has no evaluation at all
    """
    config = config or FeatureConfig()

    history = select_evaluations(evaluations, person.id)
    recent = filter_attendance_window(attendance, person.id, now, config.lookback_days)

    return FeatureVector(
        tenure_months=compute_tenure_months(person.hire_date, now, config.average_month_days),
        recent_scores=tuple(e.overall_score for e in history[:config.max_recent_scores]),
        absences_90d=count_status(recent, AttendanceStatus.ABSENT),
        lates_90d=count_status(recent, AttendanceStatus.LATE),
    )
