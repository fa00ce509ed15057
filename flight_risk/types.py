"""
Flight Risk Scoring Engine - Type Definitions.

============================================================
PURPOSE
============================================================
Data contracts for the Flight Risk Scoring Engine.

This module defines all types, enums, and dataclasses used
by the flight-risk system. Inputs are read-only records
materialized by the data-access layer; outputs are
ephemeral assessments held in memory for one analysis run.

============================================================
DESIGN PRINCIPLES
============================================================
- All types are immutable (frozen dataclasses, tuples)
- Enums for discrete values (risk level, trend, status)
- Clear separation between input, derived and output types
- Nothing here is persisted by the engine

============================================================
RISK LEVELS
============================================================
Risk score (0-100) maps to a discrete level:

- LOW:    score <= 40
- MEDIUM: 40 < score <= 70
- HIGH:   score > 70

============================================================
"""

from dataclasses import dataclass, field
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
from uuid import UUID, uuid4


# Reserved score signalling that the predictive scorer produced no result.
FAILURE_SENTINEL: float = -1.0

# Selector value that disables organizational-unit filtering.
ALL_UNITS: str = "all"


# ============================================================
# ENUMS
# ============================================================


class RiskLevel(str, Enum):
    """
    Discrete flight-risk classification.

    Derived deterministically from the numeric risk score,
    see classifier.classify_risk().
    """

    LOW = "Low"
    MEDIUM = "Medium"
    HIGH = "High"

    @classmethod
    def display_order(cls) -> List["RiskLevel"]:
        """Return levels in presentation order (highest risk first)."""
        return [cls.HIGH, cls.MEDIUM, cls.LOW]

    @property
    def severity_order(self) -> int:
        """Numeric ordering for severity comparison."""
        return {"Low": 0, "Medium": 1, "High": 2}[self.value]


class EvaluationTrend(str, Enum):
    """
    Direction of the two most recent evaluation scores.

    Scores are ordered most-recent-first, so FALLING means the
    latest score is lower than the one before it (deteriorating)
    and RISING means it is higher (improving).
    """

    RISING = "rising"
    FALLING = "falling"
    STABLE = "stable"


class AttendanceStatus(str, Enum):
    """
    Closed set of attendance statuses.

    Only ABSENT and LATE feed the feature vector; the others
    are read but ignored.
    """

    PRESENT = "Present"
    ABSENT = "Absent"
    SICK_LEAVE = "Sick Leave"
    SCHEDULED_REST = "Scheduled Rest"
    OFF_SCHEDULE = "Off Schedule"
    LATE = "Late"

    @classmethod
    def parse(cls, value: Any) -> Optional["AttendanceStatus"]:
        """
        Parse a status label.

        Accepts the English labels, the enum member names and the
        legacy Spanish labels of the source application. Unknown
        labels return None so that callers can ignore them.
        """
        if isinstance(value, cls):
            return value
        if not isinstance(value, str):
            return None

        text = value.strip()
        for member in cls:
            if text == member.value or text.upper() == member.name:
                return member
        return _LEGACY_STATUS_LABELS.get(text)


_LEGACY_STATUS_LABELS: Dict[str, AttendanceStatus] = {
    "Presente": AttendanceStatus.PRESENT,
    "Ausente": AttendanceStatus.ABSENT,
    "Reposo": AttendanceStatus.SICK_LEAVE,
    "Descanso Programado": AttendanceStatus.SCHEDULED_REST,
    "Fuera de Horario": AttendanceStatus.OFF_SCHEDULE,
    "Atrasado": AttendanceStatus.LATE,
}


# ============================================================
# INPUT RECORDS (READ-ONLY)
# ============================================================


@dataclass(frozen=True)
class Person:
    """
    A person known to the data-access layer.

    name and role are carried for display only; the engine
    reads id, hire_date and organization_unit.
    """

    id: str
    hire_date: Optional[date] = None
    organization_unit: Optional[str] = None
    name: Optional[str] = None
    role: Optional[str] = None


@dataclass(frozen=True)
class EvaluationRecord:
    """One performance evaluation of one person."""

    id: str
    person_id: str
    evaluated_at: datetime
    overall_score: float


@dataclass(frozen=True)
class AttendanceRecord:
    """
    One attendance entry for one person on one calendar day.

    status is None when the source label was not recognized.
    """

    id: str
    person_id: str
    date: date
    status: Optional[AttendanceStatus]


@dataclass(frozen=True)
class AnalysisInput:
    """Materialized records for one analysis run."""

    people: Tuple[Person, ...] = ()
    evaluations: Tuple[EvaluationRecord, ...] = ()
    attendance: Tuple[AttendanceRecord, ...] = ()

    @classmethod
    def of(cls, people, evaluations=(), attendance=()) -> "AnalysisInput":
        """Build an input from any iterables."""
        return cls(
            people=tuple(people),
            evaluations=tuple(evaluations),
            attendance=tuple(attendance),
        )


# ============================================================
# DERIVED TYPES
# ============================================================


@dataclass(frozen=True)
class FeatureVector:
    """
    Per-person features sent to the predictive scorer.

    recent_scores holds up to three evaluation scores,
    most-recent-first, and is never empty.
    """

    tenure_months: int
    recent_scores: Tuple[float, ...]
    absences_90d: int
    lates_90d: int

    def __post_init__(self) -> None:
        if not self.recent_scores:
            raise ValueError("FeatureVector requires at least one evaluation score")
        if self.tenure_months < 0:
            raise ValueError(f"tenure_months must be non-negative, got {self.tenure_months}")


@dataclass(frozen=True)
class ScorerResult:
    """
    Outcome of one predictive-scorer call.

    A risk_score equal to FAILURE_SENTINEL means no
    assessment is available for the person.
    """

    risk_score: float
    summary: str = ""

    @property
    def is_failure(self) -> bool:
        """Check if this result is the failure sentinel."""
        return self.risk_score == FAILURE_SENTINEL


@dataclass(frozen=True)
class RiskFactors:
    """Inputs behind an assessment, shown next to the score."""

    evaluation_trend: EvaluationTrend
    absences_90d: int
    lates_90d: int
    tenure_months: int

    def to_dict(self) -> Dict[str, Any]:
        return {
            "evaluationTrend": self.evaluation_trend.value,
            "absences90d": self.absences_90d,
            "lates90d": self.lates_90d,
            "tenureMonths": self.tenure_months,
        }


@dataclass(frozen=True)
class RiskAssessment:
    """
    Flight-risk assessment for one eligible, successfully scored person.

    Lives only for the duration of an analysis run and the views
    derived from it.
    """

    person_id: str
    risk_score: float
    risk_level: RiskLevel
    summary: str
    factors: RiskFactors

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "personId": self.person_id,
            "riskScore": self.risk_score,
            "riskLevel": self.risk_level.value,
            "summary": self.summary,
            "factors": self.factors.to_dict(),
        }


# ============================================================
# OUTPUT TYPES
# ============================================================


NO_DATA_MESSAGE = (
    "Not enough data for a predictive analysis. At least two evaluations "
    "per person are required to start generating predictions."
)


@dataclass(frozen=True)
class CategorizedRisk:
    """
    Assessments partitioned by risk level.

    ============================================================
    ORDERING
    ============================================================
    Each partition is sorted by risk score descending; equal
    scores keep their input order.

    ============================================================
    NO DATA
    ============================================================
    no_data is True when the underlying run produced no
    assessment at all. A filtered view of a populated run keeps
    no_data False even if the selected unit has nobody in it,
    so consumers can tell "nothing to analyze" apart from
    "nobody here" and from "everyone is low risk".

    ============================================================
    """

    high: Tuple[RiskAssessment, ...] = ()
    medium: Tuple[RiskAssessment, ...] = ()
    low: Tuple[RiskAssessment, ...] = ()
    no_data: bool = True

    def get(self, level: RiskLevel) -> Tuple[RiskAssessment, ...]:
        """Get the partition for a risk level."""
        mapping = {
            RiskLevel.HIGH: self.high,
            RiskLevel.MEDIUM: self.medium,
            RiskLevel.LOW: self.low,
        }
        return mapping[level]

    @property
    def is_empty(self) -> bool:
        """Check if the view holds no assessments."""
        return self.total == 0

    @property
    def total(self) -> int:
        return len(self.high) + len(self.medium) + len(self.low)

    @property
    def all_assessments(self) -> List[RiskAssessment]:
        """Return every assessment, highest partition first."""
        return [*self.high, *self.medium, *self.low]

    @property
    def status_message(self) -> str:
        """User-facing headline for this result."""
        if self.no_data:
            return NO_DATA_MESSAGE
        return (
            f"{self.total} people assessed: {len(self.high)} high, "
            f"{len(self.medium)} medium, {len(self.low)} low risk."
        )

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "high": [a.to_dict() for a in self.high],
            "medium": [a.to_dict() for a in self.medium],
            "low": [a.to_dict() for a in self.low],
            "noData": self.no_data,
        }


@dataclass(frozen=True)
class AnalysisRun:
    """
    Record of one completed analysis run.

    started_at is the single "now" every window and tenure
    computation in the run was evaluated against.
    """

    result: CategorizedRisk
    started_at: datetime
    completed_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    run_id: UUID = field(default_factory=uuid4)
    people_count: int = 0
    eligible_count: int = 0
    failed_count: int = 0
    engine_version: str = "1.0.0"

    @property
    def scored_count(self) -> int:
        return self.eligible_count - self.failed_count

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "run_id": str(self.run_id),
            "started_at": self.started_at.isoformat(),
            "completed_at": self.completed_at.isoformat(),
            "people_count": self.people_count,
            "eligible_count": self.eligible_count,
            "failed_count": self.failed_count,
            "engine_version": self.engine_version,
            "result": self.result.to_dict(),
        }


# ============================================================
# ERROR TYPES
# ============================================================


class FlightRiskError(Exception):
    """Base exception for flight-risk errors."""
    pass


class ConfigurationError(FlightRiskError):
    """Raised when configuration values are invalid."""
    pass


class InvalidRecordError(FlightRiskError):
    """Raised when an inbound record cannot be parsed."""

    def __init__(self, message: str, record: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.record = record


class ScorerError(FlightRiskError):
    """
    Base exception for predictive-scorer failures.

    NOTE: These never escape an analysis run. The engine turns
    them into the failure sentinel and excludes the person.
    """
    pass


class ScorerUnavailableError(ScorerError):
    """Raised when the scorer cannot be reached or returns an error status."""
    pass


class MalformedScorerResponseError(ScorerError):
    """Raised when the scorer response does not have the expected shape."""
    pass
