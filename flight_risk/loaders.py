"""
Flight Risk Scoring Engine - Record Loaders.

============================================================
PURPOSE
============================================================
Parses records handed over by the data-access layer (plain
dicts with camelCase keys) into the engine's typed records.

    Person:      {id, hireDate?, organizationUnit | department, name?, role?}
    Evaluation:  {id, personId, evaluatedAt, overallScore | calculatedScores.overall}
    Attendance:  {id, employeeId | personId, date, status}

Timestamps without a timezone are taken as UTC. Unknown
attendance statuses are kept with status None and ignored
downstream.

============================================================
"""

from datetime import date, datetime, timezone
from typing import Any, Iterable, Mapping, Optional

from .types import (
    AnalysisInput,
    AttendanceRecord,
    AttendanceStatus,
    EvaluationRecord,
    InvalidRecordError,
    Person,
)


def _require(record: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = record.get(key)
        if value is not None and value != "":
            return value
    raise InvalidRecordError(f"Missing field {' / '.join(keys)}", dict(record))


def parse_timestamp(value: Any) -> datetime:
    """Parse an ISO 8601 timestamp (or date) to an aware UTC datetime."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, date):
        parsed = datetime(value.year, value.month, value.day)
    elif isinstance(value, str):
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    else:
        raise ValueError(f"Unsupported timestamp: {value!r}")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def parse_date(value: Any) -> date:
    """Parse a calendar date (YYYY-MM-DD or a full ISO timestamp)."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str):
        text = value.strip()
        if len(text) == 10:
            return date.fromisoformat(text)
        return parse_timestamp(text).date()
    raise ValueError(f"Unsupported date: {value!r}")


def parse_person(record: Mapping[str, Any]) -> Person:
    """
    Parse a person record.

    Raises:
        InvalidRecordError: If id is missing or hireDate is not a date
    """
    hire_date: Optional[date] = None
    raw_hire = record.get("hireDate")
    if raw_hire:
        try:
            hire_date = parse_date(raw_hire)
        except ValueError as e:
            raise InvalidRecordError(f"Invalid hireDate {raw_hire!r}", dict(record)) from e

    unit = record.get("organizationUnit", record.get("department"))

    return Person(
        id=str(_require(record, "id")),
        hire_date=hire_date,
        organization_unit=unit,
        name=record.get("name"),
        role=record.get("role"),
    )


def parse_evaluation(record: Mapping[str, Any]) -> EvaluationRecord:
    """
    Parse an evaluation record.

    Raises:
        InvalidRecordError: If a field is missing or malformed
    """
    raw_score = record.get("overallScore")
    if raw_score is None:
        raw_score = (record.get("calculatedScores") or {}).get("overall")
    if raw_score is None:
        raise InvalidRecordError("Missing field overallScore", dict(record))

    raw_at = _require(record, "evaluatedAt")
    try:
        evaluated_at = parse_timestamp(raw_at)
        score = float(raw_score)
    except (TypeError, ValueError) as e:
        raise InvalidRecordError(f"Invalid evaluation record: {e}", dict(record)) from e

    return EvaluationRecord(
        id=str(_require(record, "id")),
        person_id=str(_require(record, "personId")),
        evaluated_at=evaluated_at,
        overall_score=score,
    )


def parse_attendance(record: Mapping[str, Any]) -> AttendanceRecord:
    """
    Parse an attendance record.

    Raises:
        InvalidRecordError: If a field is missing or the date is malformed
    """
    raw_date = _require(record, "date")
    try:
        day = parse_date(raw_date)
    except ValueError as e:
        raise InvalidRecordError(f"Invalid attendance date {raw_date!r}", dict(record)) from e

    return AttendanceRecord(
        id=str(_require(record, "id")),
        person_id=str(_require(record, "employeeId", "personId")),
        date=day,
        status=AttendanceStatus.parse(record.get("status")),
    )


def build_analysis_input(
    people: Iterable[Mapping[str, Any]],
    evaluations: Iterable[Mapping[str, Any]] = (),
    attendance: Iterable[Mapping[str, Any]] = (),
) -> AnalysisInput:
    """Parse all three record lists into an AnalysisInput."""
    return AnalysisInput.of(
        people=[parse_person(p) for p in people],
        evaluations=[parse_evaluation(e) for e in evaluations],
        attendance=[parse_attendance(a) for a in attendance],
    )
