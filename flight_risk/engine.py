"""
Flight Risk Scoring Engine - Main Orchestrator.

============================================================
PURPOSE
============================================================
The FlightRiskEngine is the main entry point for flight-risk
analysis.

It orchestrates:
1. Resolving one "now" for the whole run
2. Eligibility gating and feature extraction
3. Concurrent scoring, one request per eligible person
4. Classification of every successful result
5. Categorization and publication of the run

============================================================
CONCURRENCY
============================================================
- Requests fan out with asyncio.gather and are all joined
  before the result is built
- Each request owns its own FeatureVector; nothing is shared
- A per-request timeout turns a hang into a failure
- A failure (sentinel, timeout, exception) only drops that
  person; the run always completes
- The most recently completed run is the one exposed

============================================================
USAGE
============================================================
    from flight_risk import FlightRiskEngine, HttpRiskScorer, AnalysisInput

    engine = FlightRiskEngine(scorer=HttpRiskScorer(endpoint_url=url))

    run = await engine.analyze(AnalysisInput.of(people, evaluations, attendance))

    if run.result.no_data:
        print(run.result.status_message)
    for assessment in engine.view("Sales").high:
        print(assessment.person_id, assessment.risk_score)

============================================================
"""

import asyncio
import logging
import math
from collections import defaultdict
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, TypeVar
from uuid import uuid4

from .categorizer import categorize, filter_by_unit
from .classifier import build_assessment, classify_risk
from .clock import ClockProtocol, SystemClock
from .config import FlightRiskConfig
from .features import extract_features, is_eligible, select_evaluations
from .scorer import RiskScorer, parse_scorer_response
from .types import (
    ALL_UNITS,
    AnalysisInput,
    AnalysisRun,
    AttendanceRecord,
    CategorizedRisk,
    EvaluationRecord,
    FeatureVector,
    MalformedScorerResponseError,
    Person,
    RiskAssessment,
    RiskLevel,
    ScorerError,
    ScorerResult,
)


logger = logging.getLogger(__name__)

_R = TypeVar("_R", EvaluationRecord, AttendanceRecord)


class FlightRiskEngine:
    """
    Main orchestrator for the Flight Risk Scoring Engine.

    ============================================================
    RESPONSIBILITIES
    ============================================================
    1. Gate people by evaluation history
    2. Extract features against a single "now"
    3. Score eligible people concurrently
    4. Classify and categorize results
    5. Expose the latest completed run and filtered views

    ============================================================
    STATE MANAGEMENT
    ============================================================
    The engine only keeps the latest completed run in memory.
    A new run fully replaces it; nothing is persisted.

    ============================================================
    """

    def __init__(
        self,
        scorer: RiskScorer,
        config: Optional[FlightRiskConfig] = None,
        clock: Optional[ClockProtocol] = None,
    ):
        """
        Initialize the Flight Risk Scoring Engine.

        Args:
            scorer: Predictive scorer used for every eligible person
            config: Engine configuration. Uses defaults if not provided.
            clock: Source of "now" when analyze() is not given one
        """
        self.config = config or FlightRiskConfig()
        self._scorer = scorer
        self._clock = clock or SystemClock()

        self._latest_run: Optional[AnalysisRun] = None
        self._latest_people: Tuple[Person, ...] = ()

    # --------------------------------------------------------
    # ANALYSIS
    # --------------------------------------------------------

    async def analyze(self, data: AnalysisInput, now: Optional[datetime] = None) -> AnalysisRun:
        """
        Run a complete analysis over materialized records.

        Args:
            data: People, evaluations and attendance to analyze
            now: Instant to evaluate against (defaults to the clock)

        Returns:
            AnalysisRun with the categorized result
        """
        now = now or self._clock.now()
        run_id = uuid4()

        logger.info(f"Flight risk run {run_id} started: {len(data.people)} people")

        # --------------------------------------------------
        # Step 1: Gate and extract features
        # --------------------------------------------------
        candidates = self._prepare(data, now)

        # --------------------------------------------------
        # Step 2: Fan out scoring, join all
        # --------------------------------------------------
        semaphore = None
        if self.config.scorer.max_concurrent_requests > 0:
            semaphore = asyncio.Semaphore(self.config.scorer.max_concurrent_requests)

        outcomes = await asyncio.gather(*(
            self._score_person(person.id, features, semaphore)
            for person, features in candidates
        ))
        assessments = [a for a in outcomes if a is not None]

        # --------------------------------------------------
        # Step 3: Categorize and publish
        # --------------------------------------------------
        result = categorize(assessments)

        run = AnalysisRun(
            result=result,
            started_at=now,
            completed_at=datetime.now(timezone.utc),
            run_id=run_id,
            people_count=len(data.people),
            eligible_count=len(candidates),
            failed_count=len(candidates) - len(assessments),
            engine_version=self.config.engine_version,
        )

        self._latest_run = run
        self._latest_people = tuple(data.people)

        if result.no_data:
            logger.info(f"Flight risk run {run_id} completed with no data")
        else:
            logger.info(
                f"Flight risk run {run_id} completed: {run.scored_count}/{run.eligible_count} scored "
                f"(high={len(result.high)}, medium={len(result.medium)}, low={len(result.low)}, "
                f"failed={run.failed_count})"
            )

        return run

    async def assess_person(
        self,
        person: Person,
        evaluations: Iterable[EvaluationRecord],
        attendance: Iterable[AttendanceRecord],
        now: Optional[datetime] = None,
    ) -> Optional[RiskAssessment]:
        """
        Assess a single person.

        Returns:
            RiskAssessment, or None if the person is not eligible
            or could not be scored
        """
        now = now or self._clock.now()
        evaluations = select_evaluations(evaluations, person.id)
        if not is_eligible(evaluations, self.config.features.min_evaluations):
            return None

        features = extract_features(person, evaluations, attendance, now, self.config.features)
        return await self._score_person(person.id, features, None)

    def _prepare(self, data: AnalysisInput, now: datetime) -> List[Tuple[Person, FeatureVector]]:
        evaluations_by_person = _group_by_person(data.evaluations)
        attendance_by_person = _group_by_person(data.attendance)

        candidates: List[Tuple[Person, FeatureVector]] = []
        for person in data.people:
            evaluations = evaluations_by_person.get(person.id, [])
            if not is_eligible(evaluations, self.config.features.min_evaluations):
                logger.debug(
                    f"Skipping {person.id}: {len(evaluations)} evaluation(s), "
                    f"{self.config.features.min_evaluations} required"
                )
                continue

            features = extract_features(
                person,
                evaluations,
                attendance_by_person.get(person.id, []),
                now,
                self.config.features,
            )
            candidates.append((person, features))

        return candidates

    async def _score_person(
        self,
        person_id: str,
        features: FeatureVector,
        semaphore: Optional[asyncio.Semaphore],
    ) -> Optional[RiskAssessment]:
        """
        Score one person; every failure is contained here.

        Returns:
            RiskAssessment, or None when no assessment is available
        """
        try:
            if semaphore is not None:
                async with semaphore:
                    result = await self._call_scorer(features)
            else:
                result = await self._call_scorer(features)

            if result.is_failure:
                logger.warning(f"No risk assessment available for {person_id}: {result.summary}")
                return None

            return build_assessment(person_id, features, result, self.config.classification)

        except asyncio.TimeoutError:
            logger.warning(
                f"Scorer timed out for {person_id} after "
                f"{self.config.scorer.request_timeout_seconds}s"
            )
            return None
        except ScorerError as e:
            logger.warning(f"Scorer failed for {person_id}: {e}")
            return None
        except Exception:
            logger.exception(f"Unexpected error while scoring {person_id}")
            return None

    async def _call_scorer(self, features: FeatureVector) -> ScorerResult:
        timeout = self.config.scorer.request_timeout_seconds
        call = self._scorer.score(features)

        if timeout > 0:
            raw = await asyncio.wait_for(call, timeout=timeout)
        else:
            raw = await call

        return _coerce_result(raw)

    # --------------------------------------------------------
    # VIEWS
    # --------------------------------------------------------

    @property
    def latest_run(self) -> Optional[AnalysisRun]:
        """Return the most recently completed run, if any."""
        return self._latest_run

    def view(self, unit: Optional[str] = ALL_UNITS, people: Optional[Sequence[Person]] = None) -> CategorizedRisk:
        """
        Filtered view of the latest run.

        Args:
            unit: Organizational-unit selector, or "all"
            people: Current people (defaults to those of the latest run)

        Returns:
            CategorizedRisk; an empty no-data result before any run
        """
        if self._latest_run is None:
            return CategorizedRisk()

        people = self._latest_people if people is None else people
        return filter_by_unit(self._latest_run.result, people, unit)


def _group_by_person(records: Iterable[_R]) -> Dict[str, List[_R]]:
    grouped: Dict[str, List[_R]] = defaultdict(list)
    for record in records:
        grouped[record.person_id].append(record)
    return grouped


def _coerce_result(raw: Any) -> ScorerResult:
    # Scorers may hand back the decoded response body as-is
    if not isinstance(raw, ScorerResult):
        return parse_scorer_response(raw)

    score = raw.risk_score
    if isinstance(score, bool) or not isinstance(score, (int, float)) or not math.isfinite(score):
        raise MalformedScorerResponseError(f"Scorer returned a non-numeric risk score: {score!r}")
    return raw


# ============================================================
# CONVENIENCE FUNCTIONS
# ============================================================


async def analyze_flight_risk(
    scorer: RiskScorer,
    people: Iterable[Person],
    evaluations: Iterable[EvaluationRecord] = (),
    attendance: Iterable[AttendanceRecord] = (),
    now: Optional[datetime] = None,
    config: Optional[FlightRiskConfig] = None,
) -> CategorizedRisk:
    """
    Convenience function to analyze flight risk in one call.

    Creates a temporary engine and runs the analysis. For
    filtered views over the same run, prefer a persistent
    FlightRiskEngine instance.
    """
    engine = FlightRiskEngine(scorer=scorer, config=config)
    run = await engine.analyze(AnalysisInput.of(people, evaluations, attendance), now=now)
    return run.result


def get_risk_level_from_score(score: float) -> RiskLevel:
    """
    Get risk level classification from a risk score.

    Args:
        score: Score from 0-100

    Returns:
        RiskLevel classification
    """
    return classify_risk(score)


def format_risk_summary(result: CategorizedRisk, people: Optional[Iterable[Person]] = None) -> str:
    """
    Format a human-readable summary of a categorized result.

    Useful for logging and reports.

    Args:
        result: Categorized result or view
        people: Optional people, to show names instead of ids

    Returns:
        Formatted summary string
    """
    names = {p.id: p.name for p in people or () if p.name}

    lines = [
        "=" * 50,
        "FLIGHT RISK SUMMARY",
        "=" * 50,
    ]

    if result.no_data:
        lines.append(result.status_message)
        lines.append("=" * 50)
        return "\n".join(lines)

    lines.append(result.status_message)
    for level in RiskLevel.display_order():
        partition = result.get(level)
        lines.append("")
        lines.append(f"{level.value} risk ({len(partition)}):")
        for assessment in partition:
            factors = assessment.factors
            lines.append(
                f"  {names.get(assessment.person_id, assessment.person_id)}: "
                f"{assessment.risk_score:g} | trend {factors.evaluation_trend.value} | "
                f"absences {factors.absences_90d} | lates {factors.lates_90d} | "
                f"tenure {factors.tenure_months}m"
            )
    lines.append("=" * 50)

    return "\n".join(lines)
