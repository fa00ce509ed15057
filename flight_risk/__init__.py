"""
Flight Risk Scoring Engine - Package.

============================================================
PURPOSE
============================================================
The Flight Risk Scoring Engine turns per-person history
(evaluations, attendance, tenure) into a categorized,
ranked flight-risk assessment.

============================================================
WHAT IT IS
============================================================
- Batch, on-demand recomputation over materialized records
- Feature extraction against a single injected "now"
- Concurrent calls to an external predictive scorer
- Produces discrete levels: LOW, MEDIUM, HIGH

============================================================
WHAT IT IS NOT
============================================================
- NOT a training pipeline (the scorer is opaque)
- NOT a persistence layer (results live for one run)
- NOT a streaming system

============================================================
PIPELINE
============================================================
1. Window filter: attendance in the last 90 days
2. Feature extractor: tenure, last 3 scores, absences, lates
3. Eligibility gate: at least 2 evaluations
4. Scorer adapter: one remote request per eligible person
5. Classifier: HIGH (>70), MEDIUM (>40), LOW
6. Categorizer: partitions ordered by score descending
7. View filter: narrow to one organizational unit

============================================================
USAGE
============================================================
    from flight_risk import (
        FlightRiskEngine,
        HttpRiskScorer,
        build_analysis_input,
    )

    engine = FlightRiskEngine(scorer=HttpRiskScorer(endpoint_url=url))

    data = build_analysis_input(people, evaluations, attendance)
    run = await engine.analyze(data)

    print(run.result.status_message)
    for assessment in engine.view("Engineering").high:
        print(f"{assessment.person_id}: {assessment.risk_score}")

============================================================
"""

# Types
from .types import (
    # Constants
    FAILURE_SENTINEL,
    ALL_UNITS,
    NO_DATA_MESSAGE,

    # Enums
    RiskLevel,
    EvaluationTrend,
    AttendanceStatus,

    # Input types
    Person,
    EvaluationRecord,
    AttendanceRecord,
    AnalysisInput,

    # Derived and output types
    FeatureVector,
    ScorerResult,
    RiskFactors,
    RiskAssessment,
    CategorizedRisk,
    AnalysisRun,

    # Exceptions
    FlightRiskError,
    ConfigurationError,
    InvalidRecordError,
    ScorerError,
    ScorerUnavailableError,
    MalformedScorerResponseError,
)

# Configuration
from .config import (
    FeatureConfig,
    ClassificationConfig,
    ScorerConfig,
    FlightRiskConfig,
    get_default_config,
    load_config_from_env,
)

# Clock
from .clock import (
    ClockProtocol,
    SystemClock,
    FixedClock,
)

# Features
from .features import (
    filter_attendance_window,
    select_evaluations,
    compute_tenure_months,
    is_eligible,
    extract_features,
)

# Classifier
from .classifier import (
    classify_risk,
    derive_trend,
    build_assessment,
)

# Scorer
from .scorer import (
    RiskScorer,
    HttpRiskScorer,
    ScoringRequest,
    ScorerResponse,
    failure_result,
    build_request_payload,
    parse_scorer_response,
    build_risk_prompt,
)

# Categorizer
from .categorizer import (
    categorize,
    filter_by_unit,
    organization_units,
)

# Engine
from .engine import (
    FlightRiskEngine,
    analyze_flight_risk,
    get_risk_level_from_score,
    format_risk_summary,
)

# Loaders
from .loaders import (
    parse_person,
    parse_evaluation,
    parse_attendance,
    build_analysis_input,
)


__all__ = [
    # Constants
    "FAILURE_SENTINEL",
    "ALL_UNITS",
    "NO_DATA_MESSAGE",

    # Enums
    "RiskLevel",
    "EvaluationTrend",
    "AttendanceStatus",

    # Input types
    "Person",
    "EvaluationRecord",
    "AttendanceRecord",
    "AnalysisInput",

    # Derived and output types
    "FeatureVector",
    "ScorerResult",
    "RiskFactors",
    "RiskAssessment",
    "CategorizedRisk",
    "AnalysisRun",

    # Exceptions
    "FlightRiskError",
    "ConfigurationError",
    "InvalidRecordError",
    "ScorerError",
    "ScorerUnavailableError",
    "MalformedScorerResponseError",

    # Configuration
    "FeatureConfig",
    "ClassificationConfig",
    "ScorerConfig",
    "FlightRiskConfig",
    "get_default_config",
    "load_config_from_env",

    # Clock
    "ClockProtocol",
    "SystemClock",
    "FixedClock",

    # Features
    "filter_attendance_window",
    "select_evaluations",
    "compute_tenure_months",
    "is_eligible",
    "extract_features",

    # Classifier
    "classify_risk",
    "derive_trend",
    "build_assessment",

    # Scorer
    "RiskScorer",
    "HttpRiskScorer",
    "ScoringRequest",
    "ScorerResponse",
    "failure_result",
    "build_request_payload",
    "parse_scorer_response",
    "build_risk_prompt",

    # Categorizer
    "categorize",
    "filter_by_unit",
    "organization_units",

    # Engine
    "FlightRiskEngine",
    "analyze_flight_risk",
    "get_risk_level_from_score",
    "format_risk_summary",

    # Loaders
    "parse_person",
    "parse_evaluation",
    "parse_attendance",
    "build_analysis_input",
]


__version__ = "1.0.0"
