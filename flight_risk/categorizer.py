"""
Flight Risk Scoring Engine - Categorizer and View Filter.

============================================================
PURPOSE
============================================================
1. Partition assessments by risk level, each partition
   ordered by risk score descending (stable on ties)
2. Narrow a categorized result to one organizational unit
   without recomputing anything

============================================================
VIEW FILTER RULES
============================================================
- "all", None or a blank selector passes the result through
- Otherwise a person matches when their unit, stripped of
  surrounding whitespace, equals the selector
- People without a unit never match a specific selector
- The base result is never modified

============================================================
"""

from typing import Dict, Iterable, List, Optional, Tuple

from .types import ALL_UNITS, CategorizedRisk, Person, RiskAssessment, RiskLevel


def _by_score_desc(assessments: List[RiskAssessment]) -> Tuple[RiskAssessment, ...]:
    # sorted() is stable, so equal scores keep their input order
    return tuple(sorted(assessments, key=lambda a: a.risk_score, reverse=True))


def categorize(assessments: Iterable[RiskAssessment]) -> CategorizedRisk:
    """
    Partition assessments into High, Medium and Low.

    Args:
        assessments: Assessments of every successfully scored person

    Returns:
        CategorizedRisk; no_data is True when there was nothing to partition
    """
    partitions: Dict[RiskLevel, List[RiskAssessment]] = {level: [] for level in RiskLevel}
    for assessment in assessments:
        partitions[assessment.risk_level].append(assessment)

    total = sum(len(p) for p in partitions.values())

    return CategorizedRisk(
        high=_by_score_desc(partitions[RiskLevel.HIGH]),
        medium=_by_score_desc(partitions[RiskLevel.MEDIUM]),
        low=_by_score_desc(partitions[RiskLevel.LOW]),
        no_data=total == 0,
    )


def _normalize_unit(unit: Optional[str]) -> Optional[str]:
    if unit is None:
        return None
    unit = unit.strip()
    return unit or None


def is_all_units(selector: Optional[str]) -> bool:
    """Check if a selector means "every unit"."""
    normalized = _normalize_unit(selector)
    return normalized is None or normalized == ALL_UNITS


def filter_by_unit(
    result: CategorizedRisk,
    people: Iterable[Person],
    unit: Optional[str] = ALL_UNITS,
) -> CategorizedRisk:
    """
    Project a categorized result onto one organizational unit.

    Args:
        result: Base categorized result
        people: People with their current unit
        unit: Unit selector, or "all"

    Returns:
        A new CategorizedRisk (or result itself for "all")
    """
    if is_all_units(unit):
        return result

    selected = _normalize_unit(unit)
    member_ids = {
        person.id for person in people
        if _normalize_unit(person.organization_unit) == selected
    }

    def keep(partition: Tuple[RiskAssessment, ...]) -> Tuple[RiskAssessment, ...]:
        return tuple(a for a in partition if a.person_id in member_ids)

    return CategorizedRisk(
        high=keep(result.high),
        medium=keep(result.medium),
        low=keep(result.low),
        no_data=result.no_data,
    )


def organization_units(people: Iterable[Person]) -> List[str]:
    """Distinct non-blank units, sorted, for building a selector."""
    units = {_normalize_unit(person.organization_unit) for person in people}
    return sorted(u for u in units if u is not None)
