"""
Categorizer and View Filter Tests.

Tests cover:
- Partitioning by level and ordering by score
- Stable ordering of ties
- The distinct no-data state
- Organizational-unit filtering
"""

from flight_risk import (
    NO_DATA_MESSAGE,
    CategorizedRisk,
    EvaluationTrend,
    Person,
    RiskAssessment,
    RiskFactors,
    RiskLevel,
    categorize,
    classify_risk,
    filter_by_unit,
    organization_units,
)


def assessment(person_id: str, score: float) -> RiskAssessment:
    return RiskAssessment(
        person_id=person_id,
        risk_score=score,
        risk_level=classify_risk(score),
        summary="",
        factors=RiskFactors(EvaluationTrend.STABLE, 0, 0, 12),
    )


def ids(partition) -> list:
    return [a.person_id for a in partition]


# =============================================================
# TEST: Categorize
# =============================================================

class TestCategorize:
    """Test partitioning and ordering."""

    def test_partitions_by_level(self):
        result = categorize([assessment("a", 80), assessment("b", 50), assessment("c", 10)])

        assert ids(result.high) == ["a"]
        assert ids(result.medium) == ["b"]
        assert ids(result.low) == ["c"]
        assert result.no_data is False

    def test_sorted_by_score_descending(self):
        result = categorize([assessment("a", 72), assessment("b", 95), assessment("c", 81)])

        assert ids(result.high) == ["b", "c", "a"]

    def test_ties_keep_input_order(self):
        """Equal scores stay in their original relative order."""
        result = categorize([
            assessment("first", 60),
            assessment("top", 65),
            assessment("second", 60),
            assessment("third", 60),
        ])

        assert ids(result.medium) == ["top", "first", "second", "third"]

    def test_empty_input_is_no_data(self):
        result = categorize([])

        assert result.no_data is True
        assert result.is_empty
        assert result.status_message == NO_DATA_MESSAGE

    def test_all_low_is_not_no_data(self):
        """An all-low result is populated and reported differently from no data."""
        result = categorize([assessment("a", 5), assessment("b", 20)])

        assert result.no_data is False
        assert result.high == () and result.medium == ()
        assert result.status_message != NO_DATA_MESSAGE
        assert "2 people assessed" in result.status_message

    def test_all_assessments_highest_first(self):
        result = categorize([assessment("low", 1), assessment("high", 99), assessment("mid", 55)])

        assert ids(result.all_assessments) == ["high", "mid", "low"]
        assert result.get(RiskLevel.MEDIUM) == result.medium
        assert result.total == 3


# =============================================================
# TEST: View Filter
# =============================================================

PEOPLE = [
    Person(id="a", organization_unit="Sales"),
    Person(id="b", organization_unit="Engineering"),
    Person(id="c", organization_unit=" Sales "),
    Person(id="d", organization_unit=None),
    Person(id="e", organization_unit="Sales"),
]


def base_result() -> CategorizedRisk:
    return categorize([
        assessment("a", 90),
        assessment("b", 85),
        assessment("c", 95),
        assessment("d", 50),
        assessment("e", 10),
    ])


class TestFilterByUnit:
    """Test organizational-unit projection."""

    def test_all_passes_through(self):
        base = base_result()

        assert filter_by_unit(base, PEOPLE, "all") == base

    def test_blank_selector_passes_through(self):
        base = base_result()

        assert filter_by_unit(base, PEOPLE, "  ") == base
        assert filter_by_unit(base, PEOPLE, None) == base

    def test_specific_unit_preserves_order(self):
        view = filter_by_unit(base_result(), PEOPLE, "Sales")

        assert ids(view.high) == ["c", "a"]
        assert ids(view.medium) == []
        assert ids(view.low) == ["e"]

    def test_people_without_unit_excluded(self):
        """Unassigned people never match a specific unit."""
        view = filter_by_unit(base_result(), PEOPLE, "Engineering")

        assert ids(view.all_assessments) == ["b"]

    def test_idempotent(self):
        base = base_result()
        once = filter_by_unit(base, PEOPLE, "Sales")

        assert filter_by_unit(once, PEOPLE, "Sales") == once

    def test_does_not_mutate_base(self):
        base = base_result()
        snapshot = base.to_dict()

        filter_by_unit(base, PEOPLE, "Sales")
        filter_by_unit(base, PEOPLE, "Engineering")

        assert base.to_dict() == snapshot

    def test_empty_unit_view_is_not_no_data(self):
        """A populated run viewed through an empty unit is not "no data"."""
        view = filter_by_unit(base_result(), PEOPLE, "Finance")

        assert view.is_empty
        assert view.no_data is False

    def test_unit_follows_current_people(self):
        """Membership is taken from the people passed in, not from the run."""
        moved = [Person(id="b", organization_unit="Sales")]

        view = filter_by_unit(base_result(), moved, "Sales")

        assert ids(view.all_assessments) == ["b"]


class TestOrganizationUnits:
    """Test selector options."""

    def test_distinct_sorted_non_blank(self):
        assert organization_units(PEOPLE) == ["Engineering", "Sales"]
