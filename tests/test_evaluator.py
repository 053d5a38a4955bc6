"""ConditionMatcher unit tests — every condition kind and the numeric coercion.

Each condition kind has at least one positive and one negative case, plus
the degradation cases for missing, blank and wrong-typed answers.

Condition reference (from models/condition.py):
    equals, not_equals  — direct comparison; absent never equals, always not-equals
    includes            — membership in a sequence answer
    numeric             — gte / gt / lte / lt after to_number() coercion
    all, any            — short-circuiting conjunction / disjunction
"""

import math

import pytest

from species_screening.evaluator import ConditionMatcher, to_number
from species_screening.models.condition import (
    AllCondition,
    AnyCondition,
    EqualsCondition,
    IncludesCondition,
    NotEqualsCondition,
    NotNumberCondition,
    NumericCondition,
    parse_condition,
)


class ConditionMatcherSpy(ConditionMatcher):
    """Records the kind of every node the matcher visits."""

    def __init__(self, seen):
        self.seen = seen

    def matches(self, answers, condition):
        self.seen.append(condition.kind)
        return super().matches(answers, condition)


# =====================================================================
# to_number — the single coercion point
# =====================================================================


class TestToNumber:
    """Numeric coercion accepts numbers and numeric strings only."""

    @pytest.mark.parametrize(
        "value, expected",
        [
            (3, 3.0),
            (2.5, 2.5),
            ("2", 2.0),
            ("  1.75 ", 1.75),
            ("-4", -4.0),
            ("1e2", 100.0),
        ],
    )
    def test_numeric_values(self, value, expected):
        assert to_number(value) == expected

    @pytest.mark.parametrize(
        "value",
        [None, "", "   ", "abc", "2 acres", True, False, ["2"], {"v": 2},
         float("nan"), float("inf"), "nan", "-inf", 10**400, -(10**400)],
    )
    def test_non_numeric_values_are_none(self, value):
        assert to_number(value) is None

    def test_result_is_finite(self):
        assert math.isfinite(to_number("12.5"))

    def test_huge_integer_does_not_raise(self):
        """JSON decodes a long digit run into an int that float() cannot hold."""
        assert to_number(int("9" * 400)) is None
        assert to_number(10**300) == 1e300


# =====================================================================
# Leaf conditions
# =====================================================================


class TestFieldComparison:
    """equals / not_equals against present and absent fields."""

    def test_equals(self, matcher):
        cond = EqualsCondition(field="q1", equals="Yes")
        assert matcher.matches({"q1": "Yes"}, cond) is True
        assert matcher.matches({"q1": "No"}, cond) is False

    def test_equals_missing_field_is_false(self, matcher):
        cond = EqualsCondition(field="q1", equals="Yes")
        assert matcher.matches({}, cond) is False

    def test_equals_missing_field_never_matches_none(self, matcher):
        """An absent key is not the same as an explicit null answer."""
        cond = EqualsCondition(field="q1", equals=None)
        assert matcher.matches({}, cond) is False
        assert matcher.matches({"q1": None}, cond) is True

    def test_equals_is_type_sensitive(self, matcher):
        cond = EqualsCondition(field="q1", equals="2")
        assert matcher.matches({"q1": 2}, cond) is False

    @pytest.mark.parametrize("expected, answer", [(1, True), (0, False), (True, 1), (False, 0.0)])
    def test_booleans_never_equal_numbers(self, matcher, expected, answer):
        assert matcher.matches({"q1": answer}, EqualsCondition(field="q1", equals=expected)) is False
        assert matcher.matches({"q1": answer}, NotEqualsCondition(field="q1", not_equals=expected)) is True

    def test_booleans_and_numbers_match_their_own_kind(self, matcher):
        assert matcher.matches({"q1": True}, EqualsCondition(field="q1", equals=True)) is True
        assert matcher.matches({"q1": 2.0}, EqualsCondition(field="q1", equals=2)) is True

    def test_yaml_integer_does_not_match_json_true(self, matcher):
        cond = parse_condition({"field": "x", "equals": 1})
        assert matcher.matches({"x": True}, cond) is False

    def test_not_equals(self, matcher):
        cond = NotEqualsCondition(field="q1", not_equals="No")
        assert matcher.matches({"q1": "Yes"}, cond) is True
        assert matcher.matches({"q1": "No"}, cond) is False

    def test_not_equals_missing_field_is_true(self, matcher):
        cond = NotEqualsCondition(field="q1", not_equals="No")
        assert matcher.matches({}, cond) is True

    def test_not_sure_is_distinct_from_missing(self, matcher):
        cond = EqualsCondition(field="q1", equals="Not sure")
        assert matcher.matches({"q1": "Not sure"}, cond) is True
        assert matcher.matches({}, cond) is False


class TestMembership:
    """includes — the answer must be a sequence containing the value."""

    def test_value_in_list(self, matcher):
        cond = IncludesCondition(field="acts", includes="Prescribed fire")
        assert matcher.matches({"acts": ["Prescribed fire", "Mowing"]}, cond) is True

    def test_value_not_in_list(self, matcher):
        cond = IncludesCondition(field="acts", includes="Prescribed fire")
        assert matcher.matches({"acts": ["Mowing"]}, cond) is False

    def test_tuple_answer(self, matcher):
        cond = IncludesCondition(field="acts", includes="a")
        assert matcher.matches({"acts": ("a", "b")}, cond) is True

    def test_membership_does_not_mix_booleans_and_numbers(self, matcher):
        assert matcher.matches({"acts": [True]}, IncludesCondition(field="acts", includes=1)) is False
        assert matcher.matches({"acts": [0, 1]}, IncludesCondition(field="acts", includes=False)) is False
        assert matcher.matches({"acts": [0, True]}, IncludesCondition(field="acts", includes=True)) is True

    @pytest.mark.parametrize(
        "answers",
        [{}, {"acts": None}, {"acts": "Prescribed fire"}, {"acts": 3}, {"acts": {"Prescribed fire": 1}}],
    )
    def test_missing_or_non_sequence_is_false(self, matcher, answers):
        """Fail closed: a string is not searched as a substring."""
        cond = IncludesCondition(field="acts", includes="Prescribed fire")
        assert matcher.matches(answers, cond) is False


class TestNumeric:
    """numeric — each operator, boundaries, and coercion failures."""

    def test_gte(self, matcher):
        cond = NumericCondition(field="acres", gte=2)
        assert matcher.matches({"acres": 2}, cond) is True
        assert matcher.matches({"acres": "3.5"}, cond) is True
        assert matcher.matches({"acres": 1.99}, cond) is False

    def test_gt(self, matcher):
        cond = NumericCondition(field="acres", gt=2)
        assert matcher.matches({"acres": 2.01}, cond) is True
        assert matcher.matches({"acres": 2}, cond) is False

    def test_lte(self, matcher):
        cond = NumericCondition(field="acres", lte=2)
        assert matcher.matches({"acres": "2"}, cond) is True
        assert matcher.matches({"acres": 2.5}, cond) is False

    def test_lt(self, matcher):
        cond = NumericCondition(field="acres", lt=2)
        assert matcher.matches({"acres": 0}, cond) is True
        assert matcher.matches({"acres": 2}, cond) is False

    @pytest.mark.parametrize("op", ["gte", "gt", "lte", "lt"])
    @pytest.mark.parametrize("answer", [None, "", "  ", "unknown", "Not sure", ["1"]])
    def test_unknown_never_satisfies_threshold(self, matcher, op, answer):
        cond = NumericCondition(field="acres", **{op: 0})
        assert matcher.matches_numeric({"acres": answer}, cond) is False

    def test_missing_field(self, matcher):
        cond = NumericCondition(field="acres", lt=100)
        assert matcher.matches_numeric({}, cond) is False

    def test_matches_dispatches_to_numeric(self, matcher):
        cond = parse_condition({"field": "acres", "gte": 2})
        assert isinstance(cond, NumericCondition)
        assert matcher.matches({"acres": "2"}, cond) is True


class TestNotNumber:
    """not_number — true exactly when numeric coercion fails."""

    @pytest.mark.parametrize("answers", [{}, {"acres": None}, {"acres": ""}, {"acres": "lots"},
                                         {"acres": ["2"]}, {"acres": 10**400}])
    def test_unusable_answers(self, matcher, answers):
        cond = NotNumberCondition(field="acres", not_number=True)
        assert matcher.matches(answers, cond) is True

    @pytest.mark.parametrize("answer", [0, 2.5, "3", " 1.5 "])
    def test_numeric_answers(self, matcher, answer):
        cond = parse_condition({"field": "acres", "notNumber": True})
        assert matcher.matches({"acres": answer}, cond) is False


# =====================================================================
# Composite conditions
# =====================================================================


class TestComposite:
    """all / any, empty lists, nesting and short-circuiting."""

    def test_all(self, matcher):
        cond = parse_condition({"all": [
            {"field": "a", "equals": "Yes"},
            {"field": "b", "equals": "Yes"},
        ]})
        assert matcher.matches({"a": "Yes", "b": "Yes"}, cond) is True
        assert matcher.matches({"a": "Yes", "b": "No"}, cond) is False

    def test_any(self, matcher):
        cond = parse_condition({"any": [
            {"field": "a", "equals": "Yes"},
            {"field": "b", "equals": "Yes"},
        ]})
        assert matcher.matches({"a": "No", "b": "Yes"}, cond) is True
        assert matcher.matches({"a": "No", "b": "No"}, cond) is False

    def test_empty_all_is_true(self, matcher):
        assert matcher.matches({}, AllCondition(conditions=())) is True

    def test_empty_any_is_false(self, matcher):
        assert matcher.matches({}, AnyCondition(conditions=())) is False

    def test_nested(self, matcher):
        cond = parse_condition({"all": [
            {"field": "acts", "includes": "Herbicide application"},
            {"any": [
                {"field": "method", "equals": "Broadcast"},
                {"all": [
                    {"field": "exposure", "notEquals": "No"},
                    {"field": "acres", "gt": 1},
                ]},
            ]},
        ]})
        base = {"acts": ["Herbicide application"]}
        assert matcher.matches({**base, "method": "Broadcast"}, cond) is True
        assert matcher.matches({**base, "method": "Spot", "acres": "5"}, cond) is True
        assert matcher.matches({**base, "method": "Spot", "exposure": "No", "acres": 5}, cond) is False
        assert matcher.matches({"method": "Broadcast"}, cond) is False

    def test_all_short_circuits(self, matcher):
        """The second condition is never evaluated once the first fails."""
        seen = []
        spy = ConditionMatcherSpy(seen)
        cond = parse_condition({"all": [
            {"field": "a", "equals": "Yes"},
            {"field": "b", "equals": "Yes"},
        ]})
        assert spy.matches({"a": "No"}, cond) is False
        assert seen == ["all", "equals"]

    def test_any_short_circuits(self, matcher):
        seen = []
        spy = ConditionMatcherSpy(seen)
        cond = parse_condition({"any": [
            {"field": "a", "equals": "Yes"},
            {"field": "b", "equals": "Yes"},
        ]})
        assert spy.matches({"a": "Yes"}, cond) is True
        assert seen == ["any", "equals"]


class TestFailClosed:
    """Objects that are not condition models evaluate to false."""

    def test_unrecognised_node_is_false(self, matcher):
        assert matcher.matches({"a": "Yes"}, {"field": "a", "equals": "Yes"}) is False

    def test_none_is_false(self, matcher):
        assert matcher.matches({}, None) is False

