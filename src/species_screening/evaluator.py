"""ConditionMatcher — evaluates condition trees against an answer map.

The matcher is a stateless leaf: it reads the answers, never mutates them,
and never raises for malformed input.  Missing, blank or wrong-typed
answers simply make the condition false:

  - **equals / not_equals**: direct comparison, where a boolean never
    equals a number; an absent field never equals anything and always
    satisfies ``not_equals``
  - **includes**: the answer must be a sequence containing the value
  - **numeric**: the answer is coerced with :func:`to_number`; anything
    that does not coerce fails every operator
  - **not_number**: the inverse check; true when the answer is absent,
    blank or does not coerce
  - **all / any**: short-circuiting conjunction / disjunction

All numeric coercion goes through :func:`to_number` so that blank strings,
whitespace and non-finite values behave the same everywhere.
"""

from __future__ import annotations

import logging
import math
from typing import Any, Mapping

from species_screening.models.condition import (
    AllCondition,
    AnyCondition,
    Condition,
    EqualsCondition,
    IncludesCondition,
    NotEqualsCondition,
    NotNumberCondition,
    NumericCondition,
)

logger = logging.getLogger(__name__)

# Distinguishes "key not present" from an explicit None answer.
_MISSING = object()


def to_number(value: Any) -> float | None:
    """Coerce an answer to a finite float, or ``None`` if it is not numeric.

    Accepted: ints, floats and strings that parse as a float after
    stripping whitespace.  Rejected (``None``): missing values, empty or
    whitespace-only strings, booleans, sequences, NaN and infinities,
    and integers too large for a float.
    """
    if value is None or isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        try:
            number = float(value)
        except OverflowError:
            return None
    elif isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        try:
            number = float(text)
        except ValueError:
            return None
    else:
        return None
    return number if math.isfinite(number) else None


def _same_value(answer: Any, expected: Any) -> bool:
    """Direct comparison that never equates a boolean with a number.

    Python treats ``True == 1``; a questionnaire does not.
    """
    if isinstance(answer, bool) != isinstance(expected, bool):
        return False
    return answer == expected


class ConditionMatcher:
    """Evaluates ``Condition`` models against a flat answer map."""

    def matches(self, answers: Mapping[str, Any], condition: Condition) -> bool:
        """Dispatch on the condition kind and evaluate it.

        Args:
            answers: question id -> answer (string, list of strings, or number)
            condition: a validated condition model

        Returns:
            True if the condition holds.  Unrecognised nodes are false.
        """
        if isinstance(condition, EqualsCondition):
            answer = answers.get(condition.field, _MISSING)
            return answer is not _MISSING and _same_value(answer, condition.equals)

        if isinstance(condition, NotEqualsCondition):
            answer = answers.get(condition.field, _MISSING)
            return answer is _MISSING or not _same_value(answer, condition.not_equals)

        if isinstance(condition, IncludesCondition):
            return self._includes(answers.get(condition.field), condition.includes)

        if isinstance(condition, NumericCondition):
            return self.matches_numeric(answers, condition)

        if isinstance(condition, NotNumberCondition):
            return to_number(answers.get(condition.field)) is None

        if isinstance(condition, AllCondition):
            return all(self.matches(answers, c) for c in condition.conditions)

        if isinstance(condition, AnyCondition):
            return any(self.matches(answers, c) for c in condition.conditions)

        # Fail closed: the loader rejects unknown shapes, so this only
        # happens for hand-built objects.
        logger.warning("Unrecognised condition node treated as false: %r", condition)
        return False

    def matches_numeric(self, answers: Mapping[str, Any], numeric: NumericCondition) -> bool:
        """Compare a numeric answer against the node's single threshold.

        A missing or non-numeric answer is never treated as satisfying a
        threshold, whatever the operator.
        """
        number = to_number(answers.get(numeric.field))
        if number is None:
            return False

        op, threshold = numeric.operator
        if op == "gte":
            return number >= threshold
        if op == "gt":
            return number > threshold
        if op == "lte":
            return number <= threshold
        if op == "lt":
            return number < threshold

        logger.warning("Unknown numeric operator: %s", op)
        return False

    def matches_all(self, answers: Mapping[str, Any], conditions) -> bool:
        """Conjunction over a guard list; an empty list is true."""
        return all(self.matches(answers, c) for c in conditions)

    def matches_any(self, answers: Mapping[str, Any], conditions) -> bool:
        """Disjunction over a guard list; an empty list is false."""
        return any(self.matches(answers, c) for c in conditions)

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    @staticmethod
    def _includes(answer: Any, value: Any) -> bool:
        """Membership in a sequence answer.  Strings are not sequences here."""
        if not isinstance(answer, (list, tuple)):
            return False
        return any(_same_value(item, value) for item in answer)
