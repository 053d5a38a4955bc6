"""Condition models — the boolean grammar evaluated against an answer map.

Each condition kind is its own frozen Pydantic model:

  Leaf conditions (reference one answer field):
    - equals:      ``{field: F, equals: V}``
    - not_equals:  ``{field: F, notEquals: V}``
    - includes:    ``{field: F, includes: V}`` — V must appear in a sequence answer
    - numeric:     ``{field: F, gte|gt|lte|lt: N}`` — exactly one operator
    - not_number:  ``{field: F, notNumber: true}`` — answer absent, blank or non-numeric

  Composite conditions (nest to arbitrary depth):
    - all:         ``{all: [Condition, ...]}``
    - any:         ``{any: [Condition, ...]}``

Ruleset documents distinguish the kinds by which keys are present, so the
``Condition`` union uses a callable discriminator that inspects the raw
dict (or an explicit ``kind`` key).  A node that matches no shape is
rejected when the ruleset is parsed; it never reaches the matcher.
"""

from __future__ import annotations

from typing import Annotated, Any, Literal, Optional, Tuple, Union

from pydantic import (
    BaseModel,
    ConfigDict,
    Discriminator,
    Field,
    Tag,
    TypeAdapter,
    model_validator,
)

# Numeric operators in the order they are checked.
NUMERIC_OPERATORS: tuple[str, ...] = ("gte", "gt", "lte", "lt")


class _ConditionModel(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid", populate_by_name=True)


# --- Leaf conditions ---

class EqualsCondition(_ConditionModel):
    """True when the answer equals ``equals``.  An absent answer never matches."""

    kind: Literal["equals"] = "equals"
    field: str
    equals: Any


class NotEqualsCondition(_ConditionModel):
    """True when the answer differs from ``not_equals``.  An absent answer always matches."""

    kind: Literal["not_equals"] = "not_equals"
    field: str
    not_equals: Any = Field(alias="notEquals")


class IncludesCondition(_ConditionModel):
    """True when the answer is a sequence containing ``includes``."""

    kind: Literal["includes"] = "includes"
    field: str
    includes: Any


class NumericCondition(_ConditionModel):
    """Compare a numeric (or numeric-looking) answer against a threshold.

    Exactly one of ``gte``, ``gt``, ``lte``, ``lt`` must be set.  Also used
    on its own as the optional ``numeric`` guard of triggers and additive
    rules.
    """

    kind: Literal["numeric"] = "numeric"
    field: str
    gte: Optional[float] = None
    gt: Optional[float] = None
    lte: Optional[float] = None
    lt: Optional[float] = None

    @model_validator(mode="after")
    def _exactly_one_operator(self):
        set_ops = [op for op in NUMERIC_OPERATORS if getattr(self, op) is not None]
        if len(set_ops) != 1:
            raise ValueError(
                f"numeric condition on '{self.field}' needs exactly one of "
                f"{', '.join(NUMERIC_OPERATORS)}; got {set_ops or 'none'}"
            )
        return self

    @property
    def operator(self) -> tuple[str, float]:
        """The single ``(operator, threshold)`` pair configured on this node."""
        for op in NUMERIC_OPERATORS:
            threshold = getattr(self, op)
            if threshold is not None:
                return op, threshold
        # Unreachable for validated instances
        raise ValueError(f"numeric condition on '{self.field}' has no operator")


class NotNumberCondition(_ConditionModel):
    """True when the answer does not coerce to a number.

    Covers an absent key, a blank string and free text alike, so a ruleset
    can penalise a numeric question that was skipped or mistyped.
    """

    kind: Literal["not_number"] = "not_number"
    field: str
    not_number: Literal[True] = Field(alias="notNumber")


# --- Composite conditions ---

class AllCondition(_ConditionModel):
    """Conjunction; short-circuits on the first false.  Empty is true."""

    kind: Literal["all"] = "all"
    conditions: Tuple["Condition", ...] = Field(alias="all")


class AnyCondition(_ConditionModel):
    """Disjunction; short-circuits on the first true.  Empty is false."""

    kind: Literal["any"] = "any"
    conditions: Tuple["Condition", ...] = Field(alias="any")


def condition_kind(value: Any) -> str | None:
    """Discriminator for the ``Condition`` union.

    Returns the kind tag for a raw dict (from which keys are present) or a
    model instance, or ``None`` when the shape is not recognised — Pydantic
    then reports the node as a validation error.
    """
    if not isinstance(value, dict):
        return getattr(value, "kind", None)

    if "kind" in value:
        return value["kind"]

    has_all = "all" in value
    has_any = "any" in value
    if has_all and has_any:
        # Exactly one composite per node
        return None
    if has_all:
        return "all"
    if has_any:
        return "any"

    if "field" not in value:
        return None
    if "equals" in value:
        return "equals"
    if "notEquals" in value or "not_equals" in value:
        return "not_equals"
    if "includes" in value:
        return "includes"
    if "notNumber" in value or "not_number" in value:
        return "not_number"
    if any(op in value for op in NUMERIC_OPERATORS):
        return "numeric"
    return None


# --- Discriminated union of all condition kinds ---

Condition = Annotated[
    Union[
        Annotated[EqualsCondition, Tag("equals")],
        Annotated[NotEqualsCondition, Tag("not_equals")],
        Annotated[IncludesCondition, Tag("includes")],
        Annotated[NumericCondition, Tag("numeric")],
        Annotated[NotNumberCondition, Tag("not_number")],
        Annotated[AllCondition, Tag("all")],
        Annotated[AnyCondition, Tag("any")],
    ],
    Discriminator(condition_kind),
]

AllCondition.model_rebuild()
AnyCondition.model_rebuild()

_condition_adapter: TypeAdapter = TypeAdapter(Condition)


def parse_condition(raw: Any) -> Condition:
    """Validate a single raw condition node (e.g. from YAML) into its model.

    Raises:
        pydantic.ValidationError: if the node matches no condition shape.
    """
    return _condition_adapter.validate_python(raw)
