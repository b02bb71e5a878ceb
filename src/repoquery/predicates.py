"""Predicate builder and translation.

Predicates are immutable trees built from ``field(name)``::

    adults_named_bob = field("age").ge(18) & field("name").eq("Bob")
    either = field("age").lt(13) | field("age").gt(65)

``to_predicate_group(model, expression)`` checks the tree against a mapped
entity and returns a normalized ``PredicateGroup``; ``None`` becomes an empty
AND group, which matches every row.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable
from dataclasses import dataclass, replace
from typing import Any, TypeAlias

from repoquery.db.models import Base, resolve_attribute_key
from repoquery.errors import UnsupportedPredicateExpression


class Operator(enum.StrEnum):
    eq = "eq"
    gt = "gt"
    ge = "ge"
    lt = "lt"
    le = "le"
    like = "like"
    in_ = "in"


class GroupOperator(enum.StrEnum):
    and_ = "and"
    or_ = "or"


class _Combinable:
    def __and__(self, other: Predicate) -> PredicateGroup:
        return _combine(GroupOperator.and_, self, other)  # type: ignore[arg-type]

    def __or__(self, other: Predicate) -> PredicateGroup:
        return _combine(GroupOperator.or_, self, other)  # type: ignore[arg-type]

    def and_(self, *others: Predicate) -> PredicateGroup:
        group = self
        for other in others:
            group = group & other
        return group  # type: ignore[return-value]

    def or_(self, *others: Predicate) -> PredicateGroup:
        group = self
        for other in others:
            group = group | other
        return group  # type: ignore[return-value]


@dataclass(frozen=True)
class FieldPredicate(_Combinable):
    field: str
    operator: Operator
    value: Any
    negate: bool = False

    def __invert__(self) -> FieldPredicate:
        return replace(self, negate=not self.negate)


@dataclass(frozen=True)
class PredicateGroup(_Combinable):
    operator: GroupOperator = GroupOperator.and_
    predicates: tuple[Predicate, ...] = ()
    negate: bool = False

    def __invert__(self) -> PredicateGroup:
        return replace(self, negate=not self.negate)

    @property
    def is_empty(self) -> bool:
        return not self.predicates

    @property
    def matches_all(self) -> bool:
        """True only for a plain empty AND group; an empty OR matches nothing."""
        return self.is_empty and self.operator == GroupOperator.and_ and not self.negate


Predicate: TypeAlias = FieldPredicate | PredicateGroup


def _flatten(operator: GroupOperator, predicate: Predicate) -> tuple[Predicate, ...]:
    if (
        isinstance(predicate, PredicateGroup)
        and predicate.operator == operator
        and not predicate.negate
    ):
        return predicate.predicates
    return (predicate,)


def _combine(operator: GroupOperator, left: Predicate, right: Predicate) -> PredicateGroup:
    if not isinstance(right, FieldPredicate | PredicateGroup):
        return NotImplemented
    return PredicateGroup(operator, _flatten(operator, left) + _flatten(operator, right))


class Field:
    """Entry point of the builder API: ``field("age").gt(18)``."""

    __slots__ = ("name",)

    def __init__(self, name: str) -> None:
        if not isinstance(name, str) or not name.strip():
            raise UnsupportedPredicateExpression("Field name must be a non-empty string")
        self.name = name.strip()

    def __repr__(self) -> str:
        return f"Field({self.name!r})"

    def _make(self, operator: Operator, value: Any, *, negate: bool = False) -> FieldPredicate:
        return FieldPredicate(self.name, operator, value, negate)

    def eq(self, value: Any) -> FieldPredicate:
        return self._make(Operator.eq, value)

    def ne(self, value: Any) -> FieldPredicate:
        return self._make(Operator.eq, value, negate=True)

    def gt(self, value: Any) -> FieldPredicate:
        return self._make(Operator.gt, value)

    def ge(self, value: Any) -> FieldPredicate:
        return self._make(Operator.ge, value)

    def lt(self, value: Any) -> FieldPredicate:
        return self._make(Operator.lt, value)

    def le(self, value: Any) -> FieldPredicate:
        return self._make(Operator.le, value)

    def like(self, pattern: str) -> FieldPredicate:
        return self._make(Operator.like, pattern)

    def in_(self, values: Iterable[Any]) -> FieldPredicate:
        if isinstance(values, str | bytes) or not isinstance(values, Iterable):
            raise UnsupportedPredicateExpression(
                f"in_() on {self.name!r} needs a collection of values, got {type(values).__name__}"
            )
        return self._make(Operator.in_, tuple(values))

    def is_null(self) -> FieldPredicate:
        return self._make(Operator.eq, None)

    def is_not_null(self) -> FieldPredicate:
        return self._make(Operator.eq, None, negate=True)

    def between(self, low: Any, high: Any) -> PredicateGroup:
        return self.ge(low) & self.le(high)


def field(name: str) -> Field:
    return Field(name)


def _translate_field(model: type[Base], predicate: FieldPredicate) -> FieldPredicate:
    key = resolve_attribute_key(model, predicate.field)
    if key is None:
        raise UnsupportedPredicateExpression(
            f"{model.__name__} has no mapped column {predicate.field!r}"
        )
    try:
        operator = Operator(predicate.operator)
    except ValueError as exc:
        raise UnsupportedPredicateExpression(
            f"Unsupported operator {predicate.operator!r} on {predicate.field!r}"
        ) from exc

    value = predicate.value
    if operator == Operator.like and not isinstance(value, str):
        raise UnsupportedPredicateExpression(f"like() on {key!r} needs a string pattern")
    if operator == Operator.in_:
        if isinstance(value, str | bytes) or not isinstance(value, Iterable):
            raise UnsupportedPredicateExpression(f"in_() on {key!r} needs a collection of values")
        value = tuple(value)
    elif value is None and operator != Operator.eq:
        raise UnsupportedPredicateExpression(
            f"Cannot compare {key!r} to None with {operator.value!r}; use is_null()"
        )

    return FieldPredicate(key, operator, value, bool(predicate.negate))


def _translate(model: type[Base], predicate: object) -> Predicate:
    if isinstance(predicate, FieldPredicate):
        return _translate_field(model, predicate)
    if isinstance(predicate, PredicateGroup):
        try:
            operator = GroupOperator(predicate.operator)
        except ValueError as exc:
            raise UnsupportedPredicateExpression(
                f"Unsupported group operator {predicate.operator!r}"
            ) from exc
        return PredicateGroup(
            operator,
            tuple(_translate(model, child) for child in predicate.predicates),
            bool(predicate.negate),
        )
    raise UnsupportedPredicateExpression(
        f"Cannot translate {type(predicate).__name__} into a predicate"
    )


def to_predicate_group(model: type[Base], expression: Predicate | None) -> PredicateGroup:
    """Validate ``expression`` against ``model`` and return it as a group.

    Field names are resolved to attribute keys (exact match first, then
    case-insensitive against attribute keys and column names), so the result
    only ever names mapped attributes.
    """
    if expression is None:
        return PredicateGroup()
    translated = _translate(model, expression)
    if isinstance(translated, FieldPredicate):
        return PredicateGroup(GroupOperator.and_, (translated,))
    return translated
