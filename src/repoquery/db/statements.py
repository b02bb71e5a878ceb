from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from sqlalchemy import Select, and_, false, func, not_, or_, select, true
from sqlalchemy.sql.elements import ColumnElement

from repoquery.db.models import (
    Base,
    attribute_keys,
    mapped_column_for,
    primary_key_keys,
    resolve_attribute_key,
)
from repoquery.errors import InvalidSortSpecification, UnsupportedPredicateExpression
from repoquery.ordering import Sort
from repoquery.predicates import (
    FieldPredicate,
    GroupOperator,
    Operator,
    PredicateGroup,
)


def _field_clause(model: type[Base], predicate: FieldPredicate) -> ColumnElement[bool]:
    column = mapped_column_for(model, predicate.field)
    value = predicate.value
    clause: ColumnElement[bool]
    match predicate.operator:
        case Operator.eq if value is None:
            clause = column.is_(None)
        case Operator.eq:
            clause = column == value
        case Operator.gt:
            clause = column > value
        case Operator.ge:
            clause = column >= value
        case Operator.lt:
            clause = column < value
        case Operator.le:
            clause = column <= value
        case Operator.like:
            clause = column.like(value)
        case Operator.in_:
            clause = column.in_(value)
        case _:
            raise UnsupportedPredicateExpression(f"Unsupported operator {predicate.operator!r}")
    return not_(clause) if predicate.negate else clause


def compile_predicate(model: type[Base], group: PredicateGroup) -> ColumnElement[bool]:
    """Turn a translated predicate group into a SQLAlchemy boolean clause."""
    clauses = [
        compile_predicate(model, child)
        if isinstance(child, PredicateGroup)
        else _field_clause(model, child)
        for child in group.predicates
    ]
    clause: ColumnElement[bool]
    if group.operator == GroupOperator.and_:
        clause = and_(*clauses) if clauses else true()
    else:
        clause = or_(*clauses) if clauses else false()
    return not_(clause) if group.negate else clause


def compile_order_by(model: type[Base], sorts: Sequence[Sort]) -> list[ColumnElement[Any]]:
    order_by: list[ColumnElement[Any]] = []
    for sort in sorts:
        key = resolve_attribute_key(model, sort.field)
        if key is None:
            raise InvalidSortSpecification(
                f"{model.__name__} has no mapped column {sort.field!r} to sort by",
                clause=sort.field,
            )
        column = mapped_column_for(model, key)
        order_by.append(column.asc() if sort.ascending else column.desc())
    return order_by


def select_entities(model: type[Base]) -> Select[Any]:
    # Columns are labelled with attribute keys so rows map straight back onto the model.
    return select(
        *(mapped_column_for(model, key).label(key) for key in attribute_keys(model))
    )


def build_list_statement(model: type[Base], group: PredicateGroup) -> Select[Any]:
    stmt = select_entities(model)
    if not group.matches_all:
        stmt = stmt.where(compile_predicate(model, group))
    return stmt


def build_page_statement(
    model: type[Base],
    group: PredicateGroup,
    sorts: Sequence[Sort],
    *,
    page_index: int,
    page_size: int,
) -> Select[Any]:
    """Select one 1-based page.

    Primary-key columns not already sorted on are appended as a final
    tie-break, so rows with equal sort values land on exactly one page.
    """
    order_by = compile_order_by(model, sorts)
    sorted_keys = {resolve_attribute_key(model, sort.field) for sort in sorts}
    order_by.extend(
        mapped_column_for(model, key).asc()
        for key in primary_key_keys(model)
        if key not in sorted_keys
    )
    return (
        build_list_statement(model, group)
        .order_by(*order_by)
        .offset((page_index - 1) * page_size)
        .limit(page_size)
    )


def build_count_statement(model: type[Base], group: PredicateGroup) -> Select[Any]:
    stmt = select(func.count()).select_from(model)
    if not group.matches_all:
        stmt = stmt.where(compile_predicate(model, group))
    return stmt
