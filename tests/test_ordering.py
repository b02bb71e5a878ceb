from __future__ import annotations

import pytest

from repoquery.errors import InvalidSortSpecification
from repoquery.ordering import Sort, format_ordering, parse_ordering


def test_parse_ordering_preserves_clause_order_and_directions() -> None:
    sorts = parse_ordering("CreationTime desc,Id asc")

    assert sorts == [Sort("CreationTime", ascending=False), Sort("Id", ascending=True)]


def test_parse_ordering_direction_is_case_insensitive() -> None:
    sorts = parse_ordering("a ASC,b Asc,c aSc")

    assert [s.ascending for s in sorts] == [True, True, True]


def test_parse_ordering_treats_any_other_direction_as_descending() -> None:
    sorts = parse_ordering("a desc,b DESC,c down,d ascending")

    assert [s.ascending for s in sorts] == [False, False, False, False]


@pytest.mark.parametrize("ordering", [None, "", "   "])
def test_parse_ordering_empty_input_yields_no_sorts(ordering: str | None) -> None:
    assert parse_ordering(ordering) == []


def test_parse_ordering_tolerates_extra_whitespace() -> None:
    sorts = parse_ordering("  name   asc ,  age\tdesc ")

    assert sorts == [Sort("name", True), Sort("age", False)]


@pytest.mark.parametrize(
    "ordering",
    ["Age", "Age desc,Name", "Age desc,", "Age desc extra", ",Age desc"],
)
def test_parse_ordering_rejects_malformed_clauses(ordering: str) -> None:
    with pytest.raises(InvalidSortSpecification):
        parse_ordering(ordering)


def test_invalid_sort_specification_is_a_value_error_and_names_clause() -> None:
    with pytest.raises(ValueError) as excinfo:
        parse_ordering("Name asc,Age")

    assert isinstance(excinfo.value, InvalidSortSpecification)
    assert excinfo.value.clause == "Age"


def test_format_ordering_normalizes_directions() -> None:
    assert format_ordering(parse_ordering("a ASC,b whatever")) == "a asc,b desc"
    assert format_ordering([]) == ""
