from __future__ import annotations

from dataclasses import dataclass

from repoquery.errors import InvalidSortSpecification


@dataclass(frozen=True)
class Sort:
    field: str
    ascending: bool = True


def _parse_clause(clause: str) -> Sort:
    tokens = clause.split()
    if len(tokens) != 2:
        raise InvalidSortSpecification(
            f"Sort clause {clause.strip()!r} must be '<field> <direction>'",
            clause=clause,
        )
    name, direction = tokens
    return Sort(field=name, ascending=direction.lower() == "asc")


def parse_ordering(ordering: str | None) -> list[Sort]:
    """Parse ``"CreationTime desc,Id asc"`` into an ordered list of sorts.

    Clauses are comma separated; each needs exactly a field and a direction.
    ``asc`` (any case) sorts ascending and every other direction token sorts
    descending. ``None``, ``""`` and whitespace-only input mean "no ordering".
    """
    if ordering is None or not ordering.strip():
        return []
    return [_parse_clause(clause) for clause in ordering.split(",")]


def format_ordering(sorts: list[Sort]) -> str:
    return ",".join(f"{s.field} {'asc' if s.ascending else 'desc'}" for s in sorts)
