"""Async list, paging and raw-SQL queries over SQLAlchemy repositories."""

from repoquery.db.providers import ConnectionProvider, DatabaseProvider, SessionProvider
from repoquery.db.repos.base import BaseRepository
from repoquery.errors import (
    DataAccessError,
    InvalidPageRequest,
    InvalidSortSpecification,
    RepoQueryError,
    UnsupportedPredicateExpression,
)
from repoquery.ordering import Sort, parse_ordering
from repoquery.predicates import (
    Field,
    FieldPredicate,
    GroupOperator,
    Operator,
    PredicateGroup,
    field,
    to_predicate_group,
)

__all__ = [
    "BaseRepository",
    "ConnectionProvider",
    "DataAccessError",
    "DatabaseProvider",
    "Field",
    "FieldPredicate",
    "GroupOperator",
    "InvalidPageRequest",
    "InvalidSortSpecification",
    "Operator",
    "PredicateGroup",
    "RepoQueryError",
    "SessionProvider",
    "Sort",
    "UnsupportedPredicateExpression",
    "field",
    "parse_ordering",
    "to_predicate_group",
]
