"""Query, paging and raw-SQL operations over a repository handle.

Each operation borrows the connection (and whatever transaction is active on
it) from the repository's provider at call time, runs a single statement and
hands back the result. Nothing here commits, rolls back or closes the
connection; that stays with the caller's unit of work.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from typing import Any, Protocol, TypeVar

from sqlalchemy import text
from sqlalchemy.engine import CursorResult, Dialect, RowMapping
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.sql.expression import Executable

from repoquery.db.models import Base, column_keys, mapped_column_for
from repoquery.db.providers import DatabaseProvider
from repoquery.db.statements import (
    build_count_statement,
    build_list_statement,
    build_page_statement,
)
from repoquery.errors import DataAccessError, InvalidPageRequest
from repoquery.logging_config import log_with_fields
from repoquery.ordering import format_ordering, parse_ordering
from repoquery.predicates import Predicate, to_predicate_group

logger = logging.getLogger("repoquery.queries")

ModelT = TypeVar("ModelT", bound=Base)

Parameters = Mapping[str, Any]


class RepositoryHandle(Protocol[ModelT]):  # noqa: UP046
    @property
    def model(self) -> type[ModelT]: ...

    def get_database_provider(self) -> DatabaseProvider: ...


def _result_processors(model: type[Base], dialect: Dialect) -> dict[str, Any]:
    processors: dict[str, Any] = {}
    for key in set(column_keys(model).values()):
        column_type = mapped_column_for(model, key).type
        processor = column_type.dialect_impl(dialect).result_processor(dialect, None)
        if processor is not None:
            processors[key] = processor
    return processors


def materialize(
    model: type[ModelT],
    rows: Sequence[RowMapping],
    dialect: Dialect | None = None,
) -> list[ModelT]:
    """Build transient ``model`` instances from result rows.

    Result columns are matched to mapped attributes case-insensitively by
    attribute key or column name; anything that does not match is dropped.

    Rows from a typed ``select()`` already carry Python values. Rows from
    ``text()`` carry whatever the driver returned, so pass ``dialect`` to run
    each matched value through the mapped column type's result processor
    (e.g. SQLite datetime strings become ``datetime`` objects).
    """
    keys = column_keys(model)
    processors = _result_processors(model, dialect) if dialect is not None else {}
    entities: list[ModelT] = []
    for row in rows:
        values: dict[str, Any] = {}
        for name, value in row.items():
            key = keys.get(str(name).lower())
            if key is None or key in values:
                continue
            processor = processors.get(key)
            values[key] = processor(value) if processor is not None else value
        entities.append(model(**values))
    return entities


def _entity_name(repository: RepositoryHandle[Any]) -> str:
    return repository.model.__name__


def _data_access_error(
    repository: RepositoryHandle[Any], operation: str, exc: SQLAlchemyError
) -> DataAccessError:
    log_with_fields(
        logger,
        logging.WARNING,
        "query failed",
        operation=operation,
        entity=_entity_name(repository),
        error=exc.__class__.__name__,
    )
    return DataAccessError(operation, exc)


async def _run(
    repository: RepositoryHandle[Any],
    operation: str,
    statement: Executable,
    parameters: Parameters | Sequence[Parameters] | None = None,
) -> tuple[CursorResult[Any], bool, Dialect]:
    provider = repository.get_database_provider()
    try:
        connection = await provider.get_connection()
        transaction = provider.get_transaction()
        result = await connection.execute(statement, parameters)
    except SQLAlchemyError as exc:
        raise _data_access_error(repository, operation, exc) from exc
    in_transaction = transaction is not None and transaction.is_active
    return result, in_transaction, connection.dialect


def _log_completed(
    repository: RepositoryHandle[Any],
    operation: str,
    *,
    in_transaction: bool,
    **fields: object,
) -> None:
    if not logger.isEnabledFor(logging.DEBUG):
        return
    log_with_fields(
        logger,
        logging.DEBUG,
        "query completed",
        operation=operation,
        entity=_entity_name(repository),
        in_transaction=in_transaction,
        **fields,
    )


async def _fetch_mappings(
    repository: RepositoryHandle[Any],
    operation: str,
    statement: Executable,
    parameters: Parameters | None = None,
) -> tuple[Sequence[RowMapping], bool, Dialect]:
    result, in_transaction, dialect = await _run(repository, operation, statement, parameters)
    try:
        rows = result.mappings().all()
    except SQLAlchemyError as exc:
        raise _data_access_error(repository, operation, exc) from exc
    return rows, in_transaction, dialect


async def get_list(
    repository: RepositoryHandle[ModelT],
    predicate: Predicate | None = None,
) -> list[ModelT]:
    """Return every entity matching ``predicate`` (all of them when omitted), unordered."""
    group = to_predicate_group(repository.model, predicate)
    statement = build_list_statement(repository.model, group)
    rows, in_transaction, _ = await _fetch_mappings(repository, "list", statement)
    _log_completed(repository, "list", in_transaction=in_transaction, rows=len(rows))
    return materialize(repository.model, rows)


async def query(
    repository: RepositoryHandle[ModelT],
    sql: str,
    parameters: Parameters | None = None,
) -> list[ModelT]:
    """Run caller-supplied SQL and map the rows onto the repository's entity."""
    rows, in_transaction, dialect = await _fetch_mappings(
        repository, "query", text(sql), parameters
    )
    _log_completed(repository, "query", in_transaction=in_transaction, rows=len(rows))
    return materialize(repository.model, rows, dialect)


async def execute(
    repository: RepositoryHandle[Any],
    sql: str,
    parameters: Parameters | Sequence[Parameters] | None = None,
) -> int:
    """Run a non-query statement and return the number of affected rows."""
    result, in_transaction, _ = await _run(repository, "execute", text(sql), parameters)
    affected = result.rowcount
    _log_completed(repository, "execute", in_transaction=in_transaction, affected=affected)
    return affected


async def scalar(
    repository: RepositoryHandle[Any],
    sql: str,
    parameters: Parameters | None = None,
) -> Any:
    """Return the first column of the first row, or None when there are no rows."""
    result, in_transaction, _ = await _run(repository, "scalar", text(sql), parameters)
    try:
        value = result.scalar()
    except SQLAlchemyError as exc:
        raise _data_access_error(repository, "scalar", exc) from exc
    _log_completed(repository, "scalar", in_transaction=in_transaction)
    return value


async def get_paged(
    repository: RepositoryHandle[ModelT],
    page_index: int,
    page_size: int,
    ordering: str | None,
    predicate: Predicate | None = None,
) -> list[ModelT]:
    """Return one page of matching entities.

    ``page_index`` is 1-based. ``ordering`` uses the ``"Name asc,Age desc"``
    form; without one the page is ordered by primary key. No total is
    computed, use ``count()`` for that.
    """
    if page_index < 1:
        raise InvalidPageRequest(f"page_index must be >= 1, got {page_index}")
    if page_size < 1:
        raise InvalidPageRequest(f"page_size must be >= 1, got {page_size}")

    sorts = parse_ordering(ordering)
    group = to_predicate_group(repository.model, predicate)
    statement = build_page_statement(
        repository.model,
        group,
        sorts,
        page_index=page_index,
        page_size=page_size,
    )
    rows, in_transaction, _ = await _fetch_mappings(repository, "paged", statement)
    _log_completed(
        repository,
        "paged",
        in_transaction=in_transaction,
        page_index=page_index,
        page_size=page_size,
        ordering=format_ordering(sorts) or None,
        rows=len(rows),
    )
    return materialize(repository.model, rows)


async def count(
    repository: RepositoryHandle[Any],
    predicate: Predicate | None = None,
) -> int:
    group = to_predicate_group(repository.model, predicate)
    statement = build_count_statement(repository.model, group)
    result, in_transaction, _ = await _run(repository, "count", statement)
    try:
        total = int(result.scalar_one())
    except SQLAlchemyError as exc:
        raise _data_access_error(repository, "count", exc) from exc
    _log_completed(repository, "count", in_transaction=in_transaction, total=total)
    return total
