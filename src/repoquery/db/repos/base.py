from __future__ import annotations

from collections.abc import Mapping, Sequence
from typing import Any, Generic, TypeVar

from repoquery.db import queries
from repoquery.db.models import Base, primary_key_keys
from repoquery.db.providers import DatabaseProvider
from repoquery.predicates import Predicate

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository(Generic[ModelT]):  # noqa: UP046
    """Repository handle: an entity model plus the provider it reads through.

    The provider is injected explicitly and only borrowed; committing or
    rolling back is the job of whoever created the connection or session.
    """

    def __init__(self, provider: DatabaseProvider, model: type[ModelT]) -> None:
        self.provider = provider
        self.model = model

    def get_database_provider(self) -> DatabaseProvider:
        return self.provider

    @property
    def primary_key(self) -> list[str]:
        return primary_key_keys(self.model)

    async def query(self, sql: str, parameters: Mapping[str, Any] | None = None) -> list[ModelT]:
        return await queries.query(self, sql, parameters)

    async def execute(
        self,
        sql: str,
        parameters: Mapping[str, Any] | Sequence[Mapping[str, Any]] | None = None,
    ) -> int:
        return await queries.execute(self, sql, parameters)

    async def scalar(self, sql: str, parameters: Mapping[str, Any] | None = None) -> Any:
        return await queries.scalar(self, sql, parameters)

    async def get_paged(
        self,
        page_index: int,
        page_size: int,
        ordering: str | None = None,
        predicate: Predicate | None = None,
    ) -> list[ModelT]:
        return await queries.get_paged(self, page_index, page_size, ordering, predicate)

    async def count(self, predicate: Predicate | None = None) -> int:
        return await queries.count(self, predicate)

    # Keep last: the annotations above refer to the builtin `list`.
    async def list(self, predicate: Predicate | None = None) -> list[ModelT]:
        return await queries.get_list(self, predicate)
