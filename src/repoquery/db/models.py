from __future__ import annotations

from typing import Any

from sqlalchemy import Column, inspect
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    pass


def attribute_keys(model: type[Base]) -> list[str]:
    return [attr.key for attr in inspect(model).column_attrs]


def column_keys(model: type[Base]) -> dict[str, str]:
    """Map lower-cased attribute keys and column names to attribute keys."""
    keys: dict[str, str] = {}
    for attr in inspect(model).column_attrs:
        column = attr.columns[0]
        keys.setdefault(column.name.lower(), attr.key)
        # Attribute keys win over column names when the two collide.
        keys[attr.key.lower()] = attr.key
    return keys


def resolve_attribute_key(model: type[Base], name: str) -> str | None:
    mapper = inspect(model)
    if name in mapper.column_attrs:
        return name
    return column_keys(model).get(name.lower())


def mapped_column_for(model: type[Base], key: str) -> Column[Any]:
    return inspect(model).column_attrs[key].columns[0]


def primary_key_keys(model: type[Base]) -> list[str]:
    mapper = inspect(model)
    return [mapper.get_property_by_column(col).key for col in mapper.primary_key]
