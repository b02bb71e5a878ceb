"""Repository layer.

Repositories pair an entity model with the provider they read through and
expose the shared list/paging/raw-SQL operations. Subclass ``BaseRepository``
to add entity-specific query shapes; business logic lives with the caller.
"""

from repoquery.db.repos.base import BaseRepository

__all__ = ["BaseRepository"]
