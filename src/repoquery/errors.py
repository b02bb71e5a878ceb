from __future__ import annotations


class RepoQueryError(Exception):
    """Base class for every error raised by repoquery."""


class DataAccessError(RepoQueryError):
    """The database rejected or failed to run a statement.

    The driver/SQLAlchemy exception is chained (``__cause__``) and also kept on
    ``cause`` so callers can inspect it without walking the chain.
    """

    def __init__(self, operation: str, cause: BaseException) -> None:
        super().__init__(f"{operation} failed: {cause.__class__.__name__}: {cause}")
        self.operation = operation
        self.cause = cause


class InvalidSortSpecification(RepoQueryError, ValueError):
    def __init__(self, message: str, *, clause: str | None = None) -> None:
        super().__init__(message)
        self.clause = clause


class UnsupportedPredicateExpression(RepoQueryError, ValueError):
    pass


class InvalidPageRequest(RepoQueryError, ValueError):
    pass
