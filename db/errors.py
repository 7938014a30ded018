"""
db/errors.py
------------
Exceptions raised by the storage layer.

Driver errors are never leaked bare: they are wrapped in one of the classes
below with ``raise ... from exc`` so the original cause stays on the chain.
"""


class StorageError(Exception):
    """Base class for every storage layer failure."""


# ── Lifecycle ─────────────────────────────────────────────

class AlreadyInitializedError(StorageError):
    """init() was called on a context that is already initialized."""

    def __init__(self, message: str = "database already initialized"):
        super().__init__(message)


class NotInitializedError(StorageError):
    """An operation ran before init() or after cleanup()."""

    def __init__(self, message: str = "database not initialized"):
        super().__init__(message)


class DatabaseConnectionError(StorageError):
    """The database could not be opened or did not answer the probe."""


class SchemaError(StorageError):
    """Table creation failed."""


# ── Lookups ───────────────────────────────────────────────

class InvalidReferenceError(StorageError, ValueError):
    """A bug identifier could not be parsed."""


class NotFoundError(StorageError):
    """No row matched the requested identifier."""


class ParentNotFoundError(NotFoundError):
    """A comment operation referenced a bug that does not exist."""


# ── Statements ────────────────────────────────────────────

class InsertError(StorageError):
    pass


class UpdateError(StorageError):
    pass


class DeleteError(StorageError):
    pass


class QueryError(StorageError):
    pass
