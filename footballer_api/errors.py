"""
Data-access errors.

Only two conditions are recognised by name: a missing row and a stale
version on update. Every other storage failure (constraint violations,
driver errors, timeouts) is wrapped in PersistenceError so callers can
treat it as an opaque server error.
"""


class DataError(Exception):
    """Base class for data-access errors."""


class RecordNotFoundError(DataError):
    def __init__(self, message: str = "record not found"):
        super().__init__(message)


class EditConflictError(DataError):
    def __init__(self, message: str = "edit conflict"):
        super().__init__(message)


class PersistenceError(DataError):
    """Any other failure talking to the store, including timeouts."""
