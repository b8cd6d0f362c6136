"""Exceptions raised by :mod:`opencall.services.store`."""


class StoreBaseException(RuntimeError):
    """Base for store service exceptions."""


class NoSuchRecord(StoreBaseException):
    """A request was made for a record that does not exist."""


class TransactionFailed(StoreBaseException):
    """Raised when there was a problem committing changes to the database."""


class Unavailable(StoreBaseException):
    """The data store is not available."""


class ConsistencyError(StoreBaseException):
    """Attempted to persist stale or conflicting state."""
