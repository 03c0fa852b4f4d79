"""Domain-specific exceptions for the iExpense record store."""

class ValidationError(ValueError):
    """Raised when provided data does not meet validation requirements."""


class DuplicateRecordError(ValidationError):
    """Raised when a record id is already present in the store."""


class RecordNotFoundError(LookupError):
    """Raised when an expense record cannot be located."""


class PersistenceError(IOError):
    """Raised when the persistence layer cannot read, write or decode data."""
