"""Domain-specific exceptions for the expense tracker core services."""

from typing import Dict, List, Optional


class ValidationError(ValueError):
    """Raised when provided data does not meet validation requirements."""


class InvalidInputError(ValidationError):
    """Raised when a creation payload fails validation; carries field-level messages."""

    def __init__(self, errors: Dict[str, List[str]], message: Optional[str] = None) -> None:
        self.errors = {field: list(messages) for field, messages in errors.items()}
        fields = ", ".join(sorted(self.errors))
        super().__init__(message or f"Invalid fields: {fields}")


class MissingIdentifierError(ValidationError):
    """Raised when an operation that needs an expense id receives none."""


class RecordNotFoundError(LookupError):
    """Raised when an expense record cannot be located."""


class PersistenceError(IOError):
    """Raised when the persistence layer encounters unrecoverable issues."""


class DeletionFailedError(PersistenceError):
    """Raised when the store could not complete a deletion."""
