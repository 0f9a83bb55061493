"""Core business logic package for the expense tracker."""

from .models import CreateResult, Expense, ExpenseInput, ExpenseSummary
from .services import ExpenseService
from .storage import JSONStore
from .exceptions import (
    DeletionFailedError,
    InvalidInputError,
    MissingIdentifierError,
    PersistenceError,
    RecordNotFoundError,
    ValidationError,
)

__all__ = [
    "CreateResult",
    "Expense",
    "ExpenseInput",
    "ExpenseSummary",
    "ExpenseService",
    "JSONStore",
    "DeletionFailedError",
    "InvalidInputError",
    "MissingIdentifierError",
    "PersistenceError",
    "RecordNotFoundError",
    "ValidationError",
]
