"""Framework-agnostic business services for the expense tracker."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Callable, List, Optional
from uuid import uuid4

from .exceptions import (
    DeletionFailedError,
    InvalidInputError,
    MissingIdentifierError,
    PersistenceError,
    RecordNotFoundError,
)
from .models import CreateResult, Expense, ExpenseSummary, isoformat_utc
from .storage import JSONStore
from .validators import SUGGESTED_CATEGORIES, validate_expense_payload

logger = logging.getLogger(__name__)

SORT_DATE_DESC = "date_desc"
SORT_DATE_ASC = "date_asc"
SORT_ORDERS = (SORT_DATE_DESC, SORT_DATE_ASC)

_EARLIEST = datetime.min.replace(tzinfo=timezone.utc)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _sort_key(expense: Expense) -> datetime:
    try:
        return expense.occurred_at
    except ValueError:
        # Records edited by hand may no longer parse; keep them at the old end.
        return _EARLIEST


class ExpenseService:
    """Creates, lists and deletes expense records.

    Holds no copy of the collection: every call goes back to the store.
    """

    def __init__(self, store: JSONStore, clock: Optional[Callable[[], datetime]] = None) -> None:
        self._store = store
        self._clock = clock or _utcnow

    # Public API -----------------------------------------------------------
    def create(self, payload: object) -> CreateResult:
        """Validate ``payload`` and store a new expense.

        A payload whose non-empty ``idempotencyKey`` matches a stored record
        returns that record unchanged with ``created`` set to False.
        """
        result = validate_expense_payload(payload)
        if not result.ok:
            raise InvalidInputError(result.errors)
        data = result.value

        with self._store.lock:
            expenses = self._store.read_all()

            if data.idempotency_key:
                existing = next(
                    (e for e in expenses if e.idempotency_key == data.idempotency_key), None
                )
                if existing is not None:
                    logger.info(
                        "Idempotent replay for key %s returned expense %s",
                        data.idempotency_key,
                        existing.id,
                    )
                    return CreateResult(expense=existing, created=False)

            expense = Expense(
                id=str(uuid4()),
                amount=data.amount,
                category=data.category,
                description=data.description,
                date=data.date,
                created_at=isoformat_utc(self._clock()),
                idempotency_key=data.idempotency_key,
            )
            expenses.append(expense)
            if not self._store.write_all(expenses):
                raise PersistenceError("Unable to save the new expense")

        logger.info("Created expense %s", expense.id)
        return CreateResult(expense=expense, created=True)

    def list(self, category: Optional[str] = None, sort: Optional[str] = SORT_DATE_DESC) -> List[Expense]:
        records = self._store.read_all()
        if category:
            records = [expense for expense in records if expense.category == category]
        return sorted(records, key=_sort_key, reverse=sort != SORT_DATE_ASC)

    def delete(self, expense_id: Optional[str]) -> None:
        if expense_id is None or not str(expense_id).strip():
            raise MissingIdentifierError("Expense id is required")

        with self._store.lock:
            if not any(expense.id == expense_id for expense in self._store.read_all()):
                raise RecordNotFoundError(f"Expense {expense_id} not found")
            if not self._store.delete_by_id(expense_id):
                raise DeletionFailedError(f"Failed to delete expense {expense_id}")

        logger.info("Deleted expense %s", expense_id)

    def summary(self, category: Optional[str] = None) -> ExpenseSummary:
        expenses = self.list(category=category)
        return ExpenseSummary(
            count=len(expenses),
            total=round(sum(expense.amount for expense in expenses), 2),
        )

    def categories(self) -> List[str]:
        """Suggested labels first, then any other labels already in use."""
        labels = list(SUGGESTED_CATEGORIES)
        for expense in self._store.read_all():
            if expense.category not in labels:
                labels.append(expense.category)
        return labels
