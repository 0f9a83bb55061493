"""Data models for the expense tracker domain."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Optional

__all__ = [
    "CreateResult",
    "Expense",
    "ExpenseInput",
    "ExpenseSummary",
    "isoformat_utc",
    "parse_datetime",
]


def isoformat_utc(dt: datetime, timespec: str = "milliseconds") -> str:
    """Return an ISO 8601 string with trailing Z for UTC-aware datetimes."""
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=timezone.utc)
    else:
        dt = dt.astimezone(timezone.utc)
    iso = dt.isoformat(timespec=timespec)
    # datetime.isoformat renders +00:00 for UTC; replace with the shorter Z form.
    return iso.replace("+00:00", "Z")


def parse_datetime(value: str) -> datetime:
    """Parse ISO 8601 dates or datetimes with optional trailing Z into UTC-aware datetime."""
    value = value.strip()
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"
    dt = datetime.fromisoformat(value)
    if dt.tzinfo is None:
        # Treat naive datetimes as UTC to avoid accidental timezone drift.
        dt = dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


@dataclass(frozen=True)
class ExpenseInput:
    """A validated creation request, before the service assigns identity."""

    amount: float
    category: str
    description: str
    date: str
    idempotency_key: Optional[str] = None


@dataclass(frozen=True)
class Expense:
    id: str
    amount: float
    category: str
    description: str
    date: str
    created_at: str
    idempotency_key: Optional[str] = None

    @property
    def occurred_at(self) -> datetime:
        return parse_datetime(self.date)

    def to_dict(self) -> Dict[str, Any]:
        """Serialise the expense to JSON-friendly natives using the wire field names."""
        payload: Dict[str, Any] = {
            "id": self.id,
            "amount": self.amount,
            "category": self.category,
            "description": self.description,
            "date": self.date,
            "createdAt": self.created_at,
        }
        if self.idempotency_key is not None:
            payload["idempotencyKey"] = self.idempotency_key
        return payload

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Expense":
        """Hydrate an Expense from JSON-native data."""
        for name in ("category", "description", "date", "createdAt"):
            if not isinstance(data[name], str):
                raise TypeError(f"{name} must be a string, got {type(data[name]).__name__}")
        return cls(
            id=str(data["id"]),
            amount=float(data["amount"]),
            category=data["category"],
            description=data["description"],
            date=data["date"],
            created_at=data["createdAt"],
            idempotency_key=data.get("idempotencyKey"),
        )


@dataclass(frozen=True)
class CreateResult:
    expense: Expense
    created: bool


@dataclass(frozen=True)
class ExpenseSummary:
    count: int
    total: float

    def to_dict(self) -> Dict[str, Any]:
        return {"count": self.count, "total": self.total}
