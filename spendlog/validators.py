"""Validation helpers for expense creation requests."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from typing import Any, Callable, Dict, List, Optional

from .exceptions import ValidationError
from .models import ExpenseInput, parse_datetime

# Labels offered to clients; the service accepts any non-empty category.
SUGGESTED_CATEGORIES = (
    "Food",
    "Transport",
    "Utilities",
    "Shopping",
    "Entertainment",
    "Health",
    "Other",
)

CATEGORY_MAX_LENGTH = 100
DESCRIPTION_MAX_LENGTH = 500


@dataclass(frozen=True)
class ValidationResult:
    value: Optional[ExpenseInput] = None
    errors: Dict[str, List[str]] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.errors


def parse_amount(raw: object, field: str) -> float:
    """Convert raw input to a positive, finite amount."""
    if raw is None:
        raise ValidationError(f"{field} is required")
    if isinstance(raw, bool):
        raise ValidationError(f"{field} must be a numeric value")
    try:
        amount = Decimal(str(raw).strip())
    except (InvalidOperation, TypeError) as exc:  # type: ignore[arg-type]
        raise ValidationError(f"{field} must be a numeric value") from exc

    if not amount.is_finite():
        raise ValidationError(f"{field} must be a numeric value")
    if amount <= 0:
        raise ValidationError(f"{field} must be greater than zero")

    value = float(amount)
    if math.isinf(value):
        raise ValidationError(f"{field} is out of range")
    if value <= 0:
        # Positive decimals below float precision round to 0.0.
        raise ValidationError(f"{field} must be greater than zero")
    return value


def validate_required_str(value: object, field: str, max_length: int) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    trimmed = value.strip()
    if not trimmed:
        raise ValidationError(f"{field} cannot be empty")
    if len(trimmed) > max_length:
        raise ValidationError(f"{field} must be at most {max_length} characters")
    return trimmed


def validate_optional_str(value: object, field: str) -> Optional[str]:
    """Accept a missing value, null or any string; empty strings count as missing."""
    if value is None:
        return None
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be a string")
    return value or None


def validate_date_string(value: object, field: str) -> str:
    if not isinstance(value, str):
        raise ValidationError(f"{field} must be an ISO 8601 date string")
    trimmed = value.strip()
    try:
        parse_datetime(trimmed)
    except ValueError as exc:
        raise ValidationError(f"{field} must be a valid date") from exc
    return trimmed


def validate_expense_payload(payload: Any) -> ValidationResult:
    """Check a creation payload field by field, collecting every failure."""
    if not isinstance(payload, dict):
        return ValidationResult(errors={"payload": ["Expected a JSON object"]})

    checks: Dict[str, Callable[[object], object]] = {
        "amount": lambda raw: parse_amount(raw, "amount"),
        "category": lambda raw: validate_required_str(raw, "category", CATEGORY_MAX_LENGTH),
        "description": lambda raw: validate_required_str(
            raw, "description", DESCRIPTION_MAX_LENGTH
        ),
        "date": lambda raw: validate_date_string(raw, "date"),
        "idempotencyKey": lambda raw: validate_optional_str(raw, "idempotencyKey"),
    }

    cleaned: Dict[str, Any] = {}
    errors: Dict[str, List[str]] = {}
    for name, check in checks.items():
        try:
            cleaned[name] = check(payload.get(name))
        except ValidationError as exc:
            errors.setdefault(name, []).append(str(exc))

    if errors:
        return ValidationResult(errors=errors)

    return ValidationResult(
        value=ExpenseInput(
            amount=cleaned["amount"],
            category=cleaned["category"],
            description=cleaned["description"],
            date=cleaned["date"],
            idempotency_key=cleaned["idempotencyKey"],
        )
    )
