"""Console interface for the expense tracker."""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import Any, Dict, List, Optional

from spendlog.exceptions import (
    InvalidInputError,
    PersistenceError,
    RecordNotFoundError,
    ValidationError,
)
from spendlog.models import parse_datetime
from spendlog.services import SORT_DATE_DESC, SORT_ORDERS, ExpenseService
from spendlog.storage import JSONStore
from spendlog.validators import parse_amount

EXPENSES_FILE = "expenses.json"


def _parse_date(value: str) -> str:
    try:
        parse_datetime(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(
            f"Invalid date '{value}'. Expected ISO 8601, e.g. 2024-01-15 or 2024-01-15T12:30:00Z."
        ) from exc
    return value


def _parse_amount(value: str) -> str:
    try:
        parse_amount(value, "amount")
    except ValidationError as exc:
        raise argparse.ArgumentTypeError(str(exc)) from exc
    return value


def _load_service(data_dir: Path) -> ExpenseService:
    store = JSONStore(data_dir / EXPENSES_FILE)
    store.ensure_initialized()
    return ExpenseService(store)


def _format_expense(expense: Dict[str, Any]) -> str:
    return (
        f"[{expense['id']}] {expense['date']} {expense['amount']:.2f}\n"
        f"  Category: {expense['category']}\n"
        f"  Description: {expense['description']}\n"
    )


def _format_field_errors(errors: Dict[str, List[str]]) -> str:
    return "\n".join(f"  {field}: {'; '.join(messages)}" for field, messages in errors.items())


def handle_add(args: argparse.Namespace, service: ExpenseService) -> None:
    payload = {
        "amount": args.amount,
        "category": args.category,
        "description": args.description,
        "date": args.date,
        "idempotencyKey": args.idempotency_key,
    }
    result = service.create(payload)
    if result.created:
        print("Expense added:\n" + _format_expense(result.expense.to_dict()))
    else:
        print("Expense already recorded:\n" + _format_expense(result.expense.to_dict()))


def handle_list(args: argparse.Namespace, service: ExpenseService) -> None:
    expenses = service.list(category=args.category, sort=args.sort)
    if not expenses:
        print("No expenses found.")
        return
    summary = service.summary(category=args.category)
    print(f"Found {summary.count} expenses (total {summary.total:.2f}):")
    for expense in expenses:
        print(_format_expense(expense.to_dict()))


def handle_delete(args: argparse.Namespace, service: ExpenseService) -> None:
    service.delete(args.id)
    print(f"Expense {args.id} deleted.")


def handle_categories(args: argparse.Namespace, service: ExpenseService) -> None:
    for label in service.categories():
        print(label)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="spendlog", description="Expense Tracker CLI")
    parser.add_argument(
        "--data-dir",
        default="data",
        type=Path,
        help="Directory to store JSON data (default: ./data)",
    )

    subparsers = parser.add_subparsers(dest="command", required=True)

    add = subparsers.add_parser("add", help="Record a new expense")
    add.add_argument("amount", type=_parse_amount)
    add.add_argument("category")
    add.add_argument("description")
    add.add_argument("date", type=_parse_date)
    add.add_argument(
        "--idempotency-key",
        help="Token that makes repeating this command safe",
    )
    add.set_defaults(handler=handle_add)

    list_parser = subparsers.add_parser("list", help="List expenses")
    list_parser.add_argument("--category", help="Exact, case-sensitive category match")
    list_parser.add_argument("--sort", choices=SORT_ORDERS, default=SORT_DATE_DESC)
    list_parser.set_defaults(handler=handle_list)

    delete = subparsers.add_parser("delete", help="Delete an expense")
    delete.add_argument("id")
    delete.set_defaults(handler=handle_delete)

    categories = subparsers.add_parser("categories", help="Show category labels")
    categories.set_defaults(handler=handle_categories)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    service = _load_service(args.data_dir)

    try:
        args.handler(args, service)
    except InvalidInputError as exc:
        print("Validation error:\n" + _format_field_errors(exc.errors), file=sys.stderr)
        return 1
    except ValidationError as exc:
        print(f"Validation error: {exc}", file=sys.stderr)
        return 1
    except RecordNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except PersistenceError as exc:
        print(f"Storage error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
