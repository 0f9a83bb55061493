"""Flask REST API exposing the expense tracker services."""

from __future__ import annotations

import os
from pathlib import Path
from typing import Any, Dict, Optional

from flask import Flask, jsonify, request
from flask_cors import CORS
from werkzeug.exceptions import HTTPException

from spendlog.exceptions import (
    InvalidInputError,
    PersistenceError,
    RecordNotFoundError,
    ValidationError,
)
from spendlog.services import SORT_DATE_DESC, ExpenseService
from spendlog.storage import JSONStore

EXPENSES_FILE = "expenses.json"


def _configure_cors(app: Flask) -> None:
    env_name = os.getenv("SPENDLOG_ENV", "prod").lower()
    if env_name in {"dev", "development"}:
        CORS(app, resources={r"/api/*": {"origins": "*"}}, supports_credentials=True)
        return
    allowed_origins = os.getenv("SPENDLOG_ALLOWED_ORIGINS")
    if allowed_origins:
        origins = [origin.strip() for origin in allowed_origins.split(",") if origin.strip()]
        CORS(app, resources={r"/api/*": {"origins": origins}}, supports_credentials=True)
    else:
        CORS(app)


def create_app(data_dir: Optional[Path] = None) -> Flask:
    app = Flask(__name__)
    _configure_cors(app)

    data_path = Path(data_dir or os.getenv("SPENDLOG_DATA_DIR") or "data")
    store = JSONStore(data_path / EXPENSES_FILE)
    store.ensure_initialized()
    expense_service = ExpenseService(store)
    app.config["SPENDLOG_STORE_PATH"] = str(store.path)

    def _success(payload: Any, status: int = 200):
        return jsonify(payload), status

    def _handle_error(exc: Exception, status: int, message: str, details: Any = None):
        app.logger.error("%s: %s", message, exc)
        body: Dict[str, Any] = {"error": message}
        if details is not None:
            body["details"] = details
        return jsonify(body), status

    @app.errorhandler(InvalidInputError)
    def handle_invalid_input(exc: InvalidInputError):
        return _handle_error(exc, 400, "Validation error", exc.errors)

    @app.errorhandler(ValidationError)
    def handle_validation_error(exc: ValidationError):
        return _handle_error(exc, 400, "Validation error", str(exc))

    @app.errorhandler(RecordNotFoundError)
    def handle_not_found(exc: RecordNotFoundError):
        return _handle_error(exc, 404, "Record not found", str(exc))

    @app.errorhandler(PersistenceError)
    def handle_persistence_error(exc: PersistenceError):
        return _handle_error(exc, 500, "Persistence error")

    @app.errorhandler(Exception)
    def handle_unexpected(exc: Exception):
        if isinstance(exc, HTTPException):
            return exc
        app.logger.exception("Unhandled error while serving %s %s", request.method, request.path)
        return jsonify({"error": "Internal server error"}), 500

    def _json_body() -> Any:
        if not request.is_json:
            raise ValidationError("Request content must be application/json")
        data = request.get_json(silent=True)
        if data is None:
            raise ValidationError("Malformed JSON body")
        return data

    def _arg(name: str) -> Optional[str]:
        value = request.args.get(name)
        return value if value not in (None, "") else None

    @app.get("/api/expenses")
    def list_expenses():
        expenses = expense_service.list(
            category=_arg("category"),
            sort=_arg("sort") or SORT_DATE_DESC,
        )
        return _success([expense.to_dict() for expense in expenses])

    @app.post("/api/expenses")
    def create_expense():
        result = expense_service.create(_json_body())
        return _success(result.expense.to_dict(), 201 if result.created else 200)

    @app.delete("/api/expenses")
    def delete_expense():
        expense_service.delete(request.args.get("id"))
        return _success({"success": True})

    @app.get("/api/expenses/summary")
    def expense_summary():
        summary = expense_service.summary(category=_arg("category"))
        return _success(summary.to_dict())

    @app.get("/api/categories")
    def list_categories():
        return _success({"items": expense_service.categories()})

    return app
