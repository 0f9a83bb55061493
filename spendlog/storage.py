"""Persistence utilities for the expense tracker core services."""

from __future__ import annotations

import json
import logging
import threading
from pathlib import Path
from typing import Iterable, List

from .models import Expense

logger = logging.getLogger(__name__)


class JSONStore:
    """Whole-document JSON storage for the expense collection.

    Reads fail open (an unreadable document is an empty collection) and writes
    fail silently apart from the returned flag. Callers that read, modify and
    write back should hold ``lock`` for the whole sequence.
    """

    def __init__(self, path: Path) -> None:
        self._path = Path(path)
        self.lock = threading.RLock()

    @property
    def path(self) -> Path:
        return self._path

    def ensure_initialized(self) -> None:
        """Create the data directory and an empty document if they are missing."""
        with self.lock:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            if not self._path.exists():
                logger.info("Creating empty expense store at %s", self._path)
                self._path.write_text("[]", encoding="utf-8")

    def read_all(self) -> List[Expense]:
        try:
            with self._path.open("r", encoding="utf-8") as handle:
                payload = json.load(handle)
        except (OSError, json.JSONDecodeError) as exc:
            logger.error("Failed to read expenses from %s: %s", self._path, exc)
            return []

        if not isinstance(payload, list):
            logger.error("Expected list payload in %s, got %s", self._path, type(payload).__name__)
            return []

        expenses: List[Expense] = []
        for index, raw in enumerate(payload):
            try:
                expenses.append(Expense.from_dict(raw))
            except (KeyError, TypeError, ValueError) as exc:
                logger.warning("Skipping malformed record %d in %s: %r", index, self._path, exc)
        return expenses

    def write_all(self, expenses: Iterable[Expense]) -> bool:
        records = [expense.to_dict() for expense in expenses]
        temp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        with self.lock:
            try:
                with temp_path.open("w", encoding="utf-8") as handle:
                    json.dump(records, handle, indent=2)
                    handle.flush()
                # Use replace for atomic move on POSIX; readers never see a partial document.
                temp_path.replace(self._path)
            except OSError as exc:
                logger.error("Failed to write expenses to %s: %s", self._path, exc)
                self._discard(temp_path)
                return False
        return True

    def _discard(self, temp_path: Path) -> None:
        try:
            temp_path.unlink(missing_ok=True)
        except OSError as exc:
            logger.warning("Could not remove leftover %s: %s", temp_path, exc)

    def delete_by_id(self, expense_id: str) -> bool:
        """Remove every record with ``expense_id``.

        The result reports whether the rewrite succeeded, not whether anything
        matched.
        """
        with self.lock:
            remaining = [expense for expense in self.read_all() if expense.id != expense_id]
            return self.write_all(remaining)
