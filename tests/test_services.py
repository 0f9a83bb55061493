"""Tests for the expense service: creation, listing and deletion."""

import json
import threading

import pytest

from spendlog.exceptions import (
    DeletionFailedError,
    InvalidInputError,
    MissingIdentifierError,
    PersistenceError,
    RecordNotFoundError,
)
from spendlog.services import ExpenseService


def payload(**overrides):
    data = {
        "amount": 10,
        "category": "Food",
        "description": "Groceries",
        "date": "2024-01-15",
    }
    data.update(overrides)
    return data


class TestCreate:

    def test_creates_record_with_generated_fields(self, service, store, lunch_payload):
        result = service.create(lunch_payload)

        assert result.created is True
        expense = result.expense
        assert expense.id
        assert expense.amount == 42.5
        assert expense.category == "Food"
        assert expense.description == "Test Lunch"
        assert expense.date == "2024-01-15T00:00:00Z"
        assert expense.created_at == "2024-02-01T09:30:00.000Z"
        assert expense.idempotency_key is None
        assert store.read_all() == [expense]

    def test_each_create_appends_one_record_with_unique_id(self, service, store):
        ids = [service.create(payload(description=f"item {n}")).expense.id for n in range(5)]

        assert len(set(ids)) == 5
        assert [e.id for e in store.read_all()] == ids

    def test_same_idempotency_key_returns_existing_record(self, service, store, lunch_payload):
        first = service.create({**lunch_payload, "idempotencyKey": "retry-1"})
        second = service.create({**lunch_payload, "idempotencyKey": "retry-1"})
        third = service.create({**lunch_payload, "amount": 99, "idempotencyKey": "retry-1"})

        assert first.created is True
        assert second.created is False
        assert third.created is False
        assert second.expense == first.expense
        assert third.expense == first.expense
        assert len(store.read_all()) == 1

    def test_idempotent_hit_does_not_rewrite_document(self, service, store, lunch_payload, monkeypatch):
        service.create({**lunch_payload, "idempotencyKey": "retry-1"})

        def fail_write(expenses):
            raise AssertionError("write_all must not be called on an idempotent hit")

        monkeypatch.setattr(store, "write_all", fail_write)
        assert service.create({**lunch_payload, "idempotencyKey": "retry-1"}).created is False

    def test_different_keys_create_separate_records(self, service, store, lunch_payload):
        service.create({**lunch_payload, "idempotencyKey": "a"})
        service.create({**lunch_payload, "idempotencyKey": "b"})
        assert len(store.read_all()) == 2

    def test_empty_key_never_deduplicates(self, service, store, lunch_payload):
        service.create({**lunch_payload, "idempotencyKey": ""})
        service.create({**lunch_payload, "idempotencyKey": ""})
        assert len(store.read_all()) == 2

    def test_invalid_payload_raises_without_store_access(self, service, store, monkeypatch):
        def no_access(*args, **kwargs):
            raise AssertionError("store must not be touched")

        monkeypatch.setattr(store, "read_all", no_access)
        monkeypatch.setattr(store, "write_all", no_access)

        with pytest.raises(InvalidInputError) as excinfo:
            service.create(payload(amount=-5))

        assert list(excinfo.value.errors) == ["amount"]

    def test_failed_write_is_reported(self, service, store, monkeypatch):
        monkeypatch.setattr(store, "write_all", lambda expenses: False)

        with pytest.raises(PersistenceError):
            service.create(payload())

    def test_concurrent_creates_do_not_lose_updates(self, service, store):
        threads = [
            threading.Thread(target=service.create, args=(payload(description=f"t{n}"),))
            for n in range(20)
        ]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        assert len(store.read_all()) == 20


class TestList:

    @pytest.fixture
    def seeded(self, service):
        for date, category in [
            ("2024-01-10", "Food"),
            ("2024-03-05T18:00:00Z", "Transport"),
            ("2024-02-20T08:00:00+01:00", "Food"),
            ("2023-12-31", "food"),
        ]:
            service.create(payload(date=date, category=category, description=f"{category} {date}"))
        return service

    def test_defaults_to_newest_first(self, seeded):
        dates = [e.date for e in seeded.list()]
        assert dates == ["2024-03-05T18:00:00Z", "2024-02-20T08:00:00+01:00", "2024-01-10", "2023-12-31"]

    def test_date_asc(self, seeded):
        occurred = [e.occurred_at for e in seeded.list(sort="date_asc")]
        assert occurred == sorted(occurred)

    def test_date_desc(self, seeded):
        occurred = [e.occurred_at for e in seeded.list(sort="date_desc")]
        assert occurred == sorted(occurred, reverse=True)

    @pytest.mark.parametrize("token", ["amount_desc", "", None, "DATE_ASC"])
    def test_unknown_sort_falls_back_to_desc(self, seeded, token):
        assert seeded.list(sort=token) == seeded.list(sort="date_desc")

    def test_category_filter_is_exact_and_case_sensitive(self, seeded):
        assert {e.category for e in seeded.list(category="Food")} == {"Food"}
        assert len(seeded.list(category="Food")) == 2
        assert len(seeded.list(category="food")) == 1
        assert seeded.list(category="Foo") == []

    def test_no_filter_returns_everything(self, seeded, store):
        assert {e.id for e in seeded.list()} == {e.id for e in store.read_all()}

    def test_unparseable_stored_dates_sort_last_when_descending(self, seeded, store):
        raw = json.loads(store.path.read_text(encoding="utf-8"))
        raw[0]["date"] = "not a date"
        store.path.write_text(json.dumps(raw), encoding="utf-8")

        assert seeded.list()[-1].date == "not a date"
        assert seeded.list(sort="date_asc")[0].date == "not a date"

    def test_does_not_modify_document(self, seeded, store):
        before = store.path.read_text(encoding="utf-8")
        seeded.list(category="Food", sort="date_asc")
        assert store.path.read_text(encoding="utf-8") == before


class TestDelete:

    def test_deleted_record_disappears_from_list(self, service):
        keep = service.create(payload(description="keep")).expense
        drop = service.create(payload(description="drop")).expense

        service.delete(drop.id)

        assert [e.id for e in service.list()] == [keep.id]

    @pytest.mark.parametrize("expense_id", [None, "", "   "])
    def test_missing_id_raises_without_store_access(self, service, store, monkeypatch, expense_id):
        def no_access(*args, **kwargs):
            raise AssertionError("store must not be touched")

        monkeypatch.setattr(store, "read_all", no_access)
        monkeypatch.setattr(store, "delete_by_id", no_access)

        with pytest.raises(MissingIdentifierError):
            service.delete(expense_id)

    def test_unknown_id_raises_not_found(self, service):
        service.create(payload())
        with pytest.raises(RecordNotFoundError):
            service.delete("no-such-id")

    def test_store_failure_raises_deletion_failed(self, service, store, monkeypatch):
        expense = service.create(payload()).expense
        monkeypatch.setattr(store, "delete_by_id", lambda expense_id: False)

        with pytest.raises(DeletionFailedError):
            service.delete(expense.id)


class TestSummaryAndCategories:

    def test_summary_totals_filtered_records(self, service):
        service.create(payload(amount=10.10, category="Food"))
        service.create(payload(amount=5.25, category="Food"))
        service.create(payload(amount=100, category="Health"))

        food = service.summary(category="Food")
        everything = service.summary()

        assert (food.count, food.total) == (2, 15.35)
        assert (everything.count, everything.total) == (3, 115.35)

    def test_summary_of_empty_store(self, service):
        assert service.summary().to_dict() == {"count": 0, "total": 0}

    def test_categories_include_suggested_then_used(self, service):
        service.create(payload(category="Books"))
        service.create(payload(category="Food"))
        service.create(payload(category="Books"))

        labels = service.categories()

        assert labels[:7] == ["Food", "Transport", "Utilities", "Shopping", "Entertainment", "Health", "Other"]
        assert labels[7:] == ["Books"]


def test_service_rereads_store_between_calls(store):
    first = ExpenseService(store)
    second = ExpenseService(store)

    created = first.create(payload()).expense

    assert [e.id for e in second.list()] == [created.id]
