import sqlite3
from dataclasses import replace

import pytest

from meusaldo.database.transaction_dao import TransactionDAO
from meusaldo.utils.constants import DELETE_CHUNK_SIZE


def test_create_single_transaction_gets_storage_id(services, make_tx):
    created = services.transactions.create(make_tx(description="Coffee", amount=7.5))

    assert len(created) == 1
    stored = services.transactions.get_by_id(created[0].id)
    assert stored.description == "Coffee"
    assert stored.amount == 7.5
    assert stored.recurrence_id is None
    assert stored.is_recurring is False


def test_create_recurring_persists_every_installment(services, make_tx):
    created = services.transactions.create(
        make_tx(description="TV", date="2024-01-31", is_recurring=True, installments=3)
    )

    assert [t.date for t in created] == ["2024-01-31", "2024-02-29", "2024-03-31"]
    assert len({t.id for t in created}) == 3
    series = services.recurring.get_series(created[0].recurrence_id)
    assert [t.description for t in series] == ["TV (1/3)", "TV (2/3)", "TV (3/3)"]


@pytest.mark.parametrize("installments", [0, -2, 2.5, True, None])
def test_invalid_installment_count_is_rejected_before_writing(services, make_tx, installments):
    with pytest.raises(ValueError):
        services.transactions.create(make_tx(is_recurring=True, installments=installments))
    assert services.transactions.get_all() == []


@pytest.mark.parametrize(
    "overrides",
    [
        {"date": ""},
        {"date": "15/01/2024"},
        {"due_date": "2024-02-31"},
        {"amount": -1.0},
        {"type": "TRANSFER"},
        {"description": "   "},
    ],
)
def test_invalid_requests_are_rejected(services, make_tx, overrides):
    with pytest.raises(ValueError):
        services.transactions.create(make_tx(**overrides))


def test_zero_amount_is_allowed(services, make_tx):
    created = services.transactions.create(make_tx(amount=0.0))
    assert created[0].amount == 0.0


def test_deleting_one_installment_removes_only_its_series(services, make_tx):
    series = services.transactions.create(make_tx(is_recurring=True, installments=3))
    other_series = services.transactions.create(
        make_tx(description="Other", is_recurring=True, installments=2)
    )
    single = services.transactions.create(make_tx(description="Single"))

    removed = services.transactions.delete(series[1].id)

    assert removed == 3
    remaining = {t.id for t in services.transactions.get_all()}
    assert remaining == {other_series[0].id, other_series[1].id, single[0].id}


def test_deleting_non_recurring_removes_just_that_record(services, make_tx):
    a = services.transactions.create(make_tx(description="a"))[0]
    b = services.transactions.create(make_tx(description="b"))[0]

    assert services.transactions.delete(a.id) == 1
    assert [t.id for t in services.transactions.get_all()] == [b.id]


def test_deleting_missing_transaction_is_a_no_op(services):
    assert services.transactions.delete("nope") == 0


def test_delete_by_month_uses_effective_date(services, make_tx):
    keep = services.transactions.create(make_tx(date="2024-03-30", due_date="2024-04-02"))[0]
    services.transactions.create(make_tx(date="2024-03-05"))
    services.transactions.create(make_tx(date="2024-02-10", due_date="2024-03-01"))

    removed = services.transactions.delete_by_month(2024, 3)

    assert removed == 2
    assert [t.id for t in services.transactions.get_all()] == [keep.id]


def test_get_for_month_filters_type_and_sorts_newest_first(services, make_tx):
    services.transactions.create(make_tx(description="rent", date="2024-05-05"))
    services.transactions.create(make_tx(description="salary", date="2024-05-01", type="CREDIT"))
    services.transactions.create(make_tx(description="gas", date="2024-05-20"))

    listed = services.transactions.get_for_month(2024, 5)
    debits = services.transactions.get_for_month(2024, 5, "DEBIT")

    assert [t.description for t in listed] == ["gas", "rent", "salary"]
    assert [t.description for t in debits] == ["gas", "rent"]


def test_update_changes_only_the_given_record(services, make_tx):
    series = services.transactions.create(make_tx(is_recurring=True, installments=2))
    first = series[0]
    first.amount = 55.0

    services.transactions.update(first)

    amounts = [t.amount for t in services.recurring.get_series(first.recurrence_id)]
    assert amounts == [55.0, 100.0]


def test_update_unknown_transaction_raises(services, make_tx):
    with pytest.raises(ValueError):
        services.transactions.update(make_tx(id="missing"))


def test_set_paid_toggles_flag(services, make_tx):
    tx = services.transactions.create(make_tx())[0]
    services.transactions.set_paid(tx.id, True)
    assert services.transactions.get_by_id(tx.id).is_paid is True
    services.transactions.set_paid(tx.id, False)
    assert services.transactions.get_by_id(tx.id).is_paid is False


def test_reset_removes_more_than_one_chunk(services, make_tx):
    total = DELETE_CHUNK_SIZE + 20
    services.transactions.create(make_tx(is_recurring=True, installments=total))

    assert services.transactions.reset() == total
    assert services.transactions.get_all() == []


def test_batch_insert_is_all_or_nothing(db, make_tx):
    dao = TransactionDAO(db)
    good = make_tx(description="good")
    bad = make_tx(description="bad", amount=-5.0)  # violates the amount CHECK

    with pytest.raises(sqlite3.IntegrityError):
        dao.create_many([good, bad])

    assert dao.get_all() == []


def test_failed_series_delete_rolls_back(db, make_tx, monkeypatch):
    dao = TransactionDAO(db)
    ids = [t.id for t in dao.create_many([make_tx(description=str(i)) for i in range(3)])]

    class ExplodingConnection:
        def __init__(self, conn):
            self._conn = conn
            self.calls = 0

        def execute(self, sql, params=()):
            self.calls += 1
            if self.calls == 2:
                raise sqlite3.OperationalError("disk I/O error")
            return self._conn.execute(sql, params)

        def commit(self):
            self._conn.commit()

        def rollback(self):
            self._conn.rollback()

    real = db.get_connection()
    wrapper = ExplodingConnection(real)
    monkeypatch.setattr("meusaldo.database.transaction_dao.DELETE_CHUNK_SIZE", 2)
    monkeypatch.setattr(db, "get_connection", lambda: wrapper)

    with pytest.raises(sqlite3.OperationalError):
        dao.delete_many(ids)

    monkeypatch.undo()
    assert len(dao.get_all()) == 3


def test_update_cannot_detach_an_installment_from_its_series(services, make_tx):
    series = services.transactions.create(make_tx(is_recurring=True, installments=3))
    detached = replace(series[0], is_recurring=False, installments=None, recurrence_id=None)

    updated = services.transactions.update(detached)

    assert updated.recurrence_id == series[0].recurrence_id
    assert updated.is_recurring is True
    assert updated.installments == 3
    assert services.transactions.delete(series[1].id) == 3


def test_update_cannot_turn_a_single_record_into_a_series(services, make_tx):
    single = services.transactions.create(make_tx())[0]

    updated = services.transactions.update(
        replace(single, is_recurring=True, installments=4, recurrence_id="forged")
    )

    assert (updated.is_recurring, updated.installments, updated.recurrence_id) == (False, None, None)


def test_set_paid_on_unknown_transaction_raises(services):
    with pytest.raises(ValueError):
        services.transactions.set_paid("missing", True)
