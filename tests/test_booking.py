from datetime import date, datetime
from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError
from sqlmodel import Session

from barber_agenda.catalog import PaymentStatus, ServiceType
from barber_agenda.core import to_local
from barber_agenda.errors import (
    AppointmentNotFound,
    DuplicateStart,
    InvalidSlotSelection,
    PastSlotSelection,
    SlotConflict,
    WriteFailed,
)
from barber_agenda.models import Appointment

from conftest import TZ, local


def book(booking, name="Ana", email="ana@example.com", day=date(2024, 5, 1), time="14:00",
         service=ServiceType.corte_cabelo):
    return booking.book(name, email, day, time, service)


def test_book_stores_pending_appointment_with_denormalized_price(booking, store) -> None:
    record = book(booking, service=ServiceType.corte_cabelo_barba)

    stored = store.get(record.id)
    assert stored.client_name == "Ana"
    assert stored.payment_status == PaymentStatus.pending
    assert Decimal(stored.price) == Decimal("50.00")
    assert to_local(stored.scheduled_at, TZ) == local(2024, 5, 1, 14, 0)


def test_book_rejects_taken_slot(booking) -> None:
    book(booking)
    with pytest.raises(SlotConflict):
        book(booking, name="Bia", email="bia@example.com")


def test_book_allows_adjacent_slot(booking) -> None:
    book(booking)
    record = book(booking, name="Bia", email="bia@example.com", time="14:30")
    assert record.id is not None


def test_book_rejects_slot_outside_catalog_before_writing(booking, store) -> None:
    with pytest.raises(InvalidSlotSelection):
        book(booking, time="12:00")
    assert store.list_all() == []


def test_book_rejects_the_past(booking) -> None:
    with pytest.raises(PastSlotSelection):
        book(booking, day=date(2024, 3, 1))


def test_unique_start_is_enforced_by_the_database(booking, store) -> None:
    # A racing writer that passed its own read before ours committed
    first = book(booking)
    duplicate = Appointment(
        client_name="Bia",
        client_email="bia@example.com",
        scheduled_at=first.scheduled_at,
        service_type=ServiceType.corte_barba,
        price=Decimal("25.00"),
    )
    with pytest.raises(DuplicateStart):
        store.insert(duplicate)
    assert len(store.list_all()) == 1


def test_edit_to_same_time_does_not_conflict_with_itself(booking) -> None:
    record = book(booking)
    edited = booking.edit(record.id, client_name="Ana Souza", day=date(2024, 5, 1), time="14:00")
    assert edited.client_name == "Ana Souza"


def test_edit_moves_the_appointment(booking, store) -> None:
    record = book(booking)
    booking.edit(record.id, time="16:30")
    assert to_local(store.get(record.id).scheduled_at, TZ) == local(2024, 5, 1, 16, 30)


def test_edit_into_another_booking_conflicts(booking, store) -> None:
    first = book(booking)
    second = book(booking, name="Bia", email="bia@example.com", time="15:00")

    with pytest.raises(SlotConflict):
        booking.edit(second.id, time="14:00")
    assert to_local(store.get(second.id).scheduled_at, TZ).strftime("%H:%M") == "15:00"
    assert store.get(first.id) is not None


def test_edit_rejects_off_catalog_time(booking) -> None:
    record = book(booking)
    with pytest.raises(InvalidSlotSelection):
        booking.edit(record.id, time="12:15")


def test_payment_status_toggles_both_ways(booking) -> None:
    record = book(booking)
    assert booking.set_payment_status(record.id, PaymentStatus.paid).payment_status == PaymentStatus.paid
    assert booking.set_payment_status(record.id, PaymentStatus.pending).payment_status == PaymentStatus.pending


def test_price_is_not_recomputed_on_edit(booking, store) -> None:
    record = book(booking)
    store.update(record.id, {"price": Decimal("30.00")})
    booking.edit(record.id, time="09:00")
    assert Decimal(store.get(record.id).price) == Decimal("30.00")


def test_cancel_by_owner_and_admin(booking, store) -> None:
    mine = book(booking)
    other = book(booking, name="Bia", email="bia@example.com", time="15:00")

    booking.cancel(mine.id, {"role": "client", "email": "ana@example.com"})
    assert store.get(mine.id) is None

    with pytest.raises(PermissionError):
        booking.cancel(other.id, {"role": "client", "email": "ana@example.com"})

    booking.cancel(other.id, {"role": "admin", "email": "admin@barber.test"})
    assert store.list_all() == []


def test_cancelled_slot_can_be_booked_again(booking) -> None:
    record = book(booking)
    booking.cancel(record.id, {"role": "admin", "email": "admin@barber.test"})
    assert book(booking, name="Bia", email="bia@example.com").id is not None


def test_missing_appointment(booking) -> None:
    with pytest.raises(AppointmentNotFound):
        booking.edit(999, client_name="Nobody")
    with pytest.raises(AppointmentNotFound):
        booking.set_payment_status(999, PaymentStatus.paid)


def test_client_history_is_newest_first(booking) -> None:
    book(booking, day=date(2024, 5, 1))
    book(booking, day=date(2024, 5, 3))
    book(booking, name="Bia", email="bia@example.com", day=date(2024, 5, 2))

    history = booking.list_for_client("ana@example.com")
    assert [to_local(a.scheduled_at, TZ).date() for a in history] == [date(2024, 5, 3), date(2024, 5, 1)]


def test_start_is_stored_as_naive_utc(booking, store) -> None:
    record = book(booking, day=date(2024, 5, 2), time="14:00")

    # Fresh session, so the value comes back from the database
    with Session(store.session.get_bind()) as other:
        stored = other.get(Appointment, record.id)
    assert stored.scheduled_at == datetime(2024, 5, 2, 17, 0)
    assert stored.scheduled_at.tzinfo is None
    assert store.query_by_date_range(datetime(2024, 5, 2, 3, 0), datetime(2024, 5, 3, 2, 59)) != []


def test_failed_write_is_rolled_back_and_reported(booking, store, monkeypatch) -> None:
    def commit():
        raise OperationalError("INSERT INTO appointment", {}, Exception("disk I/O error"))

    rollbacks = []
    rollback = store.session.rollback
    monkeypatch.setattr(store.session, "commit", commit)
    monkeypatch.setattr(store.session, "rollback", lambda: rollbacks.append(True) or rollback())

    with pytest.raises(WriteFailed) as excinfo:
        book(booking)
    assert excinfo.value.status_code == 502
    assert "disk I/O error" in excinfo.value.detail
    assert rollbacks == [True]

    monkeypatch.undo()
    assert store.list_all() == []


def test_other_constraint_violations_are_write_failures(booking, store) -> None:
    record = book(booking)
    with pytest.raises(WriteFailed):
        store.update(record.id, {"client_name": None})

    # The session is usable again and the name-only edit goes through
    assert booking.edit(record.id, client_name="Ana Souza").client_name == "Ana Souza"
