# barber_agenda/booking.py

import logging
from datetime import date, datetime, timezone, tzinfo
from typing import Callable, List, Optional

from barber_agenda.catalog import PaymentStatus, ServiceType, service_info
from barber_agenda.core import ConflictGuard, parse_slot, slot_label, to_local, to_storage
from barber_agenda.errors import AppointmentNotFound, DuplicateStart, PastSlotSelection, SlotConflict
from barber_agenda.models import Appointment
from barber_agenda.store import AppointmentStore

logger = logging.getLogger(__name__)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class BookingService:
    """
    Booking submissions, admin edits, payment toggles and cancellations.

    Every write that sets a start time goes through the ConflictGuard first.
    The guard is a read followed later by a separate write; the unique
    constraint on Appointment.scheduled_at catches the race between them.
    """

    def __init__(
        self,
        store: AppointmentStore,
        guard: ConflictGuard,
        tz: tzinfo,
        now: Optional[Callable[[], datetime]] = None,
    ):
        self.store = store
        self.guard = guard
        self.tz = tz
        self.now = now or utc_now

    def book(
        self,
        client_name: str,
        client_email: str,
        day: date,
        time: str,
        service_type: ServiceType,
    ) -> Appointment:
        # 1) Slot must come from the catalog
        start = parse_slot(day, time, self.tz)

        # 2) No booking in the past
        if start <= self.now():
            raise PastSlotSelection()

        # 3) Nobody else may hold this exact start
        self.guard.ensure_available(start)

        # 4) Price is copied now and never recomputed
        info = service_info(service_type)
        record = Appointment(
            client_name=client_name,
            client_email=client_email,
            scheduled_at=to_storage(start),
            service_type=ServiceType(service_type),
            payment_status=PaymentStatus.pending,
            price=info.price,
        )
        try:
            self.store.insert(record)
        except DuplicateStart as exc:
            logger.warning("Lost race for %s: %s", slot_label(start, self.tz), exc)
            raise SlotConflict(slot_label(start, self.tz), cause=exc) from exc

        logger.info("Booked appointment %s for %s at %s", record.id, client_email, slot_label(start, self.tz))
        return record

    def edit(
        self,
        appt_id: int,
        client_name: Optional[str] = None,
        client_email: Optional[str] = None,
        day: Optional[date] = None,
        time: Optional[str] = None,
    ) -> Appointment:
        current = self.get(appt_id)
        fields = {}
        if client_name is not None:
            fields["client_name"] = client_name
        if client_email is not None:
            fields["client_email"] = client_email

        if day is not None or time is not None:
            local = to_local(current.scheduled_at, self.tz)
            start = parse_slot(day or local.date(), time or local.strftime("%H:%M"), self.tz)
            # The appointment being edited never conflicts with itself
            self.guard.ensure_available(start, exclude_id=appt_id)
            fields["scheduled_at"] = to_storage(start)

        if not fields:
            return current

        try:
            updated = self.store.update(appt_id, fields)
        except DuplicateStart as exc:
            label = slot_label(fields["scheduled_at"], self.tz)
            logger.warning("Lost race for %s while editing %s: %s", label, appt_id, exc)
            raise SlotConflict(label, cause=exc) from exc

        logger.info("Edited appointment %s: %s", appt_id, sorted(fields))
        return updated

    def set_payment_status(self, appt_id: int, status: PaymentStatus) -> Appointment:
        updated = self.store.update(appt_id, {"payment_status": PaymentStatus(status)})
        logger.info("Appointment %s payment status -> %s", appt_id, updated.payment_status.value)
        return updated

    def cancel(self, appt_id: int, requester: dict) -> None:
        target = self.get(appt_id)
        if requester["role"] != "admin" and requester["email"] != target.client_email:
            raise PermissionError("Only the client who booked or an admin can cancel")
        self.store.delete(appt_id)
        logger.info("Appointment %s cancelled by %s", appt_id, requester["email"])

    def get(self, appt_id: int) -> Appointment:
        appt = self.store.get(appt_id)
        if appt is None:
            raise AppointmentNotFound(appt_id)
        return appt

    def list_for_client(self, email: str) -> List[Appointment]:
        return self.store.list_by_email(email)
