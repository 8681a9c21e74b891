# barber_agenda/store.py

import logging
from datetime import datetime
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlmodel import Session, select

from barber_agenda.errors import AppointmentNotFound, DuplicateStart, StoreUnavailable, WriteFailed
from barber_agenda.models import Appointment

logger = logging.getLogger(__name__)


class AppointmentStore:
    """Reads and writes Appointment rows. Timestamps in and out are naive UTC."""

    def __init__(self, session: Session):
        self.session = session

    # Reads

    def query_by_date_range(self, start: datetime, end: datetime) -> List[Appointment]:
        stmt = (
            select(Appointment)
            .where(Appointment.scheduled_at >= start)
            .where(Appointment.scheduled_at <= end)
            .order_by(Appointment.scheduled_at)
        )
        return self._read(stmt)

    def query_all_timestamps(self) -> List[Tuple[int, datetime]]:
        rows = self._read(select(Appointment.id, Appointment.scheduled_at))
        return [(row[0], row[1]) for row in rows]

    def list_all(self) -> List[Appointment]:
        return self._read(select(Appointment).order_by(Appointment.scheduled_at))

    def list_by_email(self, email: str) -> List[Appointment]:
        stmt = (
            select(Appointment)
            .where(Appointment.client_email == email)
            .order_by(Appointment.scheduled_at.desc())
        )
        return self._read(stmt)

    def get(self, appt_id: int) -> Optional[Appointment]:
        try:
            return self.session.get(Appointment, appt_id)
        except SQLAlchemyError as exc:
            logger.exception("Failed to read appointment %s", appt_id)
            raise StoreUnavailable(str(exc)) from exc

    def _read(self, stmt) -> list:
        try:
            return list(self.session.exec(stmt).all())
        except SQLAlchemyError as exc:
            logger.exception("Appointment query failed")
            raise StoreUnavailable(str(exc)) from exc

    # Writes

    def insert(self, record: Appointment) -> int:
        self.session.add(record)
        self._commit("insert")
        self.session.refresh(record)  # fills record.id
        return record.id

    def update(self, appt_id: int, fields: dict) -> Appointment:
        target = self.get(appt_id)
        if target is None:
            raise AppointmentNotFound(appt_id)
        for name, value in fields.items():
            setattr(target, name, value)
        self.session.add(target)
        self._commit("update")
        self.session.refresh(target)
        return target

    def delete(self, appt_id: int) -> None:
        target = self.get(appt_id)
        if target is None:
            raise AppointmentNotFound(appt_id)
        self.session.delete(target)
        self._commit("delete")

    def _commit(self, action: str) -> None:
        try:
            self.session.commit()
        except IntegrityError as exc:
            self.session.rollback()
            if _is_duplicate_start(exc):
                raise DuplicateStart(str(exc.orig)) from exc
            logger.exception("Appointment %s violated a constraint", action)
            raise WriteFailed(f"Could not {action} appointment: {exc.orig}", cause=exc) from exc
        except SQLAlchemyError as exc:
            self.session.rollback()
            logger.exception("Appointment %s failed", action)
            raise WriteFailed(f"Could not {action} appointment: {exc}", cause=exc) from exc


def _is_duplicate_start(exc: IntegrityError) -> bool:
    # SQLite names the column, other backends name the constraint
    message = str(exc.orig)
    return "uq_appointment_start" in message or "appointment.scheduled_at" in message
