# barber_agenda/core.py
"""
Slot availability, conflict detection and the grouped listing.

Stored timestamps are naive UTC. Anything shown to or typed by a person is in
the shop's local zone, so every function that formats or parses a slot takes
the zone explicitly.
"""

import logging
import math
import re
from dataclasses import dataclass, field
from datetime import date, datetime, time, timedelta, timezone, tzinfo
from typing import Iterable, List, Optional, Sequence, Tuple

from barber_agenda.catalog import APPOINTMENT_MINUTES, SLOT_CATALOG, PaymentStatus, is_catalog_slot
from barber_agenda.errors import (
    AvailabilityUnreadable,
    InvalidSlotSelection,
    OffCatalogAppointment,
    SlotConflict,
    StoreUnavailable,
)

logger = logging.getLogger(__name__)

_HHMM = re.compile(r"^\d{2}:\d{2}$")


def to_storage(dt: datetime) -> datetime:
    """Aware datetime -> naive UTC. Naive input is taken to be UTC already."""
    if dt.tzinfo is None:
        return dt
    return dt.astimezone(timezone.utc).replace(tzinfo=None)


def to_local(ts: datetime, tz: tzinfo) -> datetime:
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(tz)


def slot_label(ts: datetime, tz: tzinfo) -> str:
    return to_local(ts, tz).strftime("%Y-%m-%d %H:%M")


def parse_slot(day: date, hhmm: str, tz: tzinfo) -> datetime:
    """Combine a calendar day and a catalog time into an aware local datetime."""
    if not isinstance(hhmm, str) or not _HHMM.match(hhmm):
        raise InvalidSlotSelection(f"Invalid time '{hhmm}', expected HH:MM")
    if not is_catalog_slot(hhmm):
        raise InvalidSlotSelection(f"{hhmm} is not a bookable slot")
    hour, minute = (int(part) for part in hhmm.split(":"))
    return datetime.combine(day, time(hour, minute), tzinfo=tz)


def day_bounds(day: date, tz: tzinfo) -> Tuple[datetime, datetime]:
    """Start and end of a local calendar day, both inclusive, in storage time."""
    start = datetime.combine(day, time.min, tzinfo=tz)
    end = datetime.combine(day, time.max, tzinfo=tz)
    return to_storage(start), to_storage(end)


@dataclass(frozen=True)
class SlotStatus:
    time: str
    occupied: bool


class AvailabilityResolver:
    def __init__(self, store, tz: tzinfo, off_catalog_policy: str = "ignore"):
        self.store = store
        self.tz = tz
        self.off_catalog_policy = off_catalog_policy

    def resolve(self, day: date) -> List[SlotStatus]:
        start, end = day_bounds(day, self.tz)
        try:
            appointments = self.store.query_by_date_range(start, end)
        except StoreUnavailable as exc:
            raise AvailabilityUnreadable(cause=exc) from exc

        occupied = set()
        for appt in appointments:
            hhmm = to_local(appt.scheduled_at, self.tz).strftime("%H:%M")
            if is_catalog_slot(hhmm):
                occupied.add(hhmm)
                continue
            if self.off_catalog_policy == "reject":
                raise OffCatalogAppointment(
                    f"Appointment {appt.id} starts at {hhmm}, outside the slot catalog"
                )
            logger.warning("Ignoring appointment %s at off-catalog time %s on %s", appt.id, hhmm, day)

        return [SlotStatus(time=slot, occupied=slot in occupied) for slot in SLOT_CATALOG]


def _to_minute(ts: datetime) -> datetime:
    return to_storage(ts).replace(second=0, microsecond=0)


def is_taken(
    proposed: datetime,
    existing: Iterable[Tuple[int, datetime]],
    exclude_id: Optional[int] = None,
) -> bool:
    # Exact start equality only; the 30-minute grid makes this sufficient.
    target = _to_minute(proposed)
    for appt_id, scheduled_at in existing:
        if exclude_id is not None and appt_id == exclude_id:
            continue
        if _to_minute(scheduled_at) == target:
            return True
    return False


class ConflictGuard:
    """Re-checks a start time against every stored appointment, not just one day's."""

    def __init__(self, store, tz: tzinfo):
        self.store = store
        self.tz = tz

    def is_available(self, proposed: datetime, exclude_id: Optional[int] = None) -> bool:
        try:
            existing = self.store.query_all_timestamps()
        except StoreUnavailable as exc:
            raise AvailabilityUnreadable(cause=exc) from exc
        return not is_taken(proposed, existing, exclude_id)

    def ensure_available(self, proposed: datetime, exclude_id: Optional[int] = None) -> None:
        if not self.is_available(proposed, exclude_id):
            label = slot_label(proposed, self.tz)
            logger.warning("Slot conflict at %s (excluding %s)", label, exclude_id)
            raise SlotConflict(label)


# Grouped listing

@dataclass
class ClientGroup:
    name: str
    appointments: list = field(default_factory=list)


@dataclass
class DateGroup:
    date: str
    groups: List[ClientGroup] = field(default_factory=list)


@dataclass
class Page:
    page: int
    page_size: int
    total_items: int
    total_pages: int
    items: list


def group_appointments(appointments: Iterable, tz: tzinfo) -> List[DateGroup]:
    ordered = sorted(appointments, key=lambda a: to_storage(a.scheduled_at))
    by_date = {}
    for appt in ordered:
        key = to_local(appt.scheduled_at, tz).date().isoformat()
        by_date.setdefault(key, {}).setdefault(appt.client_name, []).append(appt)

    return [
        DateGroup(date=key, groups=[ClientGroup(name, appts) for name, appts in by_date[key].items()])
        for key in sorted(by_date)
    ]


def flatten_groups(groups: Iterable[DateGroup]) -> list:
    return [appt for day in groups for client in day.groups for appt in client.appointments]


def paginate(items: Sequence, page: int, page_size: int) -> Page:
    if page < 1:
        raise ValueError("page must be >= 1")
    if page_size < 1:
        raise ValueError("page_size must be >= 1")
    total = len(items)
    total_pages = max(1, math.ceil(total / page_size))
    first = (page - 1) * page_size
    return Page(
        page=page,
        page_size=page_size,
        total_items=total,
        total_pages=total_pages,
        items=list(items[first:first + page_size]),
    )


def filter_appointments(
    appointments: Iterable,
    status: Optional[PaymentStatus] = None,
    search: Optional[str] = None,
    since: Optional[datetime] = None,
) -> list:
    needle = search.strip().lower() if search else None
    since = to_storage(since) if since is not None else None
    result = []
    for appt in appointments:
        if status is not None and appt.payment_status != status:
            continue
        if needle and needle not in appt.client_name.lower():
            continue
        if since is not None and to_storage(appt.scheduled_at) < since:
            continue
        result.append(appt)
    return result


@dataclass(frozen=True)
class CalendarEvent:
    id: int
    title: str
    start: datetime
    end: datetime


def calendar_events(appointments: Iterable, tz: tzinfo) -> List[CalendarEvent]:
    duration = timedelta(minutes=APPOINTMENT_MINUTES)
    events = []
    for appt in sorted(appointments, key=lambda a: to_storage(a.scheduled_at)):
        start = to_local(appt.scheduled_at, tz)
        events.append(CalendarEvent(id=appt.id, title=appt.client_name, start=start, end=start + duration))
    return events
