# barber_agenda/routers/admin_routes.py

from datetime import date, datetime, timedelta, timezone
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from barber_agenda.auth import get_current_user
from barber_agenda.booking import BookingService
from barber_agenda.catalog import PaymentStatus
from barber_agenda.config import Settings
from barber_agenda.core import calendar_events, day_bounds, filter_appointments, group_appointments, paginate
from barber_agenda.dashboard import revenue_summary
from barber_agenda.deps import get_app_settings, get_booking_service, get_notifier, get_store, require_role
from barber_agenda.notifications import WhatsAppNotifier
from barber_agenda.schemas import (
    AdminAppointmentCreate,
    AppointmentPublic,
    AppointmentUpdate,
    CalendarEventPublic,
    DashboardResponse,
    GroupedAppointmentsPage,
    MessageCreate,
    PaymentUpdate,
)
from barber_agenda.store import AppointmentStore


def require_admin(current_user: dict = Depends(get_current_user)) -> dict:
    require_role(current_user, "admin")
    return current_user


router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
)


@router.post("/appointments", response_model=AppointmentPublic, status_code=201)
def admin_create_appointment(
    appt: AdminAppointmentCreate,
    booking: BookingService = Depends(get_booking_service),
    settings: Settings = Depends(get_app_settings),
):
    record = booking.book(
        client_name=appt.client_name,
        client_email=appt.client_email,
        day=appt.date,
        time=appt.time,
        service_type=appt.service_type,
    )
    return AppointmentPublic.from_record(record, settings.tz)


@router.get("/appointments", response_model=GroupedAppointmentsPage)
def list_appointments(
    status: Optional[PaymentStatus] = None,
    search: Optional[str] = None,
    page: int = 1,
    include_old: bool = False,
    store: AppointmentStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
):
    if page < 1:
        raise HTTPException(status_code=422, detail="page must be 1 or greater")

    # 1) Filter: payment status, name search, recent window
    since = None
    if not include_old:
        since = datetime.now(timezone.utc) - timedelta(days=settings.RECENT_DAYS)
    appts = filter_appointments(store.list_all(), status=status, search=search, since=since)

    # 2) Group by date then client, 3) paginate the date groups
    result = paginate(group_appointments(appts, settings.tz), page, settings.PAGE_SIZE)

    return {
        "page": result.page,
        "page_size": result.page_size,
        "total_items": result.total_items,
        "total_pages": result.total_pages,
        "items": [
            {
                "date": day.date,
                "groups": [
                    {
                        "name": client.name,
                        "appointments": [AppointmentPublic.from_record(a, settings.tz) for a in client.appointments],
                    }
                    for client in day.groups
                ],
            }
            for day in result.items
        ],
    }


@router.patch("/appointments/{appt_id}", response_model=AppointmentPublic)
def edit_appointment(
    appt_id: int,
    changes: AppointmentUpdate,
    booking: BookingService = Depends(get_booking_service),
    settings: Settings = Depends(get_app_settings),
):
    record = booking.edit(
        appt_id,
        client_name=changes.client_name,
        client_email=changes.client_email,
        day=changes.date,
        time=changes.time,
    )
    return AppointmentPublic.from_record(record, settings.tz)


@router.patch("/appointments/{appt_id}/payment", response_model=AppointmentPublic)
def update_payment_status(
    appt_id: int,
    update: PaymentUpdate,
    booking: BookingService = Depends(get_booking_service),
    settings: Settings = Depends(get_app_settings),
):
    record = booking.set_payment_status(appt_id, update.payment_status)
    return AppointmentPublic.from_record(record, settings.tz)


@router.get("/calendar", response_model=List[CalendarEventPublic])
def calendar(
    start: Optional[date] = None,
    end: Optional[date] = None,
    store: AppointmentStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
):
    if start is not None and end is not None and start > end:
        raise HTTPException(status_code=422, detail="start must not be after end")

    appts = store.list_all()
    if start is not None:
        first = day_bounds(start, settings.tz)[0]
        appts = [a for a in appts if a.scheduled_at >= first]
    if end is not None:
        last = day_bounds(end, settings.tz)[1]
        appts = [a for a in appts if a.scheduled_at <= last]
    return [vars(event) for event in calendar_events(appts, settings.tz)]


@router.get("/dashboard", response_model=DashboardResponse)
def dashboard(
    store: AppointmentStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
):
    summary = revenue_summary(store.list_all(), settings.tz)
    return {
        "clients_served": summary.clients_served,
        "total_revenue": summary.total_revenue,
        "monthly": [{"month": m.month, "total": m.total} for m in summary.monthly],
        "variation_percent": summary.variation_percent,
    }


@router.post("/messages")
def send_message(
    body: MessageCreate,
    notifier: WhatsAppNotifier = Depends(get_notifier),
):
    result = notifier.send(body.phone, body.message)
    return {"status": "sent", "gateway": result}
