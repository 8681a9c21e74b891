# barber_agenda/routers/appointments_routes.py

from fastapi import APIRouter, Depends, HTTPException

from barber_agenda.auth import get_current_user
from barber_agenda.booking import BookingService
from barber_agenda.config import Settings
from barber_agenda.deps import get_app_settings, get_booking_service, require_role
from barber_agenda.schemas import AppointmentPublic, ClientAppointmentCreate, ClientHistory

router = APIRouter(
    tags=["appointments"],
)


@router.post("/appointments", response_model=AppointmentPublic, status_code=201)
def client_create_appointment(
    appt: ClientAppointmentCreate,
    booking: BookingService = Depends(get_booking_service),
    settings: Settings = Depends(get_app_settings),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "client")

    # Name and email always come from the logged-in client
    record = booking.book(
        client_name=current_user["username"],
        client_email=current_user["email"],
        day=appt.date,
        time=appt.time,
        service_type=appt.service_type,
    )
    return AppointmentPublic.from_record(record, settings.tz)


@router.get("/clients/me/appointments", response_model=ClientHistory)
def list_my_appointments(
    booking: BookingService = Depends(get_booking_service),
    settings: Settings = Depends(get_app_settings),
    current_user: dict = Depends(get_current_user),
):
    require_role(current_user, "client")

    appts = [AppointmentPublic.from_record(a, settings.tz) for a in booking.list_for_client(current_user["email"])]
    return {
        "most_recent": appts[0] if appts else None,
        "appointments": appts,
    }


@router.delete("/appointments/{appt_id}", status_code=204)
def cancel_appointment(
    appt_id: int,
    booking: BookingService = Depends(get_booking_service),
    current_user: dict = Depends(get_current_user),
):
    try:
        booking.cancel(appt_id, current_user)
    except PermissionError:
        raise HTTPException(status_code=403, detail="Forbidden")
