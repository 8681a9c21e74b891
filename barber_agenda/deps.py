# barber_agenda/deps.py

from fastapi import Depends, HTTPException, Request
from sqlmodel import Session

from barber_agenda.booking import BookingService
from barber_agenda.config import Settings
from barber_agenda.core import AvailabilityResolver, ConflictGuard
from barber_agenda.notifications import WhatsAppNotifier
from barber_agenda.store import AppointmentStore


def get_app_settings(request: Request) -> Settings:
    return request.app.state.settings


# One session per request
def get_session(request: Request):
    with Session(request.app.state.engine) as session:
        yield session


def require_role(user: dict, role: str):
    if user["role"] != role:
        raise HTTPException(status_code=403, detail="Forbidden")


def get_store(session: Session = Depends(get_session)) -> AppointmentStore:
    return AppointmentStore(session)


def get_resolver(
    store: AppointmentStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
) -> AvailabilityResolver:
    return AvailabilityResolver(store, settings.tz, settings.OFF_CATALOG_POLICY)


def get_booking_service(
    store: AppointmentStore = Depends(get_store),
    settings: Settings = Depends(get_app_settings),
) -> BookingService:
    return BookingService(store, ConflictGuard(store, settings.tz), settings.tz)


def get_notifier(settings: Settings = Depends(get_app_settings)) -> WhatsAppNotifier:
    return WhatsAppNotifier(settings.WHATSAPP_GATEWAY_URL, timeout=settings.WHATSAPP_TIMEOUT)
