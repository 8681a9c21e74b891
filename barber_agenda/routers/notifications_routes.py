# barber_agenda/routers/notifications_routes.py

import hmac
from datetime import datetime, timezone
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from sqlmodel import Session, select

from barber_agenda.config import Settings
from barber_agenda.deps import get_app_settings, get_notifier, get_session, get_store
from barber_agenda.models import User
from barber_agenda.notifications import WhatsAppNotifier, clients_due_for_return, send_return_reminders
from barber_agenda.schemas import ReminderReport
from barber_agenda.store import AppointmentStore

router = APIRouter(
    prefix="/notifications",
    tags=["notifications"],
)


def check_cron_secret(
    x_cron_secret: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_app_settings),
):
    if settings.CRON_SECRET is None:
        return
    if x_cron_secret is None or not hmac.compare_digest(x_cron_secret, settings.CRON_SECRET):
        raise HTTPException(status_code=401, detail="Invalid cron secret")


@router.post("/return-reminders", response_model=ReminderReport, dependencies=[Depends(check_cron_secret)])
def return_reminders(
    session: Session = Depends(get_session),
    store: AppointmentStore = Depends(get_store),
    notifier: WhatsAppNotifier = Depends(get_notifier),
    settings: Settings = Depends(get_app_settings),
):
    # 1) Who has not been back in RETURN_REMINDER_DAYS
    users = session.exec(select(User)).all()
    due = clients_due_for_return(
        store.list_all(),
        users,
        now=datetime.now(timezone.utc),
        days=settings.RETURN_REMINDER_DAYS,
    )

    # 2) Message each one; a failed send does not stop the batch
    return send_return_reminders(notifier, due, settings.RETURN_REMINDER_MESSAGE)
