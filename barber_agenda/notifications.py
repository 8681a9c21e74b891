# barber_agenda/notifications.py
"""
WhatsApp messages through an external gateway.

The gateway owns the WhatsApp session; we only POST {"phoneNumber", "message"}
to it. The daily trigger lives outside the app and calls the reminder endpoint.
"""

import logging
import re
from datetime import datetime, timedelta
from typing import Dict, Iterable, List, Optional

import httpx

from barber_agenda.core import to_storage
from barber_agenda.errors import NotificationFailed, NotificationsDisabled

logger = logging.getLogger(__name__)


def normalize_phone(phone: str) -> str:
    return re.sub(r"\D", "", phone or "")


class WhatsAppNotifier:
    def __init__(
        self,
        base_url: Optional[str],
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = base_url
        self.timeout = timeout
        self.transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.base_url)

    def send(self, phone: str, message: str) -> dict:
        if not self.enabled:
            raise NotificationsDisabled()
        number = normalize_phone(phone)
        if not number or not message:
            raise NotificationFailed("Phone number and message are required")

        try:
            with httpx.Client(timeout=self.timeout, transport=self.transport) as client:
                response = client.post(self.base_url, json={"phoneNumber": number, "message": message})
                response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.error("WhatsApp gateway refused message to %s: %s", number, exc.response.status_code)
            raise NotificationFailed(
                f"Gateway answered {exc.response.status_code}", cause=exc
            ) from exc
        except httpx.HTTPError as exc:
            logger.error("WhatsApp gateway unreachable: %s", exc)
            raise NotificationFailed(f"Gateway unreachable: {exc}", cause=exc) from exc

        logger.info("WhatsApp message sent to %s", number)
        if not response.content:
            return {}
        try:
            return response.json()
        except ValueError:
            return {"status": response.text}


def clients_due_for_return(
    appointments: Iterable,
    users: Iterable,
    now: datetime,
    days: int,
) -> list:
    """Clients with a phone whose last visit was at least `days` ago and nothing booked ahead."""
    now = to_storage(now)
    starts: Dict[str, List[datetime]] = {}
    for appt in appointments:
        starts.setdefault(appt.client_email, []).append(to_storage(appt.scheduled_at))

    due = []
    for user in users:
        if user.role != "client" or not normalize_phone(user.phone):
            continue
        visits = starts.get(user.email)
        if not visits:
            continue
        if any(start > now for start in visits):
            continue
        if now - max(visits) >= timedelta(days=days):
            due.append(user)
    return due


def send_return_reminders(notifier: WhatsAppNotifier, users: Iterable, message: str) -> dict:
    if not notifier.enabled:
        raise NotificationsDisabled()
    sent, failed = [], []
    for user in users:
        try:
            notifier.send(user.phone, message)
        except NotificationFailed as exc:
            failed.append({"email": user.email, "error": exc.detail})
            continue
        sent.append(user.email)
    logger.info("Return reminders: %d sent, %d failed", len(sent), len(failed))
    return {"sent": sent, "failed": failed}
