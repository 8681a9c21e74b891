# barber_agenda/models.py

from typing import Optional
from datetime import datetime
from decimal import Decimal

from sqlalchemy import DateTime, UniqueConstraint
from sqlmodel import SQLModel, Field

from barber_agenda.catalog import PaymentStatus, ServiceType


class Appointment(SQLModel, table=True):
    # One appointment per start instant; the database is the final arbiter.
    __table_args__ = (
        UniqueConstraint("scheduled_at", name="uq_appointment_start"),
    )

    id: Optional[int] = Field(default=None, primary_key=True)

    client_name: str
    client_email: str = Field(index=True)
    # Naive UTC in a plain DateTime column
    scheduled_at: datetime = Field(sa_type=DateTime, index=True)
    service_type: ServiceType
    payment_status: PaymentStatus = PaymentStatus.pending
    price: Decimal = Field(max_digits=8, decimal_places=2)


class User(SQLModel, table=True):
    id: Optional[int] = Field(default=None, primary_key=True)
    email: str = Field(index=True, unique=True)
    username: str
    phone: Optional[str] = None  # WhatsApp number, digits only
    password_hash: str
    role: str  # admin or client
