# barber_agenda/schemas.py

from pydantic import BaseModel, ConfigDict, Field
from enum import Enum
from datetime import datetime, date as Date, tzinfo
from decimal import Decimal
from typing import List, Optional

from barber_agenda.catalog import PaymentStatus, ServiceType
from barber_agenda.core import to_local


class Token(BaseModel):
    access_token: str
    token_type: str = "bearer"


class UserRole(str, Enum):
    admin = "admin"
    client = "client"


class UserPublic(BaseModel):
    id: int
    email: str
    username: str
    phone: Optional[str] = None
    role: UserRole


class UserCreate(BaseModel):
    email: str = Field(min_length=3)
    password: str = Field(min_length=8, max_length=72)
    username: str = Field(min_length=1)
    phone: Optional[str] = None


class ServicePublic(BaseModel):
    id: ServiceType
    name: str
    price: Decimal
    price_label: str


class SlotPublic(BaseModel):
    time: str
    occupied: bool


class AvailabilityResponse(BaseModel):
    date: Date
    slots: List[SlotPublic]


class ClientAppointmentCreate(BaseModel):
    date: Date
    time: str  # HH:MM, local
    service_type: ServiceType


class AdminAppointmentCreate(ClientAppointmentCreate):
    client_name: str = Field(min_length=1)
    client_email: str = Field(min_length=3)


class AppointmentUpdate(BaseModel):
    client_name: Optional[str] = Field(default=None, min_length=1)
    client_email: Optional[str] = Field(default=None, min_length=3)
    date: Optional[Date] = None
    time: Optional[str] = None


class PaymentUpdate(BaseModel):
    payment_status: PaymentStatus


class AppointmentPublic(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    client_name: str
    client_email: str
    scheduled_at: datetime  # local time, with offset
    service_type: ServiceType
    payment_status: PaymentStatus
    price: Decimal

    @classmethod
    def from_record(cls, appt, tz: tzinfo) -> "AppointmentPublic":
        return cls(
            id=appt.id,
            client_name=appt.client_name,
            client_email=appt.client_email,
            scheduled_at=to_local(appt.scheduled_at, tz),
            service_type=appt.service_type,
            payment_status=appt.payment_status,
            price=appt.price,
        )


class ClientGroupPublic(BaseModel):
    name: str
    appointments: List[AppointmentPublic]


class DateGroupPublic(BaseModel):
    date: str
    groups: List[ClientGroupPublic]


class GroupedAppointmentsPage(BaseModel):
    page: int
    page_size: int
    total_items: int
    total_pages: int
    items: List[DateGroupPublic]


class ClientHistory(BaseModel):
    most_recent: Optional[AppointmentPublic] = None
    appointments: List[AppointmentPublic]


class CalendarEventPublic(BaseModel):
    id: int
    title: str
    start: datetime
    end: datetime


class MonthlyRevenuePublic(BaseModel):
    month: str
    total: Decimal


class DashboardResponse(BaseModel):
    clients_served: int
    total_revenue: Decimal
    monthly: List[MonthlyRevenuePublic]
    variation_percent: Optional[float] = None


class MessageCreate(BaseModel):
    phone: str = Field(min_length=1)
    message: str = Field(min_length=1)


class ReminderFailure(BaseModel):
    email: str
    error: str


class ReminderReport(BaseModel):
    sent: List[str]
    failed: List[ReminderFailure]
