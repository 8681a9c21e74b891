# barber_agenda/catalog.py

from decimal import Decimal
from enum import Enum
from typing import NamedTuple

# Bookable start times, identical for every day. No slots over lunch.
SLOT_CATALOG = (
    "09:00", "09:30", "10:00", "10:30", "11:00", "11:30",
    "13:00", "13:30", "14:00", "14:30", "15:00", "15:30",
    "16:00", "16:30", "17:00", "17:30",
)

APPOINTMENT_MINUTES = 30


class ServiceType(str, Enum):
    corte_cabelo = "corte_cabelo"
    corte_barba = "corte_barba"
    corte_cabelo_barba = "corte_cabelo_barba"


class PaymentStatus(str, Enum):
    pending = "Pending"
    paid = "Paid"


class ServiceInfo(NamedTuple):
    name: str
    price: Decimal


SERVICES = {
    ServiceType.corte_cabelo: ServiceInfo("Corte de Cabelo", Decimal("35.00")),
    ServiceType.corte_barba: ServiceInfo("Corte de Barba", Decimal("25.00")),
    ServiceType.corte_cabelo_barba: ServiceInfo("Corte de Cabelo e Barba", Decimal("50.00")),
}


def service_info(service_type: ServiceType) -> ServiceInfo:
    return SERVICES[ServiceType(service_type)]


def price_label(price: Decimal) -> str:
    # 1234.5 -> "R$ 1.234,50"
    formatted = f"{Decimal(price):,.2f}"
    formatted = formatted.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"R$ {formatted}"


def is_catalog_slot(hhmm: str) -> bool:
    return hhmm in SLOT_CATALOG
