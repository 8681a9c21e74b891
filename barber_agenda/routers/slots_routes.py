# barber_agenda/routers/slots_routes.py

from datetime import date
from typing import List

from fastapi import APIRouter, Depends

from barber_agenda.catalog import SERVICES, price_label
from barber_agenda.core import AvailabilityResolver
from barber_agenda.deps import get_resolver
from barber_agenda.schemas import AvailabilityResponse, ServicePublic

router = APIRouter(
    tags=["slots"],
)


@router.get("/services", response_model=List[ServicePublic])
def list_services():
    return [
        {"id": service_type, "name": info.name, "price": info.price, "price_label": price_label(info.price)}
        for service_type, info in SERVICES.items()
    ]


@router.get("/slots", response_model=AvailabilityResponse)
def day_availability(
    date: date,
    resolver: AvailabilityResolver = Depends(get_resolver),
):
    slots = resolver.resolve(date)
    return {
        "date": date,
        "slots": [{"time": s.time, "occupied": s.occupied} for s in slots],
    }
