from decimal import Decimal

from barber_agenda.catalog import (
    SERVICES,
    SLOT_CATALOG,
    ServiceType,
    is_catalog_slot,
    price_label,
    service_info,
)


def test_slot_catalog_is_the_fixed_sixteen_slots() -> None:
    assert list(SLOT_CATALOG) == [
        "09:00", "09:30", "10:00", "10:30", "11:00", "11:30",
        "13:00", "13:30", "14:00", "14:30", "15:00", "15:30",
        "16:00", "16:30", "17:00", "17:30",
    ]
    assert len(SLOT_CATALOG) == 16


def test_lunch_and_after_hours_are_not_bookable() -> None:
    for hhmm in ("12:00", "12:30", "08:30", "18:00", "09:15"):
        assert not is_catalog_slot(hhmm)


def test_service_table() -> None:
    assert set(SERVICES) == set(ServiceType)
    assert service_info(ServiceType.corte_cabelo) == ("Corte de Cabelo", Decimal("35.00"))
    assert service_info("corte_barba").price == Decimal("25.00")
    assert service_info(ServiceType.corte_cabelo_barba).name == "Corte de Cabelo e Barba"
    assert service_info(ServiceType.corte_cabelo_barba).price == Decimal("50.00")


def test_price_label_uses_brazilian_format() -> None:
    assert price_label(Decimal("35")) == "R$ 35,00"
    assert price_label(Decimal("1234.5")) == "R$ 1.234,50"
