from decimal import Decimal
from types import SimpleNamespace

from barber_agenda.catalog import PaymentStatus
from barber_agenda.core import to_storage
from barber_agenda.dashboard import revenue_summary

from conftest import TZ, local


def paid(start, price, status=PaymentStatus.paid):
    return SimpleNamespace(scheduled_at=to_storage(start), price=Decimal(price), payment_status=status)


def test_only_paid_appointments_count() -> None:
    summary = revenue_summary(
        [
            paid(local(2024, 5, 1, 9, 0), "35.00"),
            paid(local(2024, 5, 2, 9, 0), "50.00", status=PaymentStatus.pending),
        ],
        TZ,
    )
    assert summary.clients_served == 1
    assert summary.total_revenue == Decimal("35.00")
    assert summary.variation_percent is None


def test_monthly_series_and_variation() -> None:
    summary = revenue_summary(
        [
            paid(local(2024, 6, 3, 9, 0), "25.00"),
            paid(local(2024, 4, 3, 9, 0), "35.00"),
            paid(local(2024, 5, 3, 9, 0), "50.00"),
            paid(local(2024, 6, 4, 9, 0), "50.00"),
        ],
        TZ,
    )
    assert [(m.month, m.total) for m in summary.monthly] == [
        ("2024-04", Decimal("35.00")),
        ("2024-05", Decimal("50.00")),
        ("2024-06", Decimal("75.00")),
    ]
    assert summary.variation_percent == 50.0


def test_month_follows_local_time() -> None:
    # 21:30 on April 30th local is already May in UTC
    summary = revenue_summary([paid(local(2024, 4, 30, 21, 30), "35.00")], TZ)
    assert summary.monthly[0].month == "2024-04"


def test_empty() -> None:
    summary = revenue_summary([], TZ)
    assert summary.clients_served == 0
    assert summary.total_revenue == Decimal("0.00")
    assert summary.monthly == []
