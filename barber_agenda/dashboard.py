# barber_agenda/dashboard.py

from dataclasses import dataclass, field
from decimal import Decimal
from datetime import tzinfo
from typing import Iterable, List, Optional

from barber_agenda.catalog import PaymentStatus
from barber_agenda.core import to_local


@dataclass
class MonthlyRevenue:
    month: str  # YYYY-MM, local time
    total: Decimal


@dataclass
class RevenueSummary:
    clients_served: int = 0
    total_revenue: Decimal = Decimal("0.00")
    monthly: List[MonthlyRevenue] = field(default_factory=list)
    variation_percent: Optional[float] = None


def revenue_summary(appointments: Iterable, tz: tzinfo) -> RevenueSummary:
    """Only Paid appointments count, each at the price stored when it was booked."""
    summary = RevenueSummary()
    by_month = {}
    for appt in appointments:
        if appt.payment_status != PaymentStatus.paid:
            continue
        summary.clients_served += 1
        summary.total_revenue += Decimal(appt.price)
        month = to_local(appt.scheduled_at, tz).strftime("%Y-%m")
        by_month[month] = by_month.get(month, Decimal("0.00")) + Decimal(appt.price)

    summary.monthly = [MonthlyRevenue(month, by_month[month]) for month in sorted(by_month)]

    if len(summary.monthly) >= 2:
        previous = summary.monthly[-2].total
        latest = summary.monthly[-1].total
        if previous:
            summary.variation_percent = round(float((latest - previous) / previous * 100), 2)

    return summary
