"""
Daily sales figures. Days are local calendar days (``TIME_ZONE``);
cancelled orders count towards ``total_orders`` only.
"""

from datetime import timedelta
from decimal import Decimal, ROUND_HALF_UP

from django.db.models import Count, DecimalField, Q, Sum
from django.db.models.functions import Coalesce, TruncDate
from django.utils import timezone

from orders.models import Order
from orders.status import OrderStatus

PERIOD_DAYS = {
    "today": 1,
    "week": 7,
    "month": 30,
}

MONEY = DecimalField(max_digits=12, decimal_places=2)
ZERO = Decimal("0.00")


def resolve_period(period=None, start=None, end=None, today=None):
    """
    ``(start, end)`` dates for a report. Explicit dates win; otherwise the
    named period ending today; otherwise just today.
    """
    today = today or timezone.localdate()

    if start or end:
        start = start or end
        end = end or start
        if start > end:
            start, end = end, start
        return start, end

    days = PERIOD_DAYS.get((period or "").strip().lower(), 1)
    return today - timedelta(days=days - 1), today


def _money_sum(field, condition):
    return Coalesce(Sum(field, filter=condition), ZERO, output_field=MONEY)


def sales_summary(start, end):
    not_cancelled = ~Q(status=OrderStatus.CANCELLED)

    day_map = {
        row["sale_date"]: row
        for row in Order.objects.filter(created_at__date__range=[start, end])
        .annotate(sale_date=TruncDate("created_at"))
        .values("sale_date")
        .annotate(
            total_orders=Count("id"),
            cancelled_orders=Count("id", filter=Q(status=OrderStatus.CANCELLED)),
            completed_orders=Count("id", filter=Q(status=OrderStatus.DELIVERED)),
            dine_in_orders=Count("id", filter=not_cancelled & Q(order_type="dine-in")),
            takeaway_orders=Count("id", filter=not_cancelled & Q(order_type="takeaway")),
            total_sales=_money_sum("total", not_cancelled),
            total_sgst=_money_sum("sgst", not_cancelled),
            total_cgst=_money_sum("cgst", not_cancelled),
            total_tax_collected=_money_sum("total_tax", not_cancelled),
        )
    }

    rows = []
    day = start
    while day <= end:
        row = day_map.get(day)
        rows.append(
            {
                "sale_date": str(day),
                "total_orders": row["total_orders"] if row else 0,
                "cancelled_orders": row["cancelled_orders"] if row else 0,
                "completed_orders": row["completed_orders"] if row else 0,
                "dine_in_orders": row["dine_in_orders"] if row else 0,
                "takeaway_orders": row["takeaway_orders"] if row else 0,
                "total_sales": row["total_sales"] if row else ZERO,
                "total_sgst": row["total_sgst"] if row else ZERO,
                "total_cgst": row["total_cgst"] if row else ZERO,
                "total_tax_collected": row["total_tax_collected"] if row else ZERO,
            }
        )
        day += timedelta(days=1)

    return rows


def _percent(part, whole):
    if not whole:
        return Decimal("0.0")
    return (Decimal(part) * 100 / Decimal(whole)).quantize(Decimal("0.1"), rounding=ROUND_HALF_UP)


def period_summary(rows):
    revenue = sum((row["total_sales"] for row in rows), ZERO)
    tax = sum((row["total_tax_collected"] for row in rows), ZERO)
    orders = sum(row["total_orders"] for row in rows)
    cancelled = sum(row["cancelled_orders"] for row in rows)
    completed = sum(row["completed_orders"] for row in rows)
    dine_in = sum(row["dine_in_orders"] for row in rows)
    takeaway = sum(row["takeaway_orders"] for row in rows)

    sold = orders - cancelled
    average = (revenue / sold).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP) if sold else ZERO

    return {
        "total_revenue": revenue,
        "total_orders": orders,
        "cancelled_orders": cancelled,
        "total_tax": tax,
        "average_order_value": average,
        "completion_rate": _percent(completed, orders),
        "dine_in_percentage": _percent(dine_in, sold),
        "takeaway_percentage": _percent(takeaway, sold),
    }
