from decimal import Decimal

from django.utils.dateparse import parse_date
from rest_framework.renderers import JSONRenderer
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminOrStaff
from teamates.renderers import CSVRenderer

from .sales import period_summary, resolve_period, sales_summary


def _as_date(value):
    if not value:
        return None
    return parse_date(value)


def _plain(row):
    return {key: str(value) if isinstance(value, Decimal) else value for key, value in row.items()}


def _report_range(request):
    return resolve_period(
        request.GET.get("period"),
        _as_date(request.GET.get("start")),
        _as_date(request.GET.get("end")),
    )


class SalesReportView(APIView):
    permission_classes = [IsAdminOrStaff]

    def get(self, request):
        start, end = _report_range(request)
        rows = sales_summary(start, end)

        return Response({
            "start": str(start),
            "end": str(end),
            "summary": _plain(period_summary(rows)),
            # Newest first, as the dashboard lists them
            "days": [_plain(row) for row in reversed(rows)],
        })


class SalesReportExportView(APIView):
    permission_classes = [IsAdminOrStaff]
    renderer_classes = [CSVRenderer, JSONRenderer]

    def get(self, request):
        start, end = _report_range(request)
        rows = sales_summary(start, end)

        data = [
            {
                "Date": row["sale_date"],
                "Total Orders": row["total_orders"],
                "Completed Orders": row["completed_orders"],
                "Cancelled Orders": row["cancelled_orders"],
                "Total Sales": row["total_sales"],
                "SGST": row["total_sgst"],
                "CGST": row["total_cgst"],
                "Tax Collected": row["total_tax_collected"],
                "Dine In": row["dine_in_orders"],
                "Takeaway": row["takeaway_orders"],
            }
            for row in reversed(rows)
        ]

        filename = f"sales-report-{start}-to-{end}.csv"
        return Response(
            data,
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )
