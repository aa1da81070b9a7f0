# sales/api/reports.py

"""
REPORTS (SALES MODULE)

PATH: sales/api/reports.py

Purpose:
- Inventory metrics and debtors list for the back office.

Contract:
- start / end are optional, default to today (server timezone).
- date format: YYYY-MM-DD
- range is [start 00:00, end + 1 day 00:00)

Security:
- reports.view
"""

from __future__ import annotations

from drf_spectacular.utils import OpenApiParameter, extend_schema
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.views import APIView

from permissions.roles import CAP_REPORTS_VIEW, HasCapability
from sales.services.reports import debtors_report, inventory_metrics, parse_report_date
from tenants.mixins import TenantScopedMixin

RANGE_PARAMS = [
    OpenApiParameter("start", str, description="YYYY-MM-DD (default today)"),
    OpenApiParameter("end", str, description="YYYY-MM-DD (default start)"),
]


class _ReportView(TenantScopedMixin, APIView):
    permission_classes = [IsAuthenticated, HasCapability]
    required_capability = CAP_REPORTS_VIEW

    def _range(self, request):
        start = parse_report_date(request.query_params.get("start"))
        end = parse_report_date(request.query_params.get("end"), default=start)
        return start, end


class InventoryMetricsView(_ReportView):
    @extend_schema(tags=["reports"], parameters=RANGE_PARAMS)
    def get(self, request):
        start, end = self._range(request)
        rows = inventory_metrics(company=self.company, start=start, end=end)
        return Response(
            {
                "start": start.isoformat(),
                "end": end.isoformat(),
                "count": len(rows),
                "results": rows,
            }
        )


class DebtorsReportView(_ReportView):
    @extend_schema(tags=["reports"], parameters=RANGE_PARAMS)
    def get(self, request):
        start, end = self._range(request)
        rows = debtors_report(company=self.company, start=start, end=end)
        return Response(
            {
                "start": start.isoformat(),
                "end": end.isoformat(),
                "count": len(rows),
                "results": rows,
            }
        )
