# sales/api/report_urls.py

from django.urls import path

from sales.api.reports import DebtorsReportView, InventoryMetricsView

app_name = "reports"

urlpatterns = [
    path("inventory/", InventoryMetricsView.as_view(), name="inventory-metrics"),
    path("debtors/", DebtorsReportView.as_view(), name="debtors"),
]
