from django.urls import path
from .views import SalesReportView, SalesReportExportView

urlpatterns = [

    path("sales/", SalesReportView.as_view(), name="report-sales"),
    path("sales/export/", SalesReportExportView.as_view(), name="report-sales-export"),

]
