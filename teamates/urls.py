from django.contrib import admin
from django.urls import include, path

from orders.urls import cart_urlpatterns

urlpatterns = [
    path("admin/", admin.site.urls),

    path("api/auth/", include("accounts.urls")),
    path("api/menu/", include("menu.urls")),
    path("api/cart/", include(cart_urlpatterns)),
    path("api/orders/", include("orders.urls")),
    path("api/payments/", include("payments.urls")),
    path("api/events/", include("notifications.urls")),
    path("api/reports/", include("reports.urls")),
]
