from django.urls import path
from .views import OrderEventStreamView, AdminEventStreamView

urlpatterns = [

    path("orders/<uuid:pk>/", OrderEventStreamView.as_view(), name="events-order"),
    path("admin/", AdminEventStreamView.as_view(), name="events-admin"),

]
