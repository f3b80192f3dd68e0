from django.urls import path
from .views import (
    MenuView,
    MenuItemListView,
    MenuItemManageListCreateView,
    MenuItemManageDetailView,
    MenuItemAvailabilityView,
)

urlpatterns = [

    path("", MenuView.as_view(), name="menu"),
    path("items/", MenuItemListView.as_view(), name="menu-items"),
    path("manage/", MenuItemManageListCreateView.as_view(), name="menu-manage"),
    path("manage/<uuid:pk>/", MenuItemManageDetailView.as_view(), name="menu-manage-detail"),
    path(
        "manage/<uuid:pk>/availability/",
        MenuItemAvailabilityView.as_view(),
        name="menu-availability"
    ),

]
