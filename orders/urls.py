from django.urls import path
from .views import (
    CartView,
    CartAddView,
    CartRemoveView,
    CartQuantityView,
    CartClearView,
    PlaceOrderView,
    PickupSlotsView,
    OrderTrackView,
    OrderSlipView,
    OrderListView,
    TodayOrderListView,
    OrderDetailView,
    OrderStatusUpdateView,
    OrderAdvanceView,
)

cart_urlpatterns = [

    path("", CartView.as_view(), name="cart"),
    path("add/", CartAddView.as_view(), name="cart-add"),
    path("remove/", CartRemoveView.as_view(), name="cart-remove"),
    path("quantity/", CartQuantityView.as_view(), name="cart-quantity"),
    path("clear/", CartClearView.as_view(), name="cart-clear"),

]

urlpatterns = [

    path("place/", PlaceOrderView.as_view(), name="order-place"),
    path("pickup-slots/", PickupSlotsView.as_view(), name="order-pickup-slots"),
    path("track/<uuid:pk>/", OrderTrackView.as_view(), name="order-track"),
    path("slip/<uuid:pk>/", OrderSlipView.as_view(), name="order-slip"),

    path("list/", OrderListView.as_view(), name="order-list"),
    path("today/", TodayOrderListView.as_view(), name="order-today"),
    path("status/<uuid:pk>/", OrderStatusUpdateView.as_view(), name="order-status"),
    path("advance/<uuid:pk>/", OrderAdvanceView.as_view(), name="order-advance"),
    path("<uuid:pk>/", OrderDetailView.as_view(), name="order-detail"),
]
