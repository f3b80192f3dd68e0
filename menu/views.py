import logging
from collections import OrderedDict

from django.db.models import Q
from rest_framework import generics
from rest_framework.permissions import AllowAny
from rest_framework.response import Response
from rest_framework.views import APIView

from accounts.permissions import IsAdminOrStaff, IsAdminRole

from .models import MenuItem
from .serializers import (
    AvailabilitySerializer,
    MenuItemSerializer,
    PublicMenuItemSerializer,
)

logger = logging.getLogger(__name__)


# ----------------------------
# PUBLIC MENU
# ----------------------------

class MenuView(APIView):
    """Available items grouped by category, in menu order."""

    permission_classes = [AllowAny]

    def get(self, request):
        items = MenuItem.objects.filter(available=True).order_by("category", "name")

        grouped = OrderedDict()
        for item in items:
            grouped.setdefault(item.category, []).append(
                PublicMenuItemSerializer(item).data
            )

        return Response([
            {"category": category, "items": category_items}
            for category, category_items in grouped.items()
        ])


class MenuItemListView(generics.ListAPIView):

    serializer_class = PublicMenuItemSerializer
    permission_classes = [AllowAny]

    def get_queryset(self):
        queryset = MenuItem.objects.filter(available=True)

        category = self.request.query_params.get("category")
        if category:
            queryset = queryset.filter(category__iexact=category.strip())

        return queryset


# ----------------------------
# MANAGEMENT
# ----------------------------

class MenuItemManageListCreateView(generics.ListCreateAPIView):

    serializer_class = MenuItemSerializer

    def get_permissions(self):
        if self.request.method == "POST":
            return [IsAdminRole()]
        return [IsAdminOrStaff()]

    def get_queryset(self):
        queryset = MenuItem.objects.all()

        search = (self.request.query_params.get("search") or "").strip()
        if search:
            queryset = queryset.filter(
                Q(name__icontains=search) | Q(description__icontains=search)
            )

        category = (self.request.query_params.get("category") or "").strip()
        if category and category.lower() != "all":
            queryset = queryset.filter(category__iexact=category)

        return queryset

    def perform_create(self, serializer):
        item = serializer.save()
        logger.info("Menu item created: %s (%s)", item.name, item.id)


class MenuItemManageDetailView(generics.RetrieveUpdateDestroyAPIView):

    queryset = MenuItem.objects.all()
    serializer_class = MenuItemSerializer

    def get_permissions(self):
        if self.request.method in ["PUT", "PATCH", "DELETE"]:
            return [IsAdminRole()]
        return [IsAdminOrStaff()]

    def perform_destroy(self, instance):
        logger.info("Menu item deleted: %s (%s)", instance.name, instance.id)
        instance.delete()


class MenuItemAvailabilityView(APIView):
    """Set availability, or flip it when no value is sent."""

    permission_classes = [IsAdminOrStaff]

    def post(self, request, pk):
        try:
            item = MenuItem.objects.get(pk=pk)
        except MenuItem.DoesNotExist:
            return Response({"error": "Menu item not found"}, status=404)

        if "available" in request.data:
            serializer = AvailabilitySerializer(data=request.data)
            serializer.is_valid(raise_exception=True)
            item.available = serializer.validated_data["available"]
        else:
            item.available = not item.available

        item.save(update_fields=["available", "updated_at"])

        return Response(
            {"id": str(item.id), "available": item.available},
            status=200
        )
