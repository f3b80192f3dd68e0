from django.contrib import admin
from .models import MenuItem


@admin.register(MenuItem)
class MenuItemAdmin(admin.ModelAdmin):

    list_display = ("name", "category", "price", "available", "is_popular")
    list_filter = ("category", "available")
    search_fields = ("name", "description")
