from django.contrib import admin
from django.contrib.auth.admin import UserAdmin

from .models import AdminSession, User


@admin.register(User)
class CafeUserAdmin(UserAdmin):
    list_display = ("username", "role", "is_active", "last_login")
    list_filter = ("role", "is_active")
    fieldsets = UserAdmin.fieldsets + (
        ("Cafe", {"fields": ("role", "phone")}),
    )


@admin.register(AdminSession)
class AdminSessionAdmin(admin.ModelAdmin):
    list_display = ("user", "issued_at", "expires_at", "revoked_at")
    readonly_fields = ("issued_at",)
