"""Admin registrations for players."""
from django.contrib import admin
from django.contrib.auth.admin import UserAdmin as BaseUserAdmin

from .models import User


@admin.register(User)
class UserAdmin(BaseUserAdmin):
    list_display = ("username", "name", "phone_number", "city", "games_played", "is_verified")
    list_filter = ("is_verified", "is_staff", "is_active")
    search_fields = ("username", "name", "phone_number", "email")
    fieldsets = BaseUserAdmin.fieldsets + (
        (
            "Player",
            {
                "fields": (
                    "phone_number",
                    "name",
                    "avatar",
                    "bio",
                    "city",
                    "preferred_positions",
                    "availability",
                    "is_verified",
                )
            },
        ),
        (
            "Stats",
            {
                "fields": (
                    "games_played",
                    "goals",
                    "assists",
                    "yellow_cards",
                    "red_cards",
                    "wins",
                    "win_rate",
                )
            },
        ),
    )
