"""Admin registrations for squads."""
from django.contrib import admin

from . import models


class MembershipInline(admin.TabularInline):
    model = models.Membership
    extra = 0
    raw_id_fields = ("user",)


class RecurringSlotInline(admin.TabularInline):
    model = models.RecurringSlot
    extra = 0


@admin.register(models.Squad)
class SquadAdmin(admin.ModelAdmin):
    list_display = ("name", "created_by", "max_members", "total_games", "invite_code", "is_active")
    list_filter = ("is_active", "is_private")
    search_fields = ("name", "invite_code")
    inlines = [MembershipInline, RecurringSlotInline]


@admin.register(models.Membership)
class MembershipAdmin(admin.ModelAdmin):
    list_display = ("squad", "user", "role", "joined_at", "is_paying")
    list_filter = ("role",)
    search_fields = ("squad__name", "user__name", "user__phone_number")
