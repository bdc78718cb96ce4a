"""Admin registrations for games."""
from django.contrib import admin

from . import models


class AttendanceInline(admin.TabularInline):
    model = models.Attendance
    extra = 0
    raw_id_fields = ("user",)


class AdditionalCostInline(admin.TabularInline):
    model = models.AdditionalCost
    extra = 0


@admin.register(models.Game)
class GameAdmin(admin.ModelAdmin):
    list_display = ("squad", "venue", "starts_at", "status", "max_players", "field_price", "per_player_cost")
    list_filter = ("status", "pitch_size", "is_recurring")
    search_fields = ("squad__name", "venue__name")
    date_hierarchy = "starts_at"
    raw_id_fields = ("parent_game", "mvp", "cancelled_by", "created_by")
    inlines = [AttendanceInline, AdditionalCostInline]


@admin.register(models.Payment)
class PaymentAdmin(admin.ModelAdmin):
    list_display = ("game", "user", "amount", "method", "paid_at")
    list_filter = ("method",)


@admin.register(models.GoalRecord)
class GoalRecordAdmin(admin.ModelAdmin):
    list_display = ("game", "player", "goals", "team")


@admin.register(models.AssistRecord)
class AssistRecordAdmin(admin.ModelAdmin):
    list_display = ("game", "player", "assists")


@admin.register(models.CardRecord)
class CardRecordAdmin(admin.ModelAdmin):
    list_display = ("game", "player", "kind", "minute")


@admin.register(models.ReminderLog)
class ReminderLogAdmin(admin.ModelAdmin):
    list_display = ("game", "kind", "sent_at")
    list_filter = ("kind",)
