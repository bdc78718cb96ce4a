"""Admin registrations for chat."""
from django.contrib import admin

from . import models


class PollOptionInline(admin.TabularInline):
    model = models.PollOption
    extra = 0


@admin.register(models.Message)
class MessageAdmin(admin.ModelAdmin):
    list_display = ("squad", "sender", "kind", "text", "is_pinned", "is_deleted", "created_at")
    list_filter = ("kind", "is_pinned", "is_deleted")
    search_fields = ("text", "squad__name")
    raw_id_fields = ("sender", "reply_to", "game", "deleted_by", "pinned_by")
    inlines = [PollOptionInline]


@admin.register(models.Reaction)
class ReactionAdmin(admin.ModelAdmin):
    list_display = ("message", "user", "emoji", "created_at")


@admin.register(models.Receipt)
class ReceiptAdmin(admin.ModelAdmin):
    list_display = ("message", "user", "delivered_at", "read_at")
