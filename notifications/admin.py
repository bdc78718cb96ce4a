"""Admin registrations for notifications."""
from django.contrib import admin

from .models import Notification


@admin.register(Notification)
class NotificationAdmin(admin.ModelAdmin):
    list_display = ("recipient", "kind", "title", "priority", "status", "is_read", "created_at")
    list_filter = ("kind", "priority", "status", "is_read")
    search_fields = ("title", "message", "recipient__name")
    raw_id_fields = ("recipient", "sender", "game", "squad")
