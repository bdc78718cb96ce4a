"""Admin registrations for venues."""
from django.contrib import admin

from . import models


class PitchSizeInline(admin.TabularInline):
    model = models.PitchSize
    extra = 0


class OpeningHoursInline(admin.TabularInline):
    model = models.OpeningHours
    extra = 0


class HolidayInline(admin.TabularInline):
    model = models.Holiday
    extra = 0


class MaintenanceWindowInline(admin.TabularInline):
    model = models.MaintenanceWindow
    extra = 0


class VenueModeratorInline(admin.TabularInline):
    model = models.VenueModerator
    extra = 0
    raw_id_fields = ("user",)


@admin.register(models.Venue)
class VenueAdmin(admin.ModelAdmin):
    list_display = ("name", "city", "surface", "rating_average", "total_bookings", "is_verified", "is_active")
    list_filter = ("surface", "is_verified", "is_featured", "is_active", "country")
    search_fields = ("name", "city", "slug")
    readonly_fields = ("slug", "rating_calculated_at", "deactivated_at")
    inlines = [
        PitchSizeInline,
        OpeningHoursInline,
        HolidayInline,
        MaintenanceWindowInline,
        VenueModeratorInline,
    ]


class PeriodTimeSlotInline(admin.TabularInline):
    model = models.PeriodTimeSlot
    extra = 0


class PeriodSpecialDateInline(admin.TabularInline):
    model = models.PeriodSpecialDate
    extra = 0


@admin.register(models.PriceTable)
class PriceTableAdmin(admin.ModelAdmin):
    list_display = ("venue", "size", "currency")
    list_filter = ("size",)


@admin.register(models.PricePeriod)
class PricePeriodAdmin(admin.ModelAdmin):
    list_display = ("table", "name", "hourly_rate", "order")
    inlines = [PeriodTimeSlotInline, PeriodSpecialDateInline]


@admin.register(models.BlockedSlot)
class BlockedSlotAdmin(admin.ModelAdmin):
    list_display = ("venue", "starts_at", "ends_at", "recurrence", "reason")
    list_filter = ("recurrence",)


@admin.register(models.Promotion)
class PromotionAdmin(admin.ModelAdmin):
    list_display = ("title", "venue", "kind", "discount_type", "discount_value", "usage_count", "is_active")
    list_filter = ("kind", "is_active")
    search_fields = ("title", "code")


@admin.register(models.PromotionRedemption)
class PromotionRedemptionAdmin(admin.ModelAdmin):
    list_display = ("promotion", "user", "game", "used_at")


@admin.register(models.Review)
class ReviewAdmin(admin.ModelAdmin):
    list_display = ("venue", "user", "overall", "verified_booking", "is_visible", "created_at")
    list_filter = ("is_visible", "verified_booking", "overall")
