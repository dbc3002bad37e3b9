"""Activity admin."""

from django.contrib import admin

from rewardman.contrib.activity.models import ActivityLog


@admin.register(ActivityLog)
class ActivityLogAdmin(admin.ModelAdmin):
    list_display = ["created_at", "merchant", "action", "target_type", "target_id", "actor"]
    list_filter = ["action", "merchant"]
    search_fields = ["merchant__code", "merchant__name", "target_id", "actor"]
    readonly_fields = ["merchant", "action", "target_type", "target_id", "details", "actor", "created_at"]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]

    def has_add_permission(self, request):
        return False
