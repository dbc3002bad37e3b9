"""Rewardman admin (CORE only).

Ledger rows (balances, transactions, vouchers) are read-mostly: they are
written by the services, never edited by hand.

Contrib models have their own admin in their respective modules:
- rewardman.contrib.activity.admin: ActivityLogAdmin
"""

from django.contrib import admin
from django.utils.html import format_html

from rewardman.models import (
    Balance,
    Branch,
    Diner,
    LoyaltyTransaction,
    Merchant,
    ReconciliationBatch,
    ReconciliationRecord,
    Voucher,
    VoucherStatus,
    VoucherType,
)


class ReadOnlyAdminMixin:
    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False


# ===========================================
# Merchant Admin
# ===========================================


class BranchInline(admin.TabularInline):
    model = Branch
    extra = 0
    fields = ["code", "name", "is_default", "is_active"]


@admin.register(Merchant)
class MerchantAdmin(admin.ModelAdmin):
    list_display = [
        "code",
        "name",
        "loyalty_scope",
        "points_per_currency",
        "points_threshold",
        "visit_threshold",
        "onboarding_status",
        "is_active",
    ]
    list_filter = ["loyalty_scope", "onboarding_status", "is_active"]
    search_fields = ["code", "name", "contact_email"]
    readonly_fields = ["uuid", "onboarding_completed_at", "created_at", "updated_at"]
    inlines = [BranchInline]


@admin.register(Diner)
class DinerAdmin(admin.ModelAdmin):
    list_display = ["code", "name", "phone", "email", "active_code", "is_active"]
    list_filter = ["is_active"]
    search_fields = ["code", "first_name", "last_name", "phone", "email"]
    readonly_fields = [
        "uuid",
        "active_voucher",
        "active_code",
        "active_code_issued_at",
        "created_at",
        "updated_at",
    ]


# ===========================================
# Ledger Admin
# ===========================================


@admin.register(Balance)
class BalanceAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = [
        "diner",
        "merchant",
        "branch",
        "current_points",
        "current_visits",
        "points_credits",
        "visit_credits",
        "total_vouchers_generated",
    ]
    list_filter = ["merchant"]
    search_fields = ["diner__code", "diner__phone", "merchant__code"]
    raw_id_fields = ["diner"]


@admin.register(LoyaltyTransaction)
class LoyaltyTransactionAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ["created_at", "diner", "merchant", "branch", "amount", "points_earned", "bill_id"]
    list_filter = ["merchant"]
    search_fields = ["diner__code", "bill_id"]
    date_hierarchy = "created_at"
    ordering = ["-created_at"]


# ===========================================
# Voucher Admin
# ===========================================


@admin.register(VoucherType)
class VoucherTypeAdmin(admin.ModelAdmin):
    list_display = ["name", "merchant", "earning_mode", "credits_cost", "validity_days", "redemption_scope", "is_active"]
    list_filter = ["merchant", "earning_mode", "redemption_scope", "is_active"]
    search_fields = ["name", "merchant__code"]
    filter_horizontal = ["redeemable_branches"]


@admin.register(Voucher)
class VoucherAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ["title", "diner", "merchant", "status_badge", "expiry_date", "redeemed_at", "bill_id"]
    list_filter = ["merchant", "is_redeemed"]
    search_fields = ["title", "diner__code", "code", "bill_id"]
    date_hierarchy = "generated_at"

    def status_badge(self, obj):
        colors = {
            VoucherStatus.ISSUED: "#28a745",
            VoucherStatus.REDEEMED: "#6c757d",
            VoucherStatus.EXPIRED: "#dc3545",
        }
        status = obj.status
        return format_html(
            '<span style="background:{}; color:#fff; padding:2px 8px; '
            'border-radius:3px; font-size:11px;">{}</span>',
            colors.get(status, "#6c757d"),
            VoucherStatus(status).label,
        )

    status_badge.short_description = "Status"


# ===========================================
# Reconciliation Admin
# ===========================================


class ReconciliationRecordInline(admin.TabularInline):
    model = ReconciliationRecord
    extra = 0
    fields = ["bill_id", "csv_amount", "csv_date", "is_matched", "matched_voucher"]
    readonly_fields = fields

    def has_add_permission(self, request, obj=None):
        return False


@admin.register(ReconciliationBatch)
class ReconciliationBatchAdmin(ReadOnlyAdminMixin, admin.ModelAdmin):
    list_display = ["filename", "merchant", "status", "total_records", "matched_records", "unmatched_records", "uploaded_at"]
    list_filter = ["merchant", "status"]
    search_fields = ["filename", "merchant__code"]
    inlines = [ReconciliationRecordInline]
