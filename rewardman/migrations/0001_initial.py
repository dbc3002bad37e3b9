# Initial schema for the loyalty ledger and voucher lifecycle

import uuid

import django.core.validators
import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = []

    operations = [
        migrations.CreateModel(
            name="Merchant",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "code",
                    models.CharField(
                        help_text="Unique merchant code (e.g. RST-001)",
                        max_length=50,
                        unique=True,
                        verbose_name="code",
                    ),
                ),
                ("uuid", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("name", models.CharField(max_length=200, verbose_name="name")),
                (
                    "points_per_currency",
                    models.PositiveIntegerField(
                        default=1,
                        help_text="Points earned per 1 unit of currency spent",
                        validators=[
                            django.core.validators.MinValueValidator(1),
                            django.core.validators.MaxValueValidator(100),
                        ],
                        verbose_name="points per currency unit",
                    ),
                ),
                (
                    "points_threshold",
                    models.PositiveIntegerField(
                        default=1000,
                        help_text="Points needed to earn one credit",
                        validators=[django.core.validators.MinValueValidator(1)],
                        verbose_name="points threshold",
                    ),
                ),
                (
                    "visit_threshold",
                    models.PositiveIntegerField(
                        default=10,
                        help_text="Visits needed to earn one credit",
                        validators=[django.core.validators.MinValueValidator(1)],
                        verbose_name="visit threshold",
                    ),
                ),
                (
                    "voucher_validity_days",
                    models.PositiveIntegerField(
                        default=30,
                        validators=[django.core.validators.MinValueValidator(1)],
                        verbose_name="voucher validity (days)",
                    ),
                ),
                (
                    "loyalty_scope",
                    models.CharField(
                        choices=[("organization", "Organization-wide"), ("branch", "Per branch")],
                        default="organization",
                        help_text="Branch scope keeps a separate balance per branch",
                        max_length=20,
                        verbose_name="loyalty scope",
                    ),
                ),
                (
                    "voucher_scope",
                    models.CharField(
                        choices=[("organization", "Organization-wide"), ("branch", "Per branch")],
                        default="organization",
                        help_text="Branch scope only lets vouchers be redeemed where they were issued",
                        max_length=20,
                        verbose_name="voucher redemption scope",
                    ),
                ),
                (
                    "auto_issue_vouchers",
                    models.BooleanField(
                        default=False,
                        help_text="Convert credits into vouchers as soon as they are earned",
                        verbose_name="auto-issue vouchers",
                    ),
                ),
                (
                    "onboarding_status",
                    models.CharField(
                        choices=[("draft", "Draft"), ("submitted", "Submitted"), ("active", "Active")],
                        default="draft",
                        max_length=20,
                        verbose_name="onboarding status",
                    ),
                ),
                ("registration_number", models.CharField(blank=True, max_length=50, verbose_name="registration number")),
                ("street_address", models.CharField(blank=True, max_length=200, verbose_name="street address")),
                ("city", models.CharField(blank=True, max_length=100, verbose_name="city")),
                ("contact_name", models.CharField(blank=True, max_length=100, verbose_name="contact name")),
                ("contact_email", models.EmailField(blank=True, max_length=254, verbose_name="contact email")),
                ("contact_phone", models.CharField(blank=True, max_length=20, verbose_name="contact phone")),
                (
                    "onboarding_completed_at",
                    models.DateTimeField(blank=True, null=True, verbose_name="onboarding completed at"),
                ),
                ("is_active", models.BooleanField(db_index=True, default=True, verbose_name="active")),
                ("metadata", models.JSONField(blank=True, default=dict, verbose_name="metadata")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
            ],
            options={
                "verbose_name": "merchant",
                "verbose_name_plural": "merchants",
                "ordering": ["name"],
            },
        ),
        migrations.CreateModel(
            name="Branch",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("code", models.SlugField(verbose_name="code")),
                ("name", models.CharField(max_length=200, verbose_name="name")),
                ("address", models.CharField(blank=True, max_length=255, verbose_name="address")),
                ("phone", models.CharField(blank=True, max_length=20, verbose_name="phone")),
                ("is_default", models.BooleanField(default=False, verbose_name="default")),
                ("is_active", models.BooleanField(default=True, verbose_name="active")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                (
                    "merchant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="branches",
                        to="rewardman.merchant",
                        verbose_name="merchant",
                    ),
                ),
            ],
            options={
                "verbose_name": "branch",
                "verbose_name_plural": "branches",
                "ordering": ["merchant", "name"],
                "constraints": [
                    models.UniqueConstraint(fields=("merchant", "code"), name="rewardman_unique_branch_code"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Diner",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "code",
                    models.CharField(
                        help_text="Unique diner code (e.g. DIN-001)",
                        max_length=50,
                        unique=True,
                        verbose_name="code",
                    ),
                ),
                ("uuid", models.UUIDField(default=uuid.uuid4, editable=False, unique=True)),
                ("first_name", models.CharField(max_length=100, verbose_name="first name")),
                ("last_name", models.CharField(blank=True, max_length=100, verbose_name="last name")),
                ("email", models.EmailField(blank=True, db_index=True, max_length=254, verbose_name="email")),
                ("phone", models.CharField(blank=True, db_index=True, max_length=20, verbose_name="phone")),
                (
                    "active_code",
                    models.CharField(
                        blank=True,
                        help_text="Short-lived code shown to staff at redemption",
                        max_length=16,
                        null=True,
                        unique=True,
                        verbose_name="presentation code",
                    ),
                ),
                ("active_code_issued_at", models.DateTimeField(blank=True, null=True, verbose_name="code issued at")),
                ("is_active", models.BooleanField(db_index=True, default=True, verbose_name="active")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
            ],
            options={
                "verbose_name": "diner",
                "verbose_name_plural": "diners",
                "ordering": ["first_name", "last_name"],
            },
        ),
        migrations.CreateModel(
            name="VoucherType",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("name", models.CharField(max_length=200, verbose_name="name")),
                ("description", models.TextField(blank=True, verbose_name="description")),
                (
                    "earning_mode",
                    models.CharField(
                        choices=[("points", "Points"), ("visits", "Visits")],
                        default="points",
                        max_length=20,
                        verbose_name="earning mode",
                    ),
                ),
                (
                    "credits_cost",
                    models.PositiveIntegerField(
                        default=1,
                        validators=[django.core.validators.MinValueValidator(1)],
                        verbose_name="credits cost",
                    ),
                ),
                (
                    "validity_days",
                    models.PositiveIntegerField(
                        blank=True,
                        help_text="Defaults to the merchant's voucher validity",
                        null=True,
                        validators=[django.core.validators.MinValueValidator(1)],
                        verbose_name="validity (days)",
                    ),
                ),
                (
                    "redemption_scope",
                    models.CharField(
                        choices=[("all_branches", "All branches"), ("specific_branches", "Specific branches")],
                        default="all_branches",
                        max_length=20,
                        verbose_name="redemption scope",
                    ),
                ),
                ("is_active", models.BooleanField(default=True, verbose_name="active")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                (
                    "merchant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="voucher_types",
                        to="rewardman.merchant",
                        verbose_name="merchant",
                    ),
                ),
                (
                    "redeemable_branches",
                    models.ManyToManyField(
                        blank=True,
                        help_text="Only used when redemption scope is specific branches",
                        related_name="redeemable_voucher_types",
                        to="rewardman.branch",
                        verbose_name="redeemable at",
                    ),
                ),
            ],
            options={
                "verbose_name": "voucher type",
                "verbose_name_plural": "voucher types",
                "ordering": ["merchant", "name"],
            },
        ),
        migrations.CreateModel(
            name="Voucher",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("title", models.CharField(max_length=200, verbose_name="title")),
                (
                    "code",
                    models.CharField(
                        blank=True,
                        db_index=True,
                        help_text="Presentation code that redeemed this voucher",
                        max_length=16,
                        null=True,
                        verbose_name="redemption code",
                    ),
                ),
                ("expiry_date", models.DateTimeField(db_index=True, verbose_name="expires at")),
                ("is_redeemed", models.BooleanField(db_index=True, default=False, verbose_name="redeemed")),
                ("redeemed_at", models.DateTimeField(blank=True, null=True, verbose_name="redeemed at")),
                ("bill_id", models.CharField(blank=True, db_index=True, max_length=100, verbose_name="bill ID")),
                ("generated_at", models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="generated at")),
                (
                    "branch",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="issued_vouchers",
                        to="rewardman.branch",
                        verbose_name="issued at branch",
                    ),
                ),
                (
                    "diner",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="vouchers",
                        to="rewardman.diner",
                        verbose_name="diner",
                    ),
                ),
                (
                    "merchant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="vouchers",
                        to="rewardman.merchant",
                        verbose_name="merchant",
                    ),
                ),
                (
                    "redeemed_branch",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="redeemed_vouchers",
                        to="rewardman.branch",
                        verbose_name="redeemed at branch",
                    ),
                ),
                (
                    "voucher_type",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="vouchers",
                        to="rewardman.vouchertype",
                        verbose_name="voucher type",
                    ),
                ),
            ],
            options={
                "verbose_name": "voucher",
                "verbose_name_plural": "vouchers",
                "ordering": ["-generated_at"],
                "indexes": [
                    models.Index(fields=["diner", "-generated_at"], name="rewardman_vch_diner_idx"),
                    models.Index(fields=["merchant", "bill_id"], name="rewardman_vch_bill_idx"),
                ],
            },
        ),
        migrations.AddField(
            model_name="diner",
            name="active_voucher",
            field=models.ForeignKey(
                blank=True,
                null=True,
                on_delete=django.db.models.deletion.SET_NULL,
                related_name="+",
                to="rewardman.voucher",
                verbose_name="presented voucher",
            ),
        ),
        migrations.CreateModel(
            name="Balance",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("current_points", models.IntegerField(default=0, verbose_name="current points")),
                (
                    "total_points_earned",
                    models.IntegerField(
                        default=0,
                        help_text="Lifetime points (never decreases)",
                        verbose_name="total points earned",
                    ),
                ),
                ("current_visits", models.IntegerField(default=0, verbose_name="current visits")),
                ("total_visits", models.IntegerField(default=0, verbose_name="total visits")),
                ("points_credits", models.IntegerField(default=0, verbose_name="points credits")),
                ("visit_credits", models.IntegerField(default=0, verbose_name="visit credits")),
                ("total_credits_earned", models.IntegerField(default=0, verbose_name="total credits earned")),
                ("total_vouchers_generated", models.IntegerField(default=0, verbose_name="vouchers generated")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                ("updated_at", models.DateTimeField(auto_now=True, verbose_name="updated at")),
                (
                    "branch",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.PROTECT,
                        related_name="balances",
                        to="rewardman.branch",
                        verbose_name="branch",
                    ),
                ),
                (
                    "diner",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="balances",
                        to="rewardman.diner",
                        verbose_name="diner",
                    ),
                ),
                (
                    "merchant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="balances",
                        to="rewardman.merchant",
                        verbose_name="merchant",
                    ),
                ),
            ],
            options={
                "verbose_name": "balance",
                "verbose_name_plural": "balances",
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(branch__isnull=False),
                        fields=("diner", "merchant", "branch"),
                        name="rewardman_unique_branch_balance",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(branch__isnull=True),
                        fields=("diner", "merchant"),
                        name="rewardman_unique_org_balance",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="LoyaltyTransaction",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("amount", models.DecimalField(decimal_places=2, max_digits=10, verbose_name="amount")),
                ("points_earned", models.IntegerField(verbose_name="points earned")),
                (
                    "bill_id",
                    models.CharField(
                        blank=True,
                        db_index=True,
                        help_text="Bill/invoice ID from the POS",
                        max_length=100,
                        verbose_name="bill ID",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="created at")),
                (
                    "branch",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="transactions",
                        to="rewardman.branch",
                        verbose_name="branch",
                    ),
                ),
                (
                    "diner",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="transactions",
                        to="rewardman.diner",
                        verbose_name="diner",
                    ),
                ),
                (
                    "merchant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="transactions",
                        to="rewardman.merchant",
                        verbose_name="merchant",
                    ),
                ),
            ],
            options={
                "verbose_name": "transaction",
                "verbose_name_plural": "transactions",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["diner", "-created_at"], name="rewardman_tx_diner_idx"),
                    models.Index(fields=["merchant", "bill_id"], name="rewardman_tx_bill_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="ReconciliationBatch",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("filename", models.CharField(max_length=255, verbose_name="filename")),
                ("total_records", models.IntegerField(default=0, verbose_name="total records")),
                ("matched_records", models.IntegerField(default=0, verbose_name="matched records")),
                ("unmatched_records", models.IntegerField(default=0, verbose_name="unmatched records")),
                (
                    "status",
                    models.CharField(
                        choices=[("processing", "Processing"), ("completed", "Completed")],
                        default="processing",
                        max_length=20,
                        verbose_name="status",
                    ),
                ),
                ("uploaded_at", models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="uploaded at")),
                ("processed_at", models.DateTimeField(blank=True, null=True, verbose_name="processed at")),
                (
                    "merchant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="reconciliation_batches",
                        to="rewardman.merchant",
                        verbose_name="merchant",
                    ),
                ),
            ],
            options={
                "verbose_name": "reconciliation batch",
                "verbose_name_plural": "reconciliation batches",
                "ordering": ["-uploaded_at", "-pk"],
            },
        ),
        migrations.CreateModel(
            name="ReconciliationRecord",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("bill_id", models.CharField(max_length=100, verbose_name="bill ID")),
                ("csv_amount", models.CharField(blank=True, max_length=50, verbose_name="CSV amount")),
                ("csv_date", models.CharField(blank=True, max_length=50, verbose_name="CSV date")),
                ("is_matched", models.BooleanField(default=False, verbose_name="matched")),
                ("created_at", models.DateTimeField(auto_now_add=True, verbose_name="created at")),
                (
                    "batch",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="records",
                        to="rewardman.reconciliationbatch",
                        verbose_name="batch",
                    ),
                ),
                (
                    "matched_voucher",
                    models.ForeignKey(
                        blank=True,
                        null=True,
                        on_delete=django.db.models.deletion.SET_NULL,
                        related_name="reconciliation_records",
                        to="rewardman.voucher",
                        verbose_name="matched voucher",
                    ),
                ),
            ],
            options={
                "verbose_name": "reconciliation record",
                "verbose_name_plural": "reconciliation records",
                "ordering": ["pk"],
            },
        ),
    ]
