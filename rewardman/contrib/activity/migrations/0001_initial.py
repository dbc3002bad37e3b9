# Initial schema for the merchant activity log

import django.db.models.deletion
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("rewardman", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="ActivityLog",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                (
                    "action",
                    models.CharField(
                        choices=[
                            ("voucher_redeemed", "Voucher redeemed"),
                            ("credit_redeemed", "Credit redeemed"),
                            ("settings_updated", "Settings updated"),
                            ("reconciliation_uploaded", "Reconciliation uploaded"),
                        ],
                        db_index=True,
                        max_length=40,
                        verbose_name="action",
                    ),
                ),
                ("target_type", models.CharField(blank=True, max_length=50, verbose_name="target type")),
                ("target_id", models.CharField(blank=True, max_length=50, verbose_name="target id")),
                ("details", models.JSONField(blank=True, default=dict, verbose_name="details")),
                (
                    "actor",
                    models.CharField(
                        blank=True,
                        help_text="User or system that performed the action",
                        max_length=100,
                        verbose_name="actor",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True, db_index=True, verbose_name="created at")),
                (
                    "merchant",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="activity_logs",
                        to="rewardman.merchant",
                        verbose_name="merchant",
                    ),
                ),
            ],
            options={
                "verbose_name": "activity log",
                "verbose_name_plural": "activity logs",
                "ordering": ["-created_at", "-pk"],
                "indexes": [
                    models.Index(fields=["merchant", "-created_at"], name="rewardman_act_merchant_idx"),
                ],
            },
        ),
    ]
