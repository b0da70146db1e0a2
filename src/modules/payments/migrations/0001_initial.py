import django.db.models.deletion
import uuid6
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        ("orders", "0001_initial"),
    ]

    operations = [
        migrations.CreateModel(
            name="Payment",
            fields=[
                (
                    "id",
                    models.UUIDField(
                        default=uuid6.uuid7, editable=False, primary_key=True, serialize=False
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                ("gateway_order_id", models.CharField(max_length=100, unique=True)),
                ("gross_amount", models.DecimalField(decimal_places=2, max_digits=10)),
                ("payment_type", models.CharField(blank=True, default="", max_length=50)),
                (
                    "transaction_status",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("pending", "Pending"),
                            ("settlement", "Settlement"),
                            ("expire", "Expire"),
                            ("cancel", "Cancel"),
                            ("deny", "Deny"),
                            ("refund", "Refund"),
                        ],
                        default="",
                        max_length=50,
                    ),
                ),
                ("transaction_id", models.CharField(blank=True, default="", max_length=100)),
                ("transaction_time", models.DateTimeField(blank=True, default=None, null=True)),
                ("settlement_time", models.DateTimeField(blank=True, default=None, null=True)),
                (
                    "fraud_status",
                    models.CharField(
                        blank=True,
                        choices=[
                            ("accept", "Accept"),
                            ("challenge", "Challenge"),
                            ("deny", "Deny"),
                        ],
                        default="",
                        max_length=50,
                    ),
                ),
                ("status_message", models.TextField(blank=True, default="")),
                ("payment_metadata", models.JSONField(blank=True, default=dict)),
                (
                    "order",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="payments",
                        to="orders.order",
                    ),
                ),
            ],
            options={
                "db_table": "payments",
                "ordering": ["-created_at"],
                "indexes": [
                    models.Index(fields=["transaction_status"], name="payments_status_idx"),
                    models.Index(fields=["transaction_id"], name="payments_transaction_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("gross_amount__gte", 0)),
                        name="payments_gross_amount_non_negative",
                    )
                ],
            },
        ),
    ]
