import uuid

import django.core.validators
import django.db.models.deletion
import django.utils.timezone
from django.conf import settings
from django.db import migrations, models


class Migration(migrations.Migration):

    initial = True

    dependencies = [
        migrations.swappable_dependency(settings.AUTH_USER_MODEL),
    ]

    operations = [
        migrations.CreateModel(
            name="Account",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("account_type", models.CharField(choices=[("card", "Card"), ("cash", "Cash")], max_length=10)),
                ("name", models.CharField(max_length=100)),
                (
                    "opening_balance",
                    models.BigIntegerField(
                        default=0,
                        help_text="Balance as of the ledger cutover date (smallest currency unit)",
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="ledger_accounts",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Account",
                "verbose_name_plural": "Accounts",
                "ordering": ["account_type"],
                "constraints": [
                    models.UniqueConstraint(fields=("user", "account_type"), name="uniq_account_user_type"),
                    models.CheckConstraint(
                        condition=models.Q(("account_type__in", ["card", "cash"])),
                        name="chk_account_type_card_or_cash",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="Expense",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("amount", models.PositiveBigIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ("expense_date", models.DateField(default=django.utils.timezone.localdate)),
                ("merchant", models.CharField(max_length=255)),
                ("note", models.CharField(blank=True, max_length=500, null=True)),
                ("category_id", models.CharField(max_length=64)),
                (
                    "payment_method",
                    models.CharField(choices=[("card", "Card"), ("cash", "Cash")], default="card", max_length=10),
                ),
                ("excluded_from_budget", models.BooleanField(default=False)),
                (
                    "origin",
                    models.CharField(
                        choices=[
                            ("manual", "Manual entry"),
                            ("import", "Statement import"),
                            ("assistant", "Assistant"),
                            ("cash_withdrawal", "Converted to cash withdrawal"),
                        ],
                        default="manual",
                        max_length=20,
                    ),
                ),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="expenses",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Expense",
                "verbose_name_plural": "Expenses",
                "ordering": ["-expense_date", "-created_at"],
                "indexes": [
                    models.Index(fields=["user", "expense_date"], name="ledger_expe_user_id_3c6a1e_idx"),
                    models.Index(fields=["user", "category_id"], name="ledger_expe_user_id_8f2d4b_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="SalaryPayment",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("period", models.CharField(help_text="Payroll period label, e.g. 2026-02/1", max_length=32)),
                ("pay_date", models.DateField()),
                ("amount", models.PositiveBigIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ("received", models.BooleanField(default=False)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                ("updated_at", models.DateTimeField(auto_now=True)),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="salary_payments",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Salary Payment",
                "verbose_name_plural": "Salary Payments",
                "ordering": ["-pay_date", "-created_at"],
                "indexes": [
                    models.Index(fields=["user", "pay_date"], name="ledger_sala_user_id_5b7e90_idx"),
                    models.Index(fields=["user", "received"], name="ledger_sala_user_id_a41c2f_idx"),
                ],
            },
        ),
        migrations.CreateModel(
            name="Transfer",
            fields=[
                ("id", models.UUIDField(default=uuid.uuid4, editable=False, primary_key=True, serialize=False)),
                ("amount", models.PositiveBigIntegerField(validators=[django.core.validators.MinValueValidator(1)])),
                ("transfer_date", models.DateField()),
                ("note", models.CharField(blank=True, max_length=500, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "from_account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.RESTRICT,
                        related_name="outgoing_transfers",
                        to="ledger.account",
                    ),
                ),
                (
                    "to_account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.RESTRICT,
                        related_name="incoming_transfers",
                        to="ledger.account",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="transfers",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Transfer",
                "verbose_name_plural": "Transfers",
                "ordering": ["-transfer_date", "-created_at"],
                "indexes": [
                    models.Index(fields=["user", "transfer_date"], name="ledger_tran_user_id_0e9d37_idx"),
                ],
                "constraints": [
                    models.CheckConstraint(
                        condition=models.Q(("from_account", models.F("to_account")), _negated=True),
                        name="chk_transfer_distinct_accounts",
                    ),
                ],
            },
        ),
        migrations.CreateModel(
            name="LedgerEntry",
            fields=[
                ("id", models.BigAutoField(auto_created=True, primary_key=True, serialize=False, verbose_name="ID")),
                ("direction", models.CharField(choices=[("in", "In"), ("out", "Out")], max_length=3)),
                (
                    "amount",
                    models.PositiveBigIntegerField(
                        help_text="Positive amount in the smallest currency unit",
                        validators=[django.core.validators.MinValueValidator(1)],
                    ),
                ),
                ("occurred_on", models.DateField()),
                (
                    "source_type",
                    models.CharField(
                        choices=[
                            ("expense", "Expense"),
                            ("transfer", "Transfer"),
                            ("salary_payment", "Salary payment"),
                            ("cash_withdrawal", "Cash withdrawal"),
                        ],
                        max_length=20,
                    ),
                ),
                ("source_id", models.UUIDField()),
                ("merchant", models.CharField(blank=True, max_length=255, null=True)),
                ("note", models.CharField(blank=True, max_length=500, null=True)),
                ("created_at", models.DateTimeField(auto_now_add=True)),
                (
                    "account",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.RESTRICT,
                        related_name="ledger_entries",
                        to="ledger.account",
                    ),
                ),
                (
                    "user",
                    models.ForeignKey(
                        on_delete=django.db.models.deletion.CASCADE,
                        related_name="ledger_entries",
                        to=settings.AUTH_USER_MODEL,
                    ),
                ),
            ],
            options={
                "verbose_name": "Ledger Entry",
                "verbose_name_plural": "Ledger Entries",
                "ordering": ["-occurred_on", "-created_at"],
                "indexes": [
                    models.Index(fields=["user", "occurred_on"], name="ledger_ledg_user_id_6d1f0a_idx"),
                    models.Index(fields=["account", "occurred_on"], name="ledger_ledg_account_9c2b5e_idx"),
                    models.Index(fields=["source_type", "source_id"], name="ledger_ledg_source__4e8a71_idx"),
                ],
                "constraints": [
                    models.UniqueConstraint(
                        condition=models.Q(("source_type", "transfer"), _negated=True),
                        fields=("source_type", "source_id", "account"),
                        name="uniq_ledger_source_account",
                    ),
                    models.UniqueConstraint(
                        condition=models.Q(("source_type", "transfer")),
                        fields=("source_type", "source_id", "direction"),
                        name="uniq_ledger_transfer_leg",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("amount__gt", 0)),
                        name="chk_ledger_amount_positive",
                    ),
                    models.CheckConstraint(
                        condition=models.Q(("direction__in", ["in", "out"])),
                        name="chk_ledger_direction",
                    ),
                ],
            },
        ),
    ]
