# ledger/management/commands/reconcile_ledger.py

from __future__ import annotations

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from ledger.services.reconciliation_service import reconcile

SECTIONS = (
    ("expenses", "Counted expenses without exactly one `out` entry"),
    ("excluded_expenses", "Excluded expenses that still have entries"),
    ("salary_payments", "Received salary payments without exactly one `in` entry"),
    ("transfers", "Transfers without one `in` + one `out` entry"),
)


class Command(BaseCommand):
    help = "Check ledger entries against their source records (expenses, transfers, salary)."

    def add_arguments(self, parser):
        parser.add_argument(
            "--user",
            dest="email",
            help="Only reconcile this user (email). Default: all active users.",
        )
        parser.add_argument(
            "--strict",
            action="store_true",
            help="Exit with code 1 if any issue is found (useful for CI).",
        )

    def handle(self, *args, **options):
        User = get_user_model()
        email = (options.get("email") or "").strip()
        strict = bool(options.get("strict"))

        users = User.objects.filter(is_active=True).order_by("email")
        if email:
            users = User.objects.filter(email__iexact=email)
            if not users.exists():
                raise CommandError(f"No user with email {email!r}")

        errors = 0
        for user in users:
            errors += self._report_user(user)

        self.stdout.write("")
        if errors == 0:
            self.stdout.write(self.style.SUCCESS("LEDGER RECONCILED: no drift found"))
        else:
            self.stderr.write(self.style.ERROR(f"LEDGER DRIFT FOUND: {errors} problem(s)"))

        return self._exit(strict and errors > 0)

    def _report_user(self, user) -> int:
        report = reconcile(user=user)
        self.stdout.write(self.style.MIGRATE_HEADING(f"== {user.email} =="))

        errors = 0
        for section, label in SECTIONS:
            check = getattr(report, section)
            if check.error:
                errors += 1
                self.stderr.write(self.style.ERROR(f"[FAIL] {section}: check failed ({check.error})"))
            elif check.mismatched_ids:
                errors += len(check.mismatched_ids)
                self.stderr.write(self.style.ERROR(f"[FAIL] {label}: {len(check.mismatched_ids)}"))
                self.stderr.write("  Example IDs: " + ", ".join(check.mismatched_ids[:10]))
            else:
                self.stdout.write(self.style.SUCCESS(f"[OK] {section} ({check.checked} checked)"))

        orphans = report.orphans
        if orphans.error:
            errors += 1
            self.stderr.write(self.style.ERROR(f"[FAIL] orphans: check failed ({orphans.error})"))
        elif orphans.entry_ids:
            errors += len(orphans.entry_ids)
            self.stderr.write(self.style.ERROR(f"[FAIL] Orphan ledger entries: {len(orphans.entry_ids)}"))
            for source_type, count in sorted(orphans.by_source_type.items()):
                self.stderr.write(f"  {source_type}: {count}")
        else:
            self.stdout.write(self.style.SUCCESS("[OK] no orphan entries"))

        return errors

    def _exit(self, fail: bool):
        if fail:
            raise SystemExit(1)
        return None
