# users/management/commands/seed_users.py

from __future__ import annotations

from dataclasses import dataclass

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError
from django.db import transaction

from permissions.roles import (
    ROLE_ACCOUNTANT,
    ROLE_ADMIN,
    ROLE_MANAGER,
    ROLE_SALES,
    ROLE_STOREKEEPER,
)
from tenants.models import Company


@dataclass(frozen=True)
class SeedUserSpec:
    label: str
    role: str
    local_part: str
    first_name: str = ""
    last_name: str = ""


SEED_USERS = [
    SeedUserSpec("Admin", ROLE_ADMIN, "admin", "System", "Admin"),
    SeedUserSpec("Manager", ROLE_MANAGER, "manager", "Branch", "Manager"),
    SeedUserSpec("Storekeeper", ROLE_STOREKEEPER, "store", "Yard", "Keeper"),
    SeedUserSpec("Sales", ROLE_SALES, "sales", "Field", "Sales"),
    SeedUserSpec("Accountant", ROLE_ACCOUNTANT, "accounts", "Ledger", "Clerk"),
]


class Command(BaseCommand):
    help = "Seed a company and one staff user per role."

    def add_arguments(self, parser):
        parser.add_argument("--company", type=str, default="Demo Trading", help="Company name")
        parser.add_argument(
            "--domain",
            type=str,
            default="example.com",
            help="Email domain for seeded users (default: example.com)",
        )
        parser.add_argument(
            "--password",
            type=str,
            default="Pass1234!",
            help="Password for seeded users (default: Pass1234!)",
        )
        parser.add_argument(
            "--force-password",
            action="store_true",
            help="Reset password for existing seeded users too.",
        )

    @transaction.atomic
    def handle(self, *args, **options):
        company_name = (options.get("company") or "").strip()
        domain = (options.get("domain") or "").strip().lower()
        password = options.get("password") or ""
        force_password = bool(options.get("force_password"))

        if not company_name:
            raise CommandError("--company must not be empty.")
        if not domain or "@" in domain:
            raise CommandError("--domain must be a bare domain such as example.com.")
        if len(password) < 6:
            raise CommandError("--password must be at least 6 characters.")

        User = get_user_model()

        company, company_created = Company.objects.get_or_create(name=company_name)
        self.stdout.write(
            f"{'created' if company_created else 'exists'}: company '{company.name}'"
        )

        created_count = 0
        updated_count = 0

        for spec in SEED_USERS:
            email = f"{spec.local_part}@{domain}"
            user = User.objects.filter(email__iexact=email).first()

            if user is None:
                User.objects.create_user(
                    email=email,
                    password=password,
                    company=company,
                    role=spec.role,
                    first_name=spec.first_name,
                    last_name=spec.last_name,
                    is_staff=spec.role == ROLE_ADMIN,
                )
                created_count += 1
                self.stdout.write(f"created: {spec.label} ({spec.role}) -> {email}")
                continue

            if user.company_id not in (None, company.pk):
                raise CommandError(f"{email} already belongs to another company.")

            user.company = company
            user.role = spec.role
            user.is_active = True
            if force_password:
                user.set_password(password)
            user.save()
            updated_count += 1
            self.stdout.write(f"exists:  {spec.label} ({spec.role}) -> {email}")

        self.stdout.write("\n--- Summary ---")
        self.stdout.write(f"Created: {created_count}")
        self.stdout.write(f"Updated: {updated_count}")
