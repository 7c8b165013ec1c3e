# planora_core/common/management/commands/ensure_super_admin.py

import os

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand, CommandError

from planora_core.iam.models import UserRole
from planora_core.iam.services.profiles import get_or_create_profile


class Command(BaseCommand):
    help = "Ensure a platform super-admin account exists (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument("--email", default=os.getenv("PLANORA_SUPER_ADMIN_EMAIL"))
        parser.add_argument("--username", default=None)
        parser.add_argument("--password", default=os.getenv("PLANORA_SUPER_ADMIN_PASSWORD"))
        parser.add_argument("--reset-password", action="store_true")

    def handle(self, *args, **options):
        email = (options["email"] or "").strip().lower()
        if not email:
            raise CommandError("--email (or PLANORA_SUPER_ADMIN_EMAIL) is required")
        username = options["username"] or email

        User = get_user_model()
        user = User.objects.filter(email__iexact=email).first()
        created = user is None

        if created:
            if not options["password"]:
                raise CommandError("--password (or PLANORA_SUPER_ADMIN_PASSWORD) is required to create the account")
            user = User.objects.create_user(username=username, email=email, password=options["password"])
        elif options["reset_password"]:
            if not options["password"]:
                raise CommandError("--password is required with --reset-password")
            user.set_password(options["password"])

        user.is_active = True
        user.is_staff = True
        user.is_superuser = True
        user.save()

        profile = get_or_create_profile(user)
        if profile.role != UserRole.SUPER_ADMIN:
            profile.role = UserRole.SUPER_ADMIN
            profile.save(update_fields=["role", "updated_at"])

        verb = "created" if created else "ensured"
        self.stdout.write(self.style.SUCCESS(f"Super-admin {verb}: {email}"))
