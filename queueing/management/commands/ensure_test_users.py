from django.core.management.base import BaseCommand
from django.contrib.auth.hashers import make_password

from queueing.models import Branch, Department, User

# (username, variant, account_type)
TEST_SET = [
    ("bank_admin", "bank", "admin"),
    ("teller1", "bank", "staff"),
    ("bank_kiosk", "bank", "kiosk"),
    ("bank_display", "bank", "display"),
    ("hospital_admin", "hospital", "admin"),
    ("reception1", "hospital", "staff"),
    ("hospital_display", "hospital", "display"),
]


class Command(BaseCommand):
    help = "Ensure test accounts exist with password=123456 (idempotent)."

    def handle(self, *args, **opts):
        branch, _ = Branch.objects.get_or_create(name="Main Branch", defaults={"address": "Head office"})
        reception, _ = Department.objects.get_or_create(
            title="Reception", defaults={"icon": "👋", "category": "Administration"},
        )
        for username, variant, account_type in TEST_SET:
            bound = {
                "branch": branch if variant == "bank" else None,
                "department": reception if variant == "hospital" and account_type == "staff" else None,
            }
            u, created = User.objects.get_or_create(
                username=username,
                defaults={
                    "variant": variant,
                    "account_type": account_type,
                    "password": make_password("123456"),
                    "is_active": True,
                    **bound,
                },
            )
            if not created:
                # reset password, activation and account binding
                u.password = make_password("123456")
                u.variant = variant
                u.account_type = account_type
                u.is_active = True
                u.branch = bound["branch"]
                u.department = bound["department"]
                u.save(update_fields=["password", "variant", "account_type", "is_active", "branch", "department"])
            self.stdout.write(self.style.SUCCESS(f"ok: {username} ({variant}/{account_type})"))
        self.stdout.write(self.style.SUCCESS("All test users ensured."))
