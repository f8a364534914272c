from django.core.management.base import BaseCommand

from queueing.models import Department
from queueing.services import catalogue


class Command(BaseCommand):
    help = "Enable hospital departments from the built-in catalogue (idempotent)."

    def add_arguments(self, parser):
        parser.add_argument(
            "keys", nargs="*",
            help="Catalogue keys or titles to enable. Enables Reception only when omitted; use --all for every entry.",
        )
        parser.add_argument("--all", action="store_true", help="Enable the whole catalogue.")

    def handle(self, *args, **opts):
        if opts["all"]:
            wanted = [key for key, *_ in catalogue.HOSPITAL_DEPARTMENTS]
        else:
            wanted = opts["keys"] or ["reception"]
        created_count = 0
        for key in wanted:
            entry = catalogue.lookup(key)
            if entry is None:
                self.stderr.write(self.style.WARNING(f"skip: unknown department {key!r}"))
                continue
            title, icon, category = entry
            _, created = Department.objects.get_or_create(
                title=title, defaults={"icon": icon, "category": category},
            )
            created_count += int(created)
            self.stdout.write(self.style.SUCCESS(f"ok: {title}{' (new)' if created else ''}"))
        self.stdout.write(self.style.SUCCESS(f"{created_count} department(s) created."))
