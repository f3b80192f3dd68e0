from django.core.management.base import BaseCommand

from menu.data import DEFAULT_MENU
from menu.models import MenuItem


class Command(BaseCommand):
    help = "Load the default cafe menu. Existing items (matched by name) are left alone."

    def handle(self, *args, **options):
        created = []

        for section in DEFAULT_MENU:
            for item in section["items"]:
                defaults = dict(item, category=section["category"])
                name = defaults.pop("name")
                _, was_created = MenuItem.objects.get_or_create(name=name, defaults=defaults)
                if was_created:
                    created.append(name)

        self.stdout.write(self.style.SUCCESS(f"Seeded {len(created)} new items."))
        for name in created:
            self.stdout.write(f"  + {name}")
