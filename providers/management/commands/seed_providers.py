from __future__ import annotations

from django.core.management.base import BaseCommand

from providers.models import Provider

DEFAULT_PROVIDERS = [
    {
        "key": "nod",
        "name": "NOD",
        "description": "NOD B2B REST API, HMAC-SHA1 signed requests (api.b2b.nod.ro).",
    },
    {
        "key": "elko",
        "name": "ELKO",
        "description": "ELKO B2B REST API with bearer token; per-product availability lookups.",
    },
    {
        "key": "ingram",
        "name": "Ingram Micro 24",
        "description": "Ingram Micro 24 hourly availability CSV, API key in the URL.",
    },
    {
        "key": "also",
        "name": "ALSO",
        "description": "ALSO price list over SFTP (tab + semicolon CSV, VAT-inclusive prices).",
    },
]


class Command(BaseCommand):
    help = "Create the known distributor providers (disabled) if they do not exist yet."

    def handle(self, *args, **opts):
        created = 0
        for entry in DEFAULT_PROVIDERS:
            _, was_created = Provider.objects.get_or_create(
                key=entry["key"],
                defaults={
                    "name": entry["name"],
                    "description": entry["description"],
                    "enabled": False,
                },
            )
            created += int(was_created)
        self.stdout.write(
            self.style.SUCCESS(f"Providers seeded: {created} created, "
                               f"{len(DEFAULT_PROVIDERS) - created} already present")
        )
