from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError

from providers import registry
from providers.http import HttpClient
from providers.services.health import ping_provider


class Command(BaseCommand):
    help = "Test provider credentials with the cheapest authenticated call."

    def add_arguments(self, parser):
        parser.add_argument(
            "--code", action="append", help="Provider key; repeatable. Default: all registered."
        )

    def handle(self, *args, **opts):
        keys = opts.get("code") or registry.list_keys()
        failures = 0
        with HttpClient() as http:
            for key in keys:
                result = ping_provider(key, http=http)
                line = f"[{key}] {result.message} ({result.latency_ms} ms)"
                if result.success:
                    self.stdout.write(self.style.SUCCESS(line))
                else:
                    failures += 1
                    self.stdout.write(self.style.ERROR(line))
        if failures:
            raise CommandError(f"{failures} provider(s) failed the connection test.")
