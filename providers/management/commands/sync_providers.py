from __future__ import annotations

from django.core.management.base import BaseCommand, CommandError

from providers.exceptions import ProviderError
from providers.http import HttpClient
from providers.models import SyncJob
from providers.services.sync import run_all_syncs, run_provider_sync


class Command(BaseCommand):
    help = "Sync catalog data from one provider (--code) or every enabled provider (--all)."

    def add_arguments(self, parser):
        target = parser.add_mutually_exclusive_group(required=True)
        target.add_argument("--code", help="Provider key (e.g., nod, elko, ingram, also)")
        target.add_argument("--all", action="store_true", help="Every enabled provider")
        parser.add_argument(
            "--full",
            action="store_true",
            help="Ignore the last successful job and fetch the whole catalog",
        )

    def handle(self, *args, **opts):
        with HttpClient() as http:
            if opts["all"]:
                job_ids = run_all_syncs(http=http)
            else:
                try:
                    job_ids = [run_provider_sync(opts["code"], full=opts["full"], http=http)]
                except ProviderError as e:
                    raise CommandError(str(e)) from e

        if not job_ids:
            self.stdout.write(self.style.WARNING("No enabled provider was synced."))
            return

        failed = False
        for job in SyncJob.objects.filter(pk__in=job_ids).select_related("provider"):
            line = (
                f"[{job.provider.key}] job={job.pk} status={job.status} "
                f"fetched={job.fetched_count} upserted={job.upserted_count}"
            )
            if job.status == SyncJob.STATUS_FAILED:
                failed = True
                self.stdout.write(self.style.ERROR(f"{line} error={job.error_message}"))
            elif job.status == SyncJob.STATUS_PARTIAL:
                self.stdout.write(self.style.WARNING(line))
            else:
                self.stdout.write(self.style.SUCCESS(line))

        if failed:
            raise CommandError("One or more sync jobs failed; see the job log for details.")
