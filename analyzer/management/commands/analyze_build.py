import json

from django.core.management.base import BaseCommand, CommandError

from analyzer.exceptions import InvalidInput
from analyzer.services.bottleneck import analyze_models
from catalog.conf import component_data_dir
from catalog.exceptions import LoadError
from catalog.services.catalog_store import Catalog


class Command(BaseCommand):
    help = "Report which of CPU, GPU or RAM bottlenecks a build"

    def add_arguments(self, parser):
        parser.add_argument("--cpu", required=True, help="CPU model name")
        parser.add_argument("--gpu", required=True, help="GPU model name")
        parser.add_argument("--ram", help="RAM model name (optional)")
        parser.add_argument(
            "--data-dir",
            help="Directory of benchmark CSVs (defaults to COMPONENT_DATA_DIR)",
        )
        parser.add_argument("--json", action="store_true", help="Print the verdict as JSON")

    def handle(self, *args, **options):
        catalog = Catalog()
        try:
            catalog.load(options.get("data_dir") or component_data_dir())
        except LoadError as exc:
            raise CommandError(str(exc))
        for label, message in catalog.errors.items():
            self.stderr.write(self.style.WARNING(f"{label} skipped: {message}"))

        try:
            verdict = analyze_models(
                catalog, options["cpu"], options["gpu"], options.get("ram")
            )
        except InvalidInput as exc:
            raise CommandError(str(exc))

        if options["json"]:
            self.stdout.write(json.dumps(verdict.to_dict(), indent=2))
            return

        if not verdict.is_bottleneck:
            self.stdout.write(self.style.SUCCESS(verdict.message))
            return

        self.stdout.write(
            self.style.WARNING(
                "Bottleneck: {} ({}) {:.1f}%".format(
                    verdict.kind.value,
                    verdict.component.model,
                    verdict.severity_percent,
                )
            )
        )
