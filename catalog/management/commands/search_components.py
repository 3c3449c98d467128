import json

from django.core.management.base import BaseCommand, CommandError

from catalog.conf import component_data_dir
from catalog.exceptions import LoadError, UnknownCategory
from catalog.records import Category
from catalog.services.catalog_store import Catalog


class Command(BaseCommand):
    help = "List or search catalog components of one type"

    def add_arguments(self, parser):
        parser.add_argument("--type", required=True, help="cpu, gpu or ram")
        parser.add_argument("--search", default="", help="Case-insensitive model substring")
        parser.add_argument(
            "--data-dir",
            help="Directory of benchmark CSVs (defaults to COMPONENT_DATA_DIR)",
        )
        parser.add_argument("--json", action="store_true")

    def handle(self, *args, **options):
        try:
            category = Category.parse(options["type"])
        except UnknownCategory as exc:
            raise CommandError(str(exc))

        catalog = Catalog()
        try:
            catalog.load(options.get("data_dir") or component_data_dir())
        except LoadError as exc:
            raise CommandError(str(exc))
        for label, message in catalog.errors.items():
            self.stderr.write(self.style.WARNING(f"{label} skipped: {message}"))

        components = catalog.search(category, options["search"])

        if options["json"]:
            self.stdout.write(json.dumps([c.to_dict() for c in components], indent=2))
            return

        for component in components:
            self.stdout.write(f"{component.model}\t{component.benchmark:g}")
        self.stdout.write(
            self.style.SUCCESS(f"{len(components)} {category.value} component(s)")
        )
