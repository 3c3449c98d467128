import json

from django.core.management.base import BaseCommand, CommandError

from catalog.conf import option_files, options_data_dir, options_list_limit
from catalog.exceptions import UnknownOptionAxis
from catalog.services.options import OptionAxis, OptionLists


class Command(BaseCommand):
    help = "Print picker option names (cpus, gpus, rams, hdds, resolutions)"

    def add_arguments(self, parser):
        parser.add_argument("--axis", help="Only this axis, e.g. gpus or resolutions")
        parser.add_argument("--search", help="Case-insensitive name substring")
        parser.add_argument("--limit", type=int, help="Maximum names per axis")
        parser.add_argument(
            "--options-dir",
            help="Directory of option CSVs (defaults to OPTIONS_DATA_DIR)",
        )
        parser.add_argument("--json", action="store_true")

    def handle(self, *args, **options):
        axis = None
        if options.get("axis"):
            try:
                axis = OptionAxis.parse(options["axis"])
            except UnknownOptionAxis as exc:
                raise CommandError(str(exc))
        if options.get("limit") is not None and options["limit"] < 0:
            raise CommandError("--limit must be zero or more")

        lists = OptionLists()
        lists.load(options.get("options_dir") or options_data_dir(), files=option_files())
        for failed, message in lists.errors.items():
            # unrecognized mapping keys are recorded under the raw key
            label = failed.key if isinstance(failed, OptionAxis) else failed
            self.stderr.write(
                self.style.WARNING(f"Error loading {label} names: {message}")
            )

        limit = options["limit"] if options.get("limit") is not None else options_list_limit()
        axes = [axis] if axis else list(OptionAxis)
        result = {}
        for current in axes:
            if options.get("search") is not None:
                result[current.key] = lists.search(current, options["search"])[:limit]
            else:
                result[current.key] = list(lists.list(current, limit))

        if options["json"]:
            self.stdout.write(json.dumps(result, indent=2))
            return

        for key, names in result.items():
            self.stdout.write(self.style.MIGRATE_HEADING(f"{key} ({len(names)})"))
            for name in names:
                self.stdout.write(f"  {name}")
