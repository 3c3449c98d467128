import json
import sys

from django.core.management.base import BaseCommand, CommandError

from analyzer.exceptions import ParseError
from analyzer.services.assessment import parse_assessment


class Command(BaseCommand):
    help = "Validate a saved AI build assessment reply and print it as JSON"

    def add_arguments(self, parser):
        parser.add_argument("path", help="File holding the reply text, or - for stdin")

    def handle(self, *args, **options):
        path = options["path"]
        try:
            if path == "-":
                text = sys.stdin.read()
            else:
                with open(path, encoding="utf-8") as f:
                    text = f.read()
        except OSError as exc:
            raise CommandError(f"Cannot read {path}: {exc}")

        try:
            assessment = parse_assessment(text)
        except ParseError as exc:
            raise CommandError(f"Invalid assessment: {exc}")

        self.stdout.write(json.dumps(assessment.to_dict(), indent=2))
        flagged = assessment.flagged()
        if flagged:
            self.stderr.write(self.style.WARNING("Flagged: " + ", ".join(flagged)))
        else:
            self.stderr.write(self.style.SUCCESS("No bottlenecks flagged"))
