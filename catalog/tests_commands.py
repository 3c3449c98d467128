import json
import tempfile
from io import StringIO
from pathlib import Path

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import SimpleTestCase, override_settings


class CatalogCommandTests(SimpleTestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.data_dir = Path(self._tmp.name)
        (self.data_dir / "components.csv").write_text(
            "Type,Model,Benchmark,URL\n"
            "GPU,RTX 3060,150,\n"
            "GPU,RX 6600,95.7,\n"
            "GPU,RTX 4090,bad,\n",
            encoding="utf-8",
        )
        options_dir = self.data_dir / "options"
        options_dir.mkdir()
        (options_dir / "gpus.csv").write_text(
            "GPU Name\nRTX 3060\nRX 6600\n", encoding="utf-8"
        )
        (options_dir / "resolutions.csv").write_text(
            "Resolution Name\n1920x1080\n2560x1440\n", encoding="utf-8"
        )
        self.options_dir = options_dir

    def test_search_components(self):
        out = StringIO()
        call_command(
            "search_components",
            "--type", "gpu",
            "--search", "rtx",
            "--data-dir", str(self.data_dir),
            "--json",
            stdout=out,
        )
        data = json.loads(out.getvalue())
        self.assertEqual([c["model"] for c in data], ["RTX 3060"])

    def test_search_components_lists_all(self):
        out = StringIO()
        with override_settings(COMPONENT_DATA_DIR=self.data_dir):
            call_command("search_components", "--type", "GPU", stdout=out)
        self.assertIn("2 GPU component(s)", out.getvalue())

    def test_search_components_bad_type(self):
        with self.assertRaises(CommandError):
            call_command("search_components", "--type", "psu", stdout=StringIO())

    def test_list_options_reports_missing_axes(self):
        out = StringIO()
        err = StringIO()
        with override_settings(OPTIONS_DATA_DIR=self.options_dir):
            call_command("list_options", "--json", stdout=out, stderr=err)
        data = json.loads(out.getvalue())
        self.assertEqual(data["gpus"], ["RTX 3060", "RX 6600"])
        self.assertEqual(data["cpus"], [])
        self.assertIn("Error loading cpus names", err.getvalue())

    def test_list_options_search_one_axis(self):
        out = StringIO()
        call_command(
            "list_options",
            "--axis", "resolutions",
            "--search", "1440",
            "--options-dir", str(self.options_dir),
            "--json",
            stdout=out,
            stderr=StringIO(),
        )
        self.assertEqual(json.loads(out.getvalue()), {"resolutions": ["2560x1440"]})

    def test_list_options_rejects_negative_limit(self):
        with self.assertRaisesMessage(CommandError, "--limit must be zero or more"):
            call_command(
                "list_options",
                "--search", "",
                "--limit", "-1",
                "--options-dir", str(self.options_dir),
                stdout=StringIO(),
                stderr=StringIO(),
            )

    def test_list_options_search_respects_limit(self):
        out = StringIO()
        call_command(
            "list_options",
            "--axis", "gpus",
            "--search", "",
            "--limit", "1",
            "--options-dir", str(self.options_dir),
            "--json",
            stdout=out,
            stderr=StringIO(),
        )
        self.assertEqual(json.loads(out.getvalue()), {"gpus": ["RTX 3060"]})
