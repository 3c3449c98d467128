import json
import tempfile
from io import StringIO
from pathlib import Path

from django.core.management import call_command
from django.core.management.base import CommandError
from django.test import SimpleTestCase, override_settings

COMPONENTS = """Type,Model,Benchmark,URL
CPU,Ryzen 5,100,
CPU,Ryzen 7,150,
GPU,RTX 3060,200,
GPU,RTX 3050,160,
RAM,DDR4 3200,100,
"""


class AnalyzeBuildCommandTests(SimpleTestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.data_dir = Path(self._tmp.name)
        (self.data_dir / "components.csv").write_text(COMPONENTS, encoding="utf-8")

    def run_command(self, *args, **kwargs):
        out = StringIO()
        err = StringIO()
        call_command("analyze_build", *args, stdout=out, stderr=err, **kwargs)
        return out.getvalue(), err.getvalue()

    def test_reports_cpu_bottleneck(self):
        out, _ = self.run_command(
            "--cpu", "ryzen 5", "--gpu", "RTX 3060", "--data-dir", str(self.data_dir)
        )
        self.assertIn("Bottleneck: CPU (Ryzen 5) 50.0%", out)

    def test_json_output_uses_configured_data_dir(self):
        with override_settings(COMPONENT_DATA_DIR=self.data_dir):
            out, _ = self.run_command(
                "--cpu", "Ryzen 7", "--gpu", "RTX 3050", "--ram", "DDR4 3200", "--json"
            )
        data = json.loads(out)
        self.assertEqual(data["bottleneck"], "RAM")
        self.assertAlmostEqual(data["bottleneck_pct"], 210 / 310 * 100)

    def test_no_bottleneck_message(self):
        out, _ = self.run_command(
            "--cpu", "Ryzen 7", "--gpu", "RTX 3050", "--data-dir", str(self.data_dir)
        )
        self.assertIn("No significant bottleneck detected", out)

    def test_unknown_model_is_command_error(self):
        with self.assertRaisesMessage(CommandError, 'GPU model "RTX 9090" not found'):
            self.run_command(
                "--cpu", "Ryzen 5", "--gpu", "RTX 9090", "--data-dir", str(self.data_dir)
            )

    def test_missing_data_is_command_error(self):
        with self.assertRaises(CommandError):
            self.run_command(
                "--cpu", "Ryzen 5",
                "--gpu", "RTX 3060",
                "--data-dir", str(self.data_dir / "missing.csv"),
            )


class ParseAssessmentCommandTests(SimpleTestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.reply = Path(self._tmp.name) / "reply.txt"

    def test_valid_reply(self):
        self.reply.write_text(
            'Sure! {"gpu_bottleneck": "yes", "recommendations": ["Upgrade GPU"]}',
            encoding="utf-8",
        )
        out = StringIO()
        err = StringIO()
        call_command("parse_assessment", str(self.reply), stdout=out, stderr=err)
        data = json.loads(out.getvalue())
        self.assertEqual(data["gpu_bottleneck"], "yes")
        self.assertEqual(data["recommendations"], ["Upgrade GPU"])
        self.assertIn("Flagged: gpu", err.getvalue())
        self.assertNotIn("Flagged", out.getvalue())

    def test_invalid_reply(self):
        self.reply.write_text("I cannot help with that.", encoding="utf-8")
        with self.assertRaisesMessage(CommandError, "Invalid assessment"):
            call_command("parse_assessment", str(self.reply), stdout=StringIO())
