import math

import pandas as pd
from django.test import SimpleTestCase

from analyzer.exceptions import InvalidInput
from analyzer.services import bottleneck
from analyzer.services.bottleneck import BottleneckKind, analyze, analyze_models
from catalog.records import ComponentRecord
from catalog.services.catalog_store import Catalog


def cpu(score, model="Test CPU"):
    return ComponentRecord(category="CPU", model=model, benchmark=score)


def gpu(score, model="Test GPU"):
    return ComponentRecord(category="GPU", model=model, benchmark=score)


def ram(score, model="Test RAM"):
    return ComponentRecord(category="RAM", model=model, benchmark=score)


class TestAnalyze(SimpleTestCase):
    def test_cpu_bottleneck(self):
        verdict = analyze(cpu(100), gpu(200))
        self.assertIs(verdict.kind, BottleneckKind.CPU)
        self.assertEqual(verdict.component.model, "Test CPU")
        self.assertAlmostEqual(verdict.severity_percent, 50.0)
        self.assertTrue(verdict.is_bottleneck)

    def test_gpu_bottleneck(self):
        verdict = analyze(cpu(200), gpu(100))
        self.assertIs(verdict.kind, BottleneckKind.GPU)
        self.assertAlmostEqual(verdict.severity_percent, 50.0)

    def test_ram_bottleneck_when_cpu_gpu_balanced(self):
        verdict = analyze(cpu(150), gpu(160), ram(100))
        self.assertIs(verdict.kind, BottleneckKind.RAM)
        self.assertAlmostEqual(verdict.severity_percent, 210 / 310 * 100)
        self.assertAlmostEqual(verdict.severity_percent, 67.74, places=2)

    def test_cpu_gpu_gap_checked_before_ram(self):
        verdict = analyze(cpu(100), gpu(200), ram(1))
        self.assertIs(verdict.kind, BottleneckKind.CPU)

    def test_no_bottleneck(self):
        verdict = analyze(cpu(150), gpu(160), ram(300))
        self.assertIs(verdict.kind, BottleneckKind.NONE)
        self.assertIsNone(verdict.component)
        self.assertIsNone(verdict.severity_percent)
        self.assertEqual(verdict.message, "No significant bottleneck detected")
        self.assertFalse(verdict.is_bottleneck)

    def test_no_bottleneck_without_ram(self):
        verdict = analyze(cpu(150), gpu(160))
        self.assertIs(verdict.kind, BottleneckKind.NONE)

    def test_band_edges(self):
        # exactly 65% of the other part is not below the threshold
        self.assertIs(analyze(cpu(65), gpu(100)).kind, BottleneckKind.NONE)
        self.assertIs(analyze(cpu(64.9), gpu(100)).kind, BottleneckKind.CPU)
        self.assertIs(analyze(cpu(100), gpu(65)).kind, BottleneckKind.NONE)
        # RAM at exactly 80% of CPU+GPU is enough
        self.assertIs(analyze(cpu(100), gpu(100), ram(160)).kind, BottleneckKind.NONE)

    def test_zero_scores_never_divide(self):
        verdict = analyze(cpu(0), gpu(0))
        self.assertIs(verdict.kind, BottleneckKind.NONE)
        verdict = analyze(cpu(0), gpu(0), ram(0))
        self.assertIs(verdict.kind, BottleneckKind.NONE)

    def test_zero_gpu_blames_gpu(self):
        verdict = analyze(cpu(120), gpu(0))
        self.assertIs(verdict.kind, BottleneckKind.GPU)
        self.assertAlmostEqual(verdict.severity_percent, 100.0)

    def test_zero_cpu_blames_cpu(self):
        verdict = analyze(cpu(0), gpu(120))
        self.assertIs(verdict.kind, BottleneckKind.CPU)
        self.assertAlmostEqual(verdict.severity_percent, 100.0)

    def test_severity_is_finite_and_bounded(self):
        pairs = [(1, 1000), (1000, 1), (300, 310), (0.5, 0.9), (5000, 100)]
        for c, g in pairs:
            for r in (None, ram(0), ram(10), ram(c + g)):
                verdict = analyze(cpu(c), gpu(g), r)
                if verdict.is_bottleneck:
                    self.assertTrue(math.isfinite(verdict.severity_percent))
                    self.assertGreater(verdict.severity_percent, 0)
                    self.assertLessEqual(verdict.severity_percent, 100)

    def test_gpu_rule_matches_formula(self):
        for c, g in [(154, 100), (400, 120), (1000, 649)]:
            verdict = analyze(cpu(c), gpu(g))
            self.assertIs(verdict.kind, BottleneckKind.GPU)
            self.assertAlmostEqual(verdict.severity_percent, (c - g) / c * 100)

    def test_missing_parts_are_invalid_input(self):
        with self.assertRaises(InvalidInput):
            analyze(None, gpu(100))
        with self.assertRaises(InvalidInput):
            analyze(cpu(100), None)

    def test_parts_in_wrong_slot_are_invalid_input(self):
        with self.assertRaises(InvalidInput):
            analyze(gpu(100), gpu(100))
        with self.assertRaises(InvalidInput):
            analyze(cpu(100), gpu(100), cpu(50))

    def test_to_dict(self):
        data = analyze(cpu(100), gpu(200)).to_dict()
        self.assertEqual(data["bottleneck"], "CPU")
        self.assertEqual(data["details"]["model"], "Test CPU")
        self.assertAlmostEqual(data["bottleneck_pct"], 50.0)
        none = analyze(cpu(100), gpu(100)).to_dict()
        self.assertIsNone(none["bottleneck"])
        self.assertIsNone(none["details"])

    def test_constants(self):
        self.assertEqual(bottleneck.THRESHOLD, 0.35)
        self.assertEqual(bottleneck.RAM_CAPACITY_RATIO, 0.8)


class TestAnalyzeModels(SimpleTestCase):
    def setUp(self):
        self.catalog = Catalog().load(
            pd.DataFrame(
                {
                    "Type": ["CPU", "GPU", "RAM"],
                    "Model": ["Ryzen 5", "RTX 3060", "DDR4 3200"],
                    "Benchmark": [150, 160, 100],
                    "URL": ["", "", ""],
                }
            )
        )

    def test_resolves_names_case_insensitively(self):
        verdict = analyze_models(self.catalog, "RYZEN 5", "rtx 3060", "ddr4 3200")
        self.assertIs(verdict.kind, BottleneckKind.RAM)
        self.assertEqual(verdict.component.model, "DDR4 3200")

    def test_unknown_ram_is_ignored(self):
        verdict = analyze_models(self.catalog, "Ryzen 5", "RTX 3060", "DDR9")
        self.assertIs(verdict.kind, BottleneckKind.NONE)

    def test_missing_names(self):
        with self.assertRaisesMessage(InvalidInput, "Please provide CPU and GPU models"):
            analyze_models(self.catalog, "", "RTX 3060")
        with self.assertRaisesMessage(InvalidInput, "Please provide CPU and GPU models"):
            analyze_models(self.catalog, "Ryzen 5", None)

    def test_unknown_cpu_or_gpu(self):
        with self.assertRaisesMessage(InvalidInput, 'CPU model "Ryzen 9" not found'):
            analyze_models(self.catalog, "Ryzen 9", "RTX 3060")
        with self.assertRaisesMessage(InvalidInput, 'GPU model "RTX 9090" not found'):
            analyze_models(self.catalog, "Ryzen 5", "RTX 9090")
