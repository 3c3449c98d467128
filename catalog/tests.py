import tempfile
import threading
from pathlib import Path
from unittest import mock

import pandas as pd
from django.test import SimpleTestCase

from catalog.exceptions import LoadError, UnknownCategory
from catalog.records import Category, ComponentRecord
from catalog.services import catalog_store
from catalog.services.catalog_store import Catalog
from catalog.services.loading import LoadState

COMBINED_CSV = """Type,Model,Benchmark,URL
CPU,Ryzen 5,100,https://example.com/r5
cpu,Core i5,95.5,
Gpu,RTX 3060,150,https://example.com/3060
GPU,RX 6600,not-a-number,https://example.com/6600
RAM,DDR4 3200,"1,200",
RAM,DDR5 6000,-3,
CPU,,80,
SSD,Samsung 980,90,
CPU,ryzen 5,70,https://example.com/dup
"""


class CatalogTestBase(SimpleTestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.data_dir = Path(self._tmp.name)

    def write_csv(self, name, text):
        path = self.data_dir / name
        path.write_text(text, encoding="utf-8")
        return path


class TestComponentRecord(SimpleTestCase):
    def test_category_is_normalized(self):
        record = ComponentRecord(category="gpu", model=" RTX 4070 ", benchmark="196")
        self.assertIs(record.category, Category.GPU)
        self.assertEqual(record.model, "RTX 4070")
        self.assertEqual(record.benchmark, 196.0)
        self.assertIsNone(record.url)

    def test_rejects_negative_and_empty(self):
        with self.assertRaises(ValueError):
            ComponentRecord(category="CPU", model="X", benchmark=-1)
        with self.assertRaises(ValueError):
            ComponentRecord(category="CPU", model="  ", benchmark=1)
        with self.assertRaises(UnknownCategory):
            ComponentRecord(category="PSU", model="X", benchmark=1)

    def test_category_parse(self):
        self.assertIs(Category.parse("Cpu"), Category.CPU)
        self.assertIs(Category.parse(Category.RAM), Category.RAM)
        self.assertEqual(Category.GPU.plural, "gpus")


class TestCatalogLoad(CatalogTestBase):
    def setUp(self):
        super().setUp()
        self.write_csv("components.csv", COMBINED_CSV)
        self.catalog = Catalog().load(self.data_dir)

    def test_rows_are_categorized_and_malformed_rows_dropped(self):
        self.assertTrue(self.catalog.is_loaded)
        self.assertEqual(
            [r.model for r in self.catalog.list("CPU")],
            ["Ryzen 5", "Core i5", "ryzen 5"],
        )
        self.assertEqual([r.model for r in self.catalog.list("GPU")], ["RTX 3060"])
        self.assertEqual([r.model for r in self.catalog.list("RAM")], ["DDR4 3200"])
        self.assertEqual(self.catalog.list("RAM")[0].benchmark, 1200.0)
        self.assertEqual(len(self.catalog), 5)

    def test_url_passthrough(self):
        self.assertEqual(
            self.catalog.get("CPU", "Ryzen 5").url, "https://example.com/r5"
        )
        self.assertIsNone(self.catalog.get("CPU", "Core i5").url)

    def test_get_is_case_insensitive_and_first_match_wins(self):
        first = self.catalog.get("CPU", "ryzen 5")
        second = self.catalog.get("cpu", "RYZEN 5")
        self.assertIs(first, second)
        self.assertEqual(first.benchmark, 100.0)

    def test_get_miss_returns_none(self):
        self.assertIsNone(self.catalog.get("GPU", "RTX 9999"))
        self.assertIsNone(self.catalog.get("GPU", ""))

    def test_unknown_category_raises(self):
        with self.assertRaises(UnknownCategory):
            self.catalog.list("psu")

    def test_search_substring_in_order(self):
        self.assertEqual(
            [r.model for r in self.catalog.search("cpu", "RYZEN")],
            ["Ryzen 5", "ryzen 5"],
        )
        self.assertEqual(self.catalog.search("gpu", "radeon"), [])

    def test_search_matches_category_label(self):
        self.assertEqual(
            self.catalog.search("CPU", "cp"), list(self.catalog.list("CPU"))
        )

    def test_empty_search_returns_full_list(self):
        for category in Category:
            self.assertEqual(
                self.catalog.search(category, ""), list(self.catalog.list(category))
            )

    def test_second_load_is_noop(self):
        before = {c: self.catalog.list(c) for c in Category}
        self.write_csv("more.csv", "Type,Model,Benchmark,URL\nGPU,RTX 4090,336,\n")
        self.catalog.load(self.data_dir)
        after = {c: self.catalog.list(c) for c in Category}
        self.assertEqual(before, after)

    def test_as_dict(self):
        data = self.catalog.as_dict()
        self.assertEqual(set(data), {"cpus", "gpus", "rams"})
        self.assertEqual(data["gpus"][0]["model"], "RTX 3060")
        self.assertEqual(data["gpus"][0]["type"], "GPU")


class TestCatalogSources(CatalogTestBase):
    def test_empty_catalog_before_load(self):
        catalog = Catalog()
        self.assertIs(catalog.state, LoadState.EMPTY)
        self.assertEqual(catalog.list("CPU"), ())
        self.assertEqual(catalog.search("CPU", ""), [])
        self.assertIsNone(catalog.get("CPU", "Ryzen 5"))

    def test_missing_file_raises_load_error_and_allows_retry(self):
        catalog = Catalog()
        with self.assertRaises(LoadError):
            catalog.load(self.data_dir / "missing.csv")
        self.assertIs(catalog.state, LoadState.EMPTY)

        path = self.write_csv("ok.csv", "Type,Model,Benchmark,URL\nCPU,Ryzen 5,100,\n")
        catalog.load(path)
        self.assertTrue(catalog.is_loaded)
        self.assertEqual(len(catalog), 1)

    def test_single_table_missing_column_raises(self):
        path = self.write_csv("bad.csv", "Type,Name,Score\nCPU,Ryzen 5,100\n")
        with self.assertRaises(LoadError):
            Catalog().load(path)

    def test_broken_table_does_not_block_siblings(self):
        self.write_csv("a_bad.csv", "Kind,Name\nCPU,Ryzen 5\n")
        self.write_csv("b_good.csv", "Type,Model,Benchmark,URL\nGPU,RTX 3060,150,\n")
        catalog = Catalog().load(self.data_dir)
        self.assertEqual([r.model for r in catalog.list("GPU")], ["RTX 3060"])
        self.assertIn("a_bad.csv", catalog.errors)
        self.assertNotIn("b_good.csv", catalog.errors)

    def test_mapping_of_tables_per_category(self):
        cpus = pd.DataFrame({"Model": ["Ryzen 5", "Core i5"], "Benchmark": [100, "x"]})
        gpus = self.write_csv(
            "gpus.csv", "Type,Model,Benchmark,URL\n,RTX 3060,150,\n"
        )
        catalog = Catalog().load(
            {"cpu": cpus, "GPU": gpus, "ram": self.data_dir / "nope.csv"}
        )
        self.assertEqual([r.model for r in catalog.list("CPU")], ["Ryzen 5"])
        self.assertEqual([r.model for r in catalog.list("GPU")], ["RTX 3060"])
        self.assertEqual(catalog.list("RAM"), ())
        self.assertIn("RAM", catalog.errors)

    def test_line_with_extra_fields_is_dropped_from_single_file(self):
        path = self.write_csv(
            "components.csv",
            "Type,Model,Benchmark,URL\n"
            "CPU,Ryzen 5,100,\n"
            "CPU,Core i5, 12th gen,95,,\n"
            "GPU,RTX 3060,150,\n",
        )
        catalog = Catalog().load(path)
        self.assertEqual([r.model for r in catalog.list("CPU")], ["Ryzen 5"])
        self.assertEqual([r.model for r in catalog.list("GPU")], ["RTX 3060"])
        self.assertEqual(catalog.errors, {})

    def test_line_with_extra_fields_keeps_rest_of_directory_table(self):
        self.write_csv(
            "components.csv",
            "Type,Model,Benchmark,URL\n"
            "CPU,Core i5, 12th gen,95,,\n"
            "CPU,Ryzen 5,100,\n"
            "RAM,DDR4 3200,90,\n",
        )
        with self.assertLogs("catalog.services.catalog_store", level="WARNING") as logs:
            catalog = Catalog().load(self.data_dir)
        self.assertEqual(len(catalog), 2)
        self.assertNotIn("components.csv", catalog.errors)
        self.assertTrue(any("dropped 1 malformed row" in line for line in logs.output))

    def test_unknown_mapping_key_is_recorded(self):
        cpus = pd.DataFrame({"Model": ["Ryzen 5"], "Benchmark": [100]})
        psus = pd.DataFrame({"Model": ["RM850x"], "Benchmark": [10]})
        catalog = Catalog().load({"psu": psus, "cpu": cpus})
        self.assertTrue(catalog.is_loaded)
        self.assertEqual([r.model for r in catalog.list("CPU")], ["Ryzen 5"])
        self.assertIn("psu", catalog.errors)

    def test_dataframe_source(self):
        df = pd.DataFrame(
            {
                "Type": ["CPU", "GPU", "RAM"],
                "Model": ["Ryzen 5", "RTX 3060", None],
                "Benchmark": [100.0, 150.0, 90.0],
            }
        )
        catalog = Catalog().load(df)
        self.assertEqual(len(catalog), 2)
        self.assertIsNone(catalog.get("GPU", "rtx 3060").url)

    def test_concurrent_loads_ingest_once(self):
        self.write_csv("components.csv", COMBINED_CSV)
        catalog = Catalog()
        barrier = threading.Barrier(8)
        results = []

        real_tables = catalog_store._tables
        with mock.patch.object(
            catalog_store, "_tables", side_effect=real_tables
        ) as tables:

            def worker():
                barrier.wait()
                catalog.load(self.data_dir)
                results.append(len(catalog.list("CPU")))

            threads = [threading.Thread(target=worker) for _ in range(8)]
            for t in threads:
                t.start()
            for t in threads:
                t.join()

        self.assertEqual(tables.call_count, 1)
        self.assertEqual(results, [3] * 8)
