import tempfile
from pathlib import Path

import pandas as pd
from django.test import SimpleTestCase

from catalog.exceptions import UnknownOptionAxis
from catalog.services.options import OPTIONS_LIST_LIMIT, OptionAxis, OptionLists


class OptionListsTests(SimpleTestCase):
    def setUp(self):
        self._tmp = tempfile.TemporaryDirectory()
        self.addCleanup(self._tmp.cleanup)
        self.options_dir = Path(self._tmp.name)
        self.write("cpu.csv", "CPU Name", ["Ryzen 5 5600X", "Core i5-12400F", ""])
        self.write("gpus.csv", "GPU Name", [f"GPU {i}" for i in range(350)])
        self.write("ram.csv", "RAM Name", ["16GB DDR4 3200"])
        self.write("resolutions.csv", "Resolution Name", ["1920x1080", "3840x2160"])
        # hdd.csv deliberately missing

    def write(self, name, column, values):
        lines = [column] + list(values)
        (self.options_dir / name).write_text("\n".join(lines) + "\n", encoding="utf-8")

    def test_axes_load_independently(self):
        lists = OptionLists().load(self.options_dir)
        self.assertTrue(lists.is_loaded)
        self.assertEqual(list(lists.list("cpus")), ["Ryzen 5 5600X", "Core i5-12400F"])
        self.assertEqual(lists.list(OptionAxis.STORAGE), ())
        self.assertIn(OptionAxis.STORAGE, lists.errors)
        self.assertEqual(set(lists.errors), {OptionAxis.STORAGE})

    def test_list_is_capped(self):
        lists = OptionLists().load(self.options_dir)
        self.assertEqual(len(lists.list("gpu")), OPTIONS_LIST_LIMIT)
        self.assertEqual(lists.list("gpu")[0], "GPU 0")
        self.assertEqual(len(lists.list("gpu", limit=None)), 350)
        self.assertEqual(len(lists.as_dict()["gpus"]), OPTIONS_LIST_LIMIT)

    def test_search_each_axis_uses_its_own_names(self):
        lists = OptionLists().load(self.options_dir)
        self.assertEqual(lists.search("resolutions", "2160"), ["3840x2160"])
        self.assertEqual(lists.search("cpus", "RYZEN"), ["Ryzen 5 5600X"])
        self.assertEqual(len(lists.search("gpus", "")), 350)
        self.assertEqual(lists.search("hdds", "ssd"), [])

    def test_wrong_column_recorded_per_axis(self):
        self.write("ram.csv", "Memory", ["16GB"])
        lists = OptionLists().load(self.options_dir)
        self.assertIn(OptionAxis.RAM, lists.errors)
        self.assertEqual(lists.list("rams"), ())
        self.assertEqual(len(lists.list("cpus")), 2)

    def test_custom_file_names(self):
        self.write("storage.csv", "HDD Name", ["Samsung 980 Pro"])
        lists = OptionLists().load(self.options_dir, files={"STORAGE": "storage.csv"})
        self.assertEqual(list(lists.list("storage")), ["Samsung 980 Pro"])

    def test_mapping_source(self):
        lists = OptionLists().load(
            {"gpus": pd.DataFrame({"GPU Name": ["RTX 4070", None, " RX 6600 "]})}
        )
        self.assertEqual(list(lists.list("gpus")), ["RTX 4070", "RX 6600"])
        self.assertEqual(len(lists.errors), 4)

    def test_line_with_extra_fields_keeps_rest_of_axis(self):
        self.write(
            "ram.csv",
            "RAM Name",
            ["16GB DDR4 3200", "Corsair 32GB, DDR5", "32GB DDR5 6000"],
        )
        lists = OptionLists().load(self.options_dir)
        self.assertEqual(list(lists.list("rams")), ["16GB DDR4 3200", "32GB DDR5 6000"])
        self.assertNotIn(OptionAxis.RAM, lists.errors)

    def test_unknown_mapping_key_is_recorded(self):
        lists = OptionLists().load(
            {
                "psus": pd.DataFrame({"PSU Name": ["RM850x"]}),
                "gpus": pd.DataFrame({"GPU Name": ["RTX 4070"]}),
            }
        )
        self.assertTrue(lists.is_loaded)
        self.assertEqual(list(lists.list("gpus")), ["RTX 4070"])
        self.assertIn("psus", lists.errors)

    def test_load_once(self):
        lists = OptionLists().load(self.options_dir)
        self.write("cpu.csv", "CPU Name", ["Other"])
        lists.load(self.options_dir)
        self.assertEqual(len(lists.list("cpus")), 2)

    def test_axis_parse(self):
        self.assertIs(OptionAxis.parse("HDDS"), OptionAxis.STORAGE)
        self.assertIs(OptionAxis.parse("resolution"), OptionAxis.RESOLUTION)
        self.assertEqual(OptionAxis.GPU.column, "GPU Name")
        with self.assertRaises(UnknownOptionAxis):
            OptionAxis.parse("psu")
