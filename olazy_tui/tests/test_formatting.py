from __future__ import annotations

import unittest
from pathlib import Path
import sys

sys.path.insert(0, str(Path(__file__).resolve().parents[2]))

from olazy_tui.formatting import NAME_COLUMN_WIDTH, format_size, model_line  # noqa: E402
from olazy_tui.models import StatusLog  # noqa: E402


class FormatSizeTests(unittest.TestCase):
    def test_non_positive_is_dash(self):
        for n in (0, -1, -1024, -(2**63)):
            self.assertEqual(format_size(n), "-")

    def test_raw_bytes(self):
        self.assertEqual(format_size(1), "1 B")
        self.assertEqual(format_size(1023), "1023 B")

    def test_unit_boundaries(self):
        self.assertEqual(format_size(1024), "1.00 KiB")
        self.assertEqual(format_size(1048575), "1024.00 KiB")
        self.assertEqual(format_size(1048576), "1.00 MiB")
        self.assertEqual(format_size(1073741824), "1.00 GiB")

    def test_two_decimals(self):
        self.assertEqual(format_size(1536), "1.50 KiB")
        self.assertEqual(format_size(3825819519), "3.56 GiB")

    def test_largest_int64(self):
        self.assertEqual(format_size(2**63 - 1), "8589934592.00 GiB")


class ModelLineTests(unittest.TestCase):
    def test_sizeless_model_is_name_only(self):
        self.assertEqual(model_line("llama2:7b", 0), "llama2:7b")

    def test_sized_model_is_padded(self):
        line = model_line("llama2:7b", 1073741824)
        self.assertEqual(line, "llama2:7b".ljust(NAME_COLUMN_WIDTH) + "  1.00 GiB")


class StatusLogTests(unittest.TestCase):
    def test_keeps_last_five_in_order(self):
        log = StatusLog()
        for i in range(8):
            log.append(f"msg {i}")
        self.assertEqual(log.lines(), ["msg 3", "msg 4", "msg 5", "msg 6", "msg 7"])
        self.assertEqual(log.joined(), "msg 3 | msg 4 | msg 5 | msg 6 | msg 7")

    def test_empty_log_joins_to_empty_string(self):
        self.assertEqual(StatusLog().joined(), "")


if __name__ == "__main__":
    unittest.main()
