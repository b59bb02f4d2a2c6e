"""Tests for offset → line/column conversion."""

from __future__ import annotations

from minicompiler.locator import locate

SOURCE = "int x;\nint main() {\n  return x;\n}\n"


class TestLocate:
    def test_offset_zero_is_first_line_first_column(self):
        point = locate(SOURCE, 0)
        assert (point.line, point.column) == (1, 0)

    def test_offset_on_later_line(self):
        offset = SOURCE.index("return")
        point = locate(SOURCE, offset)
        assert (point.line, point.column) == (3, 2)

    def test_offset_of_newline_stays_on_its_line(self):
        point = locate(SOURCE, SOURCE.index("\n"))
        assert (point.line, point.column) == (1, 6)

    def test_line_is_one_plus_newline_count(self):
        for offset in range(len(SOURCE) + 1):
            assert locate(SOURCE, offset).line == 1 + SOURCE[:offset].count("\n")

    def test_out_of_range_offsets_are_clamped(self):
        assert locate(SOURCE, -5) == locate(SOURCE, 0)
        assert locate(SOURCE, 10_000) == locate(SOURCE, len(SOURCE))

    def test_empty_source(self):
        point = locate("", 0)
        assert (point.line, point.column) == (1, 0)
