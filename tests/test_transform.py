"""Tests for matrix transform extraction."""

from __future__ import annotations

import unittest

from matrixdiag.topology.context import ExtractionContext
from matrixdiag.topology.models import MatrixEntry
from matrixdiag.topology.shields import resolve_shields
from matrixdiag.topology.transform import extract_matrix_transform, parse_rc_map
from tests.corpus_fixture import make_tiny_sources


def _context(files: dict[str, str], shields: tuple[str, ...] = ()) -> ExtractionContext:
    ctx = ExtractionContext.from_sources(files)
    for name in shields:
        ctx.shields.append(name)
        ctx.bucket(name)
    return ctx


class TestParseRcMap(unittest.TestCase):

    def test_entries_in_order(self):
        self.assertEqual(
            parse_rc_map("RC(0,0) RC( 1 , 12 )\nRC(3,4)"),
            [MatrixEntry(0, 0), MatrixEntry(1, 12), MatrixEntry(3, 4)],
        )

    def test_other_tokens_ignored(self):
        self.assertEqual(parse_rc_map("&kp A RC(0,1) 42"), [MatrixEntry(0, 1)])


class TestExtractMatrixTransform(unittest.TestCase):

    def test_fixture(self):
        ctx = ExtractionContext.from_sources(make_tiny_sources())
        resolve_shields(ctx)
        entries = extract_matrix_transform(ctx)
        self.assertEqual(len(entries), 12)
        self.assertEqual(entries[3], MatrixEntry(0, 3))
        self.assertEqual(entries[11], MatrixEntry(1, 5))
        self.assertEqual(ctx.buckets["tiny_right"].col_offset, 3)
        self.assertEqual(ctx.buckets["tiny_left"].col_offset, 0)

    def test_longest_map_wins(self):
        ctx = _context({
            "a.dtsi": "t0 { map = <RC(0,0) RC(0,1)>; };",
            "b.dtsi": "t1 { map = <RC(0,0) RC(0,1) RC(0,2)>; };",
            "c.dtsi": "t2 { map = <RC(0,0)>; };",
        })
        self.assertEqual(len(extract_matrix_transform(ctx)), 3)
        self.assertEqual(len(ctx.matrix_map), 3)

    def test_tie_keeps_earlier_file(self):
        ctx = _context({
            "b.dtsi": "map = <RC(5,5) RC(5,6)>;",
            "a.dtsi": "map = <RC(0,0) RC(0,1)>;",
        })
        self.assertEqual(extract_matrix_transform(ctx)[0], MatrixEntry(0, 0))

    def test_non_cell_map_ignored(self):
        ctx = _context({"a.dtsi": 'map = "RC(0,0)";'})
        self.assertEqual(extract_matrix_transform(ctx), [])

    def test_offsets_recorded_for_owned_files(self):
        ctx = _context({
            "corne_right.overlay": "&t { col-offset = <6>; row-offset = <1>; };",
            "corne.dtsi": "&t { col-offset = <3>; };",
        }, ("corne_left", "corne_right"))
        extract_matrix_transform(ctx)
        right = ctx.buckets["corne_right"]
        self.assertEqual((right.col_offset, right.row_offset), (6, 1))
        left = ctx.buckets["corne_left"]
        self.assertEqual((left.col_offset, left.row_offset), (0, 0))

    def test_malformed_offset_ignored(self):
        ctx = _context({
            "corne_right.overlay": "&t { col-offset = <FOO>; };",
        }, ("corne_right",))
        extract_matrix_transform(ctx)
        self.assertEqual(ctx.buckets["corne_right"].col_offset, 0)


if __name__ == "__main__":
    unittest.main()
