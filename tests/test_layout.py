"""Tests for physical layout extraction."""

from __future__ import annotations

import unittest

from matrixdiag.topology.context import ExtractionContext
from matrixdiag.topology.layout import extract_physical_layout, parse_key_attrs
from matrixdiag.topology import build_topology
from matrixdiag.topology.models import PhysicalKey
from tests.corpus_fixture import make_tiny_sources


def _layout_node(label: str, n: int) -> str:
    keys = "\n".join(
        f"  , <&key_physical_attrs 100 100 {i * 100} 0 0 0 0>" for i in range(n)
    ).replace("  , ", "    ", 1)
    return (
        f"{label}: {label}_node {{\n"
        f'  compatible = "zmk,physical-layout";\n'
        f"  keys = {keys}\n  ;\n"
        "};\n"
    )


class TestParseKeyAttrs(unittest.TestCase):

    def test_unrotated_key(self):
        keys = parse_key_attrs("<&key_physical_attrs 150 100 225 75 0 0 0>")
        self.assertEqual(keys, [PhysicalKey(w=1.5, h=1, x=2.25, y=0.75)])

    def test_negative_rotation_in_parentheses(self):
        (key,) = parse_key_attrs("&key_physical_attrs 100 100 0 0 (-9000) 50 50")
        self.assertAlmostEqual(key.r, -90.0)
        self.assertAlmostEqual(key.rx, 0.5)
        self.assertAlmostEqual(key.ry, 0.5)

    def test_positive_rotation(self):
        (key,) = parse_key_attrs("&key_physical_attrs 100 100 700 300 1500 750 350")
        self.assertAlmostEqual(key.r, 15.0)
        self.assertAlmostEqual(key.rx, 7.5)

    def test_malformed_records_skipped(self):
        block = (
            "&key_physical_attrs 100 100 0 0 0 0 0, "
            "&key_physical_attrs 100 100, "
            "&key_physical_attrs 100 100 200 0 0 0 0"
        )
        keys = parse_key_attrs(block)
        self.assertEqual(len(keys), 2)
        self.assertEqual(keys[1].x, 2.0)


class TestExtractPhysicalLayout(unittest.TestCase):

    def test_fixture_key_count(self):
        ctx = ExtractionContext.from_sources(make_tiny_sources())
        keys = extract_physical_layout(ctx)
        self.assertEqual(len(keys), 12)
        self.assertEqual(ctx.physical_keys, keys)
        self.assertEqual(keys[3].x, 4.0)
        self.assertAlmostEqual(keys[11].r, -10.0)
        self.assertAlmostEqual(keys[11].rx, 6.5)
        self.assertAlmostEqual(keys[11].ry, 1.5)

    def test_chosen_label_preferred_over_first_compatible(self):
        ctx = ExtractionContext.from_sources({
            "a_alt.dtsi": "/ {\n" + _layout_node("alt", 1) + "};\n",
            "b_main.dtsi": "/ {\n" + _layout_node("main", 3) + "};\n",
            "c.dtsi": "/ { chosen { zmk,physical-layout = &main; }; };\n",
        })
        self.assertEqual(len(extract_physical_layout(ctx)), 3)

    def test_compatible_fallback_without_chosen(self):
        ctx = ExtractionContext.from_sources({
            "board.dtsi": "/ {\n" + _layout_node("only", 4) + "};\n",
        })
        self.assertEqual(len(extract_physical_layout(ctx)), 4)

    def test_chosen_node_without_keys_falls_back(self):
        ctx = ExtractionContext.from_sources({
            "a.dtsi": (
                "/ {\n"
                "  chosen { zmk,physical-layout = &empty; };\n"
                '  empty: empty_layout { compatible = "zmk,physical-layout"; };\n'
                + _layout_node("full", 2) +
                "};\n"
            ),
        })
        self.assertEqual(len(extract_physical_layout(ctx)), 2)

    def test_nearest_following_keys(self):
        ctx = ExtractionContext.from_sources({
            "a.dtsi": (
                '/ { layout { compatible = "zmk,physical-layout"; }; };\n'
                "keys = <&key_physical_attrs 100 100 0 0 0 0 0>;\n"
            ),
        })
        self.assertEqual(len(extract_physical_layout(ctx)), 1)

    def test_chosen_node_keys_in_override(self):
        ctx = ExtractionContext.from_sources({
            "build.yaml": "include:\n  - board: nice_nano_v2\n    shield: kb\n",
            "kb.dtsi": (
                "/ {\n"
                "    chosen { zmk,physical-layout = &physical_layout0; };\n"
                "    physical_layout0: physical_layout_0 {\n"
                '        compatible = "zmk,physical-layout";\n'
                '        display-name = "Default";\n'
                "    };\n"
                "};\n"
            ),
            "kb.keymap": (
                "&physical_layout0 {\n"
                "    keys\n"
                "        = <&key_physical_attrs 100 100   0 0 0 0 0>\n"
                "        , <&key_physical_attrs 100 100 100 0 0 0 0>\n"
                "        ;\n"
                "};\n"
            ),
        })
        keys = extract_physical_layout(ctx)
        self.assertEqual(len(keys), 2)
        self.assertEqual(keys[1].x, 1.0)

    def test_compatible_node_keys_in_override(self):
        keys = ", ".join(
            f"<&key_physical_attrs 100 100 {i * 100} 0 0 0 0>" for i in range(3)
        )
        ctx = ExtractionContext.from_sources({
            "a.dtsi": '/ { layout0: layout_0 { compatible = "zmk,physical-layout"; }; };\n',
            "b.overlay": (
                "&other { keys = <&key_physical_attrs 100 100 0 0 0 0 0>; };\n"
                f"&layout0 {{ keys = {keys}; }};\n"
            ),
        })
        self.assertEqual(len(extract_physical_layout(ctx)), 3)

    def test_split_layout_builds(self):
        sources = make_tiny_sources()
        dtsi = "config/boards/shields/tiny/tiny.dtsi"
        head, rest = sources[dtsi].split("        keys  //", 1)
        keys_block, tail = rest.split(";\n", 1)
        sources[dtsi] = head + tail
        sources["config/tiny_layout.dtsi"] = (
            "&tiny_layout {\n    keys //" + keys_block + ";\n};\n"
        )
        self.assertEqual(len(build_topology(sources).physical_keys), 12)

    def test_no_layout(self):
        ctx = ExtractionContext.from_sources({"a.keymap": "/ { keymap { }; };"})
        with self.assertLogs("matrixdiag.topology.layout", level="WARNING"):
            self.assertEqual(extract_physical_layout(ctx), [])
        self.assertEqual(ctx.physical_keys, [])


if __name__ == "__main__":
    unittest.main()
