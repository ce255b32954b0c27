"""Tests for report text and report serialization."""

from __future__ import annotations

import json
import unittest

from matrixdiag.diagnosis import (
    FailureReport, describe_report, parse_reports, render_reports, reports_to_dict,
)
from matrixdiag.diagnosis.models import (
    CHARLIE, COL, DIRECT, DIRECT_GND, INTERRUPT, ROW, SINGLE, ROLE_IN, ROLE_OUT,
)
from matrixdiag.reference import KeyInfo, PinInfo, ReferenceDatabase


DB = ReferenceDatabase(
    pins={
        "corne_left_pro_micro 4": PinInfo(silk="D4"),
        "Left_xiao_d 0": PinInfo(silk="D0", line_diode="D12", interrupt_diode="D30"),
    },
    keys=[KeyInfo(matrix=(0, 3), silk_sw="SW4", silk_d="D104")],
)


class TestDescribeReport(unittest.TestCase):

    def test_row_with_silk_label(self):
        r = FailureReport(type=ROW, shield="corne_left", key_indices=[0, 1, 2],
                          pin="pro_micro 4", row=0)
        text = describe_report(r, DB)
        self.assertEqual(text.title, "Whole row not responding - corne_left")
        self.assertEqual(text.summary, "Row 0, pin D4")
        self.assertEqual(text.causes, ["Solder joint of controller pin D4"])

    def test_column_without_database(self):
        r = FailureReport(type=COL, shield="corne_left", key_indices=[0, 6],
                          pin="pro_micro 21", col=0)
        text = describe_report(r)
        self.assertEqual(text.summary, "Column 0, pin pro_micro 21")

    def test_unknown_pin(self):
        r = FailureReport(type=ROW, shield="kb", key_indices=[2, 3], row=1)
        self.assertIn("unknown pin", describe_report(r).summary)

    def test_charlie_input_names_diodes(self):
        r = FailureReport(type=CHARLIE, shield="charlie_left", key_indices=[0, 1],
                          pin="xiao_d 0", role=ROLE_IN, pin_index=0)
        text = describe_report(r, DB)
        self.assertIn("Line diode D12", text.causes)
        self.assertIn("Interrupt diode D30", text.causes)
        self.assertIn("D0", text.summary)

    def test_charlie_output_blames_joint_only(self):
        r = FailureReport(type=CHARLIE, shield="charlie", key_indices=[3, 4],
                          pin="xiao_d 0", role=ROLE_OUT, pin_index=0)
        (cause,) = describe_report(r).causes
        self.assertIn("driving side", cause)

    def test_single_with_key_labels(self):
        r = FailureReport(type=SINGLE, shield="corne_right", key_indices=[3], row=0, col=3)
        self.assertEqual(describe_report(r, DB).causes, ["Switch SW4", "Diode D104"])

    def test_other_types(self):
        for kind in (DIRECT, DIRECT_GND, INTERRUPT):
            r = FailureReport(type=kind, shield="kb", key_indices=[0], pin="gpio0 1")
            text = describe_report(r)
            self.assertTrue(text.title.endswith("- kb"), kind)
            self.assertTrue(text.causes, kind)


class TestRenderReports(unittest.TestCase):

    def test_empty(self):
        self.assertEqual(render_reports([]),
                         "No failure pattern found for the selected keys.")

    def test_markdown_list(self):
        reports = [
            FailureReport(type=ROW, shield="corne_left", key_indices=[0, 1, 2],
                          pin="pro_micro 4", row=0),
            FailureReport(type=SINGLE, shield="corne_right", key_indices=[3], row=0, col=3),
        ]
        out = render_reports(reports, DB)
        self.assertTrue(out.startswith("1. **Whole row not responding - corne_left**"))
        self.assertIn("   Keys: 0, 1, 2", out)
        self.assertIn("2. **Single key fault - corne_right**", out)
        self.assertIn("   - Switch SW4", out)


class TestReportSerialization(unittest.TestCase):

    def test_optional_fields_omitted(self):
        (d,) = reports_to_dict([
            FailureReport(type=DIRECT_GND, shield="macropad", key_indices=[0, 1, 2]),
        ])
        self.assertEqual(d, {"type": "direct_gnd", "shield": "macropad",
                             "keyIndices": [0, 1, 2]})

    def test_charlie_keys(self):
        (d,) = reports_to_dict([
            FailureReport(type=CHARLIE, shield="c", key_indices=[0], pin="xiao_d 0",
                          role=ROLE_IN, pin_index=0),
        ])
        self.assertEqual(d["pinIndex"], 0)
        self.assertEqual(d["role"], "in")

    def test_round_trip(self):
        reports = [
            FailureReport(type=COL, shield="a", key_indices=[0, 6], pin="p 1", col=0),
            FailureReport(type=SINGLE, shield="b", key_indices=[9], row=1, col=3),
        ]
        data = json.loads(json.dumps(reports_to_dict(reports)))
        self.assertEqual(parse_reports(data), reports)


if __name__ == "__main__":
    unittest.main()
