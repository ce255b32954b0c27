"""Report serialization — JSON conversion."""

from __future__ import annotations

from .models import FailureReport


def report_to_dict(report: FailureReport) -> dict:
    return {
        "type": report.type,
        "shield": report.shield,
        **({"pin": report.pin} if report.pin is not None else {}),
        **({"role": report.role} if report.role is not None else {}),
        **({"pinIndex": report.pin_index} if report.pin_index is not None else {}),
        **({"row": report.row} if report.row is not None else {}),
        **({"col": report.col} if report.col is not None else {}),
        "keyIndices": list(report.key_indices),
    }


def reports_to_dict(reports: list[FailureReport]) -> list[dict]:
    """Serialize a report list to JSON-safe dicts, order preserved."""
    return [report_to_dict(r) for r in reports]


def parse_reports(data: list[dict]) -> list[FailureReport]:
    return [
        FailureReport(
            type=d["type"],
            shield=d["shield"],
            key_indices=[int(i) for i in d["keyIndices"]],
            pin=d.get("pin"),
            role=d.get("role"),
            pin_index=d.get("pinIndex"),
            row=d.get("row"),
            col=d.get("col"),
        )
        for d in data
    ]
