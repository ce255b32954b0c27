"""Human-readable explanations of failure reports."""

from __future__ import annotations

from dataclasses import dataclass, field

from matrixdiag.reference.models import ReferenceDatabase

from .models import (
    CHARLIE, COL, DIRECT, DIRECT_GND, INTERRUPT, ROW, SINGLE,
    ROLE_BOTH, ROLE_IN, ROLE_OUT,
    FailureReport,
)


@dataclass
class ReportText:
    title: str
    summary: str
    causes: list[str] = field(default_factory=list)


def _line_text(r: FailureReport, db: ReferenceDatabase) -> ReportText:
    silk = db.pin_label(r.shield, r.pin)
    what = "Row" if r.type == ROW else "Column"
    return ReportText(
        title=f"Whole {what.lower()} not responding - {r.shield}",
        summary=f"{what} {r.row if r.type == ROW else r.col}, pin {silk}",
        causes=[f"Solder joint of controller pin {silk}"],
    )


def _charlie_text(r: FailureReport, db: ReferenceDatabase) -> ReportText:
    info = db.pin_info(r.shield, r.pin) if r.pin else None
    silk = db.pin_label(r.shield, r.pin)
    if r.role == ROLE_IN:
        summary = f"Pin {silk} fails as an input (sensing)"
        causes = [
            f"Line diode {info.line_diode}" if info and info.line_diode
            else "The line diode on this pin",
            f"Interrupt diode {info.interrupt_diode}" if info and info.interrupt_diode
            else "The interrupt diode on this pin",
            f"Solder joint of controller pin {silk}",
        ]
    elif r.role == ROLE_OUT:
        summary = f"Pin {silk} fails as an output (driving)"
        causes = [
            f"Solder joint of controller pin {silk} "
            "(a diode fault does not affect the driving side)",
        ]
    else:
        summary = f"Pin {silk} fails in both directions"
        causes = [f"Solder joint of controller pin {silk} (most likely)"]
    return ReportText(
        title=f"Charlieplex GPIO pin fault - {r.shield}",
        summary=summary + "; check every row and column wired to it",
        causes=causes,
    )


def _single_text(r: FailureReport, db: ReferenceDatabase) -> ReportText:
    key = db.key_info(r.row, r.col) if r.row is not None and r.col is not None else None
    causes = (
        [f"Switch {key.silk_sw}", f"Diode {key.silk_d or '(its diode)'}"]
        if key else
        ["The switch and its hot-swap socket", "The key's diode"]
    )
    return ReportText(
        title=f"Single key fault - {r.shield}",
        summary=f"Matrix {r.row}, {r.col}",
        causes=causes,
    )


def describe_report(
    report: FailureReport, db: ReferenceDatabase | None = None,
) -> ReportText:
    """Explain one report, labelling pins and switches from *db* when known."""
    db = db or ReferenceDatabase()
    r = report

    if r.type in (ROW, COL):
        return _line_text(r, db)
    if r.type == CHARLIE:
        return _charlie_text(r, db)
    if r.type == DIRECT:
        silk = db.pin_label(r.shield, r.pin)
        return ReportText(
            title=f"Direct GPIO fault - {r.shield}",
            summary=f"Key {r.key_indices[0]} is wired straight to pin {silk}",
            causes=[
                f"Solder joint of controller pin {silk}",
                "The switch itself or its solder joints",
                "A lifted or badly soldered switch socket",
            ],
        )
    if r.type == DIRECT_GND:
        return ReportText(
            title=f"Shared ground suspected - {r.shield}",
            summary=f"{len(r.key_indices)} direct-wired keys share one ground and "
                    "almost all of them fail",
            causes=[
                "Solder joint of the common GND pin",
                "A broken ground trace on the board",
                "Power supply wiring",
            ],
        )
    if r.type == INTERRUPT:
        silk = db.pin_label(r.shield, r.pin)
        return ReportText(
            title=f"Interrupt GPIO fault - {r.shield}",
            summary=f"Pin {silk}; a floating interrupt line silences the whole side",
            causes=[f"Solder joint of controller pin {silk}"],
        )
    if r.type == SINGLE:
        return _single_text(r, db)
    return ReportText(title=f"{r.type} - {r.shield}", summary="")


def render_reports(
    reports: list[FailureReport], db: ReferenceDatabase | None = None,
) -> str:
    """Render reports as a Markdown list (CLI output)."""
    if not reports:
        return "No failure pattern found for the selected keys."
    lines = []
    for i, r in enumerate(reports, 1):
        text = describe_report(r, db)
        lines.append(f"{i}. **{text.title}**")
        lines.append(f"   {text.summary}")
        lines.append(f"   Keys: {', '.join(str(k) for k in r.key_indices)}")
        for cause in text.causes:
            lines.append(f"   - {cause}")
    return "\n".join(lines)
