"""Failure localizer — attribute non-responsive keys to a faulty part.

Algorithm overview:
  1. Keep only shields with at least one recovered pin list.
  2. Resolve every key to its owning shield and local row/column using
     the shields' matrix offsets (largest qualifying offset wins).
  3. Interrupt check: nearly a whole charlieplex side dead → its
     interrupt line.
  4. One wiring pass per shield:
       charlieplex  per pin ordinal, row role (in) vs column role (out)
       direct       shared ground if nearly all keys fail, else per pin
       matrix       rows, then columns, with a majority of keys failing
  5. Failing keys nothing else explains are reported one by one.

Shared lines are blamed only when a clear majority of their keys fail,
so a couple of independent bad switches on one row stay single-key
reports.  Every call recomputes from scratch.
"""

from __future__ import annotations

import logging
from collections import Counter
from typing import Iterable

from matrixdiag.config import CHARLIEPLEX, DIAGNOSIS_RULES, DIRECT_GPIO, DiagnosisRules
from matrixdiag.topology.models import KeyboardTopology, MatrixEntry, Shield

from .models import (
    CHARLIE, COL, DIRECT, DIRECT_GND, INTERRUPT, ROW, SINGLE,
    ROLE_BOTH, ROLE_IN, ROLE_OUT,
    FailureReport, KeyPosition,
)


log = logging.getLogger(__name__)


# ── Key resolution ─────────────────────────────────────────────────


def valid_shields(topology: KeyboardTopology) -> list[Shield]:
    """Shields with a recovered pin topology, in discovery order."""
    return [s for s in topology.shields if s.pins.has_pins]


def resolve_owner(
    entry: MatrixEntry, shields: list[Shield],
) -> tuple[Shield, int, int]:
    """Return (shield, local_row, local_col) for a logical coordinate.

    Among shields whose offsets are both <= the coordinate, the one with
    the largest offset sum wins (a right half at col-offset 6 beats a
    left half at 0).  If none qualifies the first shield takes the key
    with unshifted coordinates.
    """
    best = shields[0]
    local_row, local_col = entry.row, entry.col
    best_score = -1
    for s in shields:
        if entry.col >= s.col_offset and entry.row >= s.row_offset:
            score = s.col_offset + s.row_offset
            if score > best_score:
                best_score = score
                best = s
                local_row = entry.row - s.row_offset
                local_col = entry.col - s.col_offset
    return best, local_row, local_col


def locate_keys(
    topology: KeyboardTopology, shields: list[Shield],
) -> list[KeyPosition]:
    """Resolve every key that has a matrix entry.  Keys without one are skipped."""
    positions = []
    for index in range(len(topology.physical_keys)):
        entry = topology.matrix_entry(index)
        if entry is None:
            continue
        shield, local_row, local_col = resolve_owner(entry, shields)
        positions.append(KeyPosition(
            index=index,
            shield=shield.name,
            local_row=local_row,
            local_col=local_col,
            entry=entry,
        ))
    return positions


# ── Passes ─────────────────────────────────────────────────────────


def _ratio(failing: int, total: int) -> float:
    return failing / total if total else 0.0


def _interrupt_pass(
    shield: Shield, keys: list[KeyPosition], failing: set[int],
    rules: DiagnosisRules,
) -> list[FailureReport]:
    if not shield.pins.interrupt or len(keys) <= rules.interrupt_min_keys:
        return []
    failing_count = sum(1 for p in keys if p.index in failing)
    if _ratio(failing_count, len(keys)) <= rules.side_failure_ratio:
        return []
    return [FailureReport(
        type=INTERRUPT,
        shield=shield.name,
        pin=shield.pins.interrupt,
        key_indices=[p.index for p in keys],
    )]


def _charlieplex_pass(
    shield: Shield, keys: list[KeyPosition], failing: set[int],
    rules: DiagnosisRules,
) -> list[FailureReport]:
    """Per pin ordinal: the row role reads, the column role drives."""
    in_total = Counter(p.local_row for p in keys)
    out_total = Counter(p.local_col for p in keys)
    in_fail = Counter(p.local_row for p in keys if p.index in failing)
    out_fail = Counter(p.local_col for p in keys if p.index in failing)

    reports = []
    for ordinal in sorted(set(in_total) | set(out_total)):
        in_flag = _ratio(in_fail[ordinal], in_total[ordinal]) > rules.line_failure_ratio
        out_flag = _ratio(out_fail[ordinal], out_total[ordinal]) > rules.line_failure_ratio
        if not (in_flag or out_flag):
            continue
        if in_flag and out_flag:
            role = ROLE_BOTH
        elif in_flag:
            role = ROLE_IN
        else:
            role = ROLE_OUT

        indices = [
            p.index for p in keys
            if p.index in failing and (
                (in_flag and p.local_row == ordinal)
                or (out_flag and p.local_col == ordinal))
        ]
        gpios = shield.pins.gpios
        reports.append(FailureReport(
            type=CHARLIE,
            shield=shield.name,
            pin=gpios[ordinal] if 0 <= ordinal < len(gpios) else None,
            role=role,
            pin_index=ordinal,
            key_indices=indices,
        ))
    return reports


def _direct_pass(
    shield: Shield, keys: list[KeyPosition], failing: set[int],
    rules: DiagnosisRules,
) -> list[FailureReport]:
    """Each key owns one input pin; all of them share the shield's ground."""
    pins = shield.pins.direct
    direct_keys = [p for p in keys if 0 <= p.local_col < len(pins)]
    failing_keys = [p for p in direct_keys if p.index in failing]

    if (len(direct_keys) > rules.direct_gnd_min_keys
            and _ratio(len(failing_keys), len(direct_keys)) > rules.side_failure_ratio):
        return [FailureReport(
            type=DIRECT_GND,
            shield=shield.name,
            key_indices=[p.index for p in direct_keys],
        )]

    return [
        FailureReport(
            type=DIRECT,
            shield=shield.name,
            pin=pins[p.local_col],
            key_indices=[p.index],
        )
        for p in failing_keys
    ]


def _matrix_pass(
    shield: Shield, keys: list[KeyPosition], failing: set[int],
    rules: DiagnosisRules,
) -> list[FailureReport]:
    """Rows first, then columns; a key may appear in both."""
    reports = []
    for kind, pins, line_of in (
        (ROW, shield.pins.row, lambda p: p.local_row),
        (COL, shield.pins.col, lambda p: p.local_col),
    ):
        totals = Counter(line_of(p) for p in keys)
        failed: dict[int, list[int]] = {}
        for p in keys:
            if p.index in failing:
                failed.setdefault(line_of(p), []).append(p.index)

        for line in sorted(failed):
            if _ratio(len(failed[line]), totals[line]) <= rules.line_failure_ratio:
                continue
            reports.append(FailureReport(
                type=kind,
                shield=shield.name,
                pin=pins[line] if 0 <= line < len(pins) else None,
                key_indices=failed[line],
                **({"row": line} if kind == ROW else {"col": line}),
            ))
    return reports


# ── Main entry point ───────────────────────────────────────────────


def localize_failures(
    topology: KeyboardTopology,
    failing: Iterable[int],
    rules: DiagnosisRules | None = None,
) -> list[FailureReport]:
    """Explain a set of non-responsive keys (physical key indices).

    Reports are grouped by shield in discovery order; within a shield
    the interrupt report comes first, then the wiring-specific reports,
    then single-key reports for whatever is left unexplained.
    """
    rules = rules or DIAGNOSIS_RULES
    failing_set = set(failing)
    shields = valid_shields(topology)
    if not shields or not failing_set:
        return []

    positions = locate_keys(topology, shields)
    covered: set[int] = set()
    reports: list[FailureReport] = []

    for shield in shields:
        keys = [p for p in positions if p.shield == shield.name]
        shield_reports = _interrupt_pass(shield, keys, failing_set, rules)

        if shield.wiring_mode == CHARLIEPLEX:
            shield_reports += _charlieplex_pass(shield, keys, failing_set, rules)
        elif shield.wiring_mode == DIRECT_GPIO:
            shield_reports += _direct_pass(shield, keys, failing_set, rules)
        else:
            shield_reports += _matrix_pass(shield, keys, failing_set, rules)

        for r in shield_reports:
            covered.update(i for i in r.key_indices if i in failing_set)

        for p in keys:
            if p.index in failing_set and p.index not in covered:
                shield_reports.append(FailureReport(
                    type=SINGLE,
                    shield=shield.name,
                    row=p.entry.row,
                    col=p.entry.col,
                    key_indices=[p.index],
                ))

        log.debug("%s: %d reports", shield.name, len(shield_reports))
        reports.extend(shield_reports)

    return reports
