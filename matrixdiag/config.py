"""Shared constants for extraction and diagnosis.

The localizer blames a shared electrical line (row, column, charlieplex
pin) only when a clear majority of its keys fail, and blames a whole side
(interrupt line, direct-wiring ground) only when nearly every key on it
fails.  All of those thresholds live in ``DiagnosisRules`` so the engine,
the CLI and the web API read them from one place.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class DiagnosisRules:
    """Thresholds used by the failure localizer.

    Ratios are compared with a strict ``>``: a row with exactly 60 %
    failing keys is *not* blamed.
    """

    line_failure_ratio: float = 0.6
    """Failing fraction above which a row, column or charlieplex pin
    role is considered broken."""

    side_failure_ratio: float = 0.8
    """Failing fraction above which a whole shield is attributed to its
    interrupt line or shared ground."""

    interrupt_min_keys: int = 5
    """A shield needs more than this many keys before the interrupt
    check applies."""

    direct_gnd_min_keys: int = 2
    """A direct-wired shield needs more than this many keys before the
    shared-ground check applies."""


# Module-level singleton, importable everywhere.
DIAGNOSIS_RULES = DiagnosisRules()


# ── Source corpus ──────────────────────────────────────────────────

SOURCE_SUFFIXES = (".dtsi", ".overlay", ".keymap", ".conf")
BUILD_CONFIG_NAME = "build.yaml"

RESET_SHIELD = "settings_reset"     # factory-reset pseudo shield in build.yaml

# ── Wiring / polarity vocabulary ───────────────────────────────────

STANDARD_MATRIX = "standard-matrix"
CHARLIEPLEX = "charlieplex"
DIRECT_GPIO = "direct-gpio"

COL2ROW = "col2row"
ROW2COL = "row2col"

# ── Reference database ─────────────────────────────────────────────

DATABASE_NAMES = (
    "matrix-diagnoser-database.json",
    "config/matrix-diagnoser-database.json",
    "database.json",                # legacy name
)
