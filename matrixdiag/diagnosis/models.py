"""Diagnosis dataclasses — failure reports and resolved key positions."""

from __future__ import annotations

from dataclasses import dataclass

from matrixdiag.topology.models import MatrixEntry


# Report types, in the order a shield's reports are emitted.
INTERRUPT = "interrupt"
CHARLIE = "charlie"
DIRECT = "direct"
DIRECT_GND = "direct_gnd"
ROW = "row"
COL = "col"
SINGLE = "single"

# Charlieplex pin roles.
ROLE_IN = "in"          # row role: the pin (or its diodes) fails to sense
ROLE_OUT = "out"        # column role: the pin fails to drive
ROLE_BOTH = "both"


@dataclass(frozen=True)
class KeyPosition:
    """A key resolved to its owning shield and local physical line."""

    index: int
    shield: str
    local_row: int
    local_col: int
    entry: MatrixEntry      # absolute logical coordinate


@dataclass
class FailureReport:
    """One suspected fault and every failing key it explains."""

    type: str               # "row" | "col" | "charlie" | "direct" | "direct_gnd" | "interrupt" | "single"
    shield: str
    key_indices: list[int]
    pin: str | None = None
    role: str | None = None         # charlie only
    pin_index: int | None = None    # charlie ordinal
    row: int | None = None          # local row ("row"), absolute row ("single")
    col: int | None = None          # local col ("col"), absolute col ("single")
