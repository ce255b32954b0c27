"""Topology dataclasses — the immutable result of extraction."""

from __future__ import annotations

from dataclasses import dataclass, field

from matrixdiag.config import COL2ROW, STANDARD_MATRIX


# ── Geometry / matrix ──────────────────────────────────────────────


@dataclass(frozen=True)
class PhysicalKey:
    """One key of the physical layout, in keyboard units (1u = 100 centiunits)."""

    w: float
    h: float
    x: float
    y: float
    r: float = 0.0          # rotation, degrees (clockwise on screen)
    rx: float = 0.0         # rotation origin
    ry: float = 0.0


@dataclass(frozen=True)
class MatrixEntry:
    """Logical (electrical scan) coordinate of a key."""

    row: int
    col: int


# ── Shields ────────────────────────────────────────────────────────


@dataclass(frozen=True)
class PinAssignment:
    """Ordered pin identifiers of one shield; tuple position = ordinal."""

    row: tuple[str, ...] = ()
    col: tuple[str, ...] = ()
    gpios: tuple[str, ...] = ()         # charlieplex dual-role pins
    direct: tuple[str, ...] = ()        # one input pin per key
    interrupt: str | None = None        # charlieplex interrupt line

    @property
    def has_pins(self) -> bool:
        return bool(self.row or self.col or self.gpios or self.direct)

    def all_pins(self) -> list[str]:
        """Every pin in declaration order (rows, cols, gpios, direct, interrupt)."""
        pins = [*self.row, *self.col, *self.gpios, *self.direct]
        if self.interrupt:
            pins.append(self.interrupt)
        return pins


@dataclass(frozen=True)
class Shield:
    """One hardware unit (e.g. one half of a split keyboard)."""

    name: str
    col_offset: int = 0
    row_offset: int = 0
    wiring_mode: str = STANDARD_MATRIX  # "standard-matrix" | "charlieplex" | "direct-gpio"
    diode_direction: str = COL2ROW      # "col2row" | "row2col"
    pins: PinAssignment = field(default_factory=PinAssignment)


# ── Aggregate ──────────────────────────────────────────────────────


@dataclass(frozen=True)
class KeyboardTopology:
    """Everything the localizer needs, built once per corpus load."""

    physical_keys: tuple[PhysicalKey, ...]
    matrix_map: tuple[MatrixEntry, ...]
    shields: tuple[Shield, ...]
    diode_direction: str = COL2ROW

    def matrix_entry(self, index: int) -> MatrixEntry | None:
        """Matrix coordinate of a key, or None when the map has no entry."""
        if 0 <= index < len(self.matrix_map):
            return self.matrix_map[index]
        return None

    def shield(self, name: str) -> Shield | None:
        for s in self.shields:
            if s.name == name:
                return s
        return None

    @property
    def shield_names(self) -> list[str]:
        return [s.name for s in self.shields]


class TopologyError(Exception):
    """Raised when a corpus cannot produce a usable topology."""

    def __init__(self, reason: str, message: str) -> None:
        self.reason = reason
        super().__init__(message)
