"""Reference database dataclasses — silkscreen labels for pins and keys.

The database is an optional JSON file kept next to the firmware config
(``matrix-diagnoser-database.json``)::

    {
      "pins": {"corne_left_pro_micro 4": {"silk": "D4", "line_diode": "D12",
                                          "interrupt_diode": "D30"}},
      "keys": [{"matrix": [0, 0], "silk_sw": "SW1", "silk_d": "D1"}]
    }

It only improves report labels; the localizer never reads it.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass
class PinInfo:
    silk: str                           # board silkscreen label, or the raw pin id
    line_diode: str | None = None       # diode on the line this pin drives / senses
    interrupt_diode: str | None = None  # charlieplex interrupt diode
    description: str = ""


@dataclass
class KeyInfo:
    matrix: tuple[int, int]             # absolute (row, col)
    silk_sw: str = ""
    silk_d: str = ""


@dataclass
class ReferenceDatabase:
    pins: dict[str, PinInfo] = field(default_factory=dict)
    keys: list[KeyInfo] = field(default_factory=list)

    def pin_info(self, shield: str, pin: str) -> PinInfo:
        """Look up a pin: ``<shield>_<pin>``, legacy ``Left_`` / ``Right_``, raw id.

        Falls back to a PinInfo labelled with the raw pin id.
        """
        side = "Left" if "left" in shield.lower() else "Right"
        for key in (f"{shield}_{pin}", f"{side}_{pin}", pin):
            info = self.pins.get(key)
            if info is not None:
                return info
        return PinInfo(silk=pin)

    def pin_label(self, shield: str, pin: str | None) -> str:
        if pin is None:
            return "unknown pin"
        return self.pin_info(shield, pin).silk or pin

    def key_info(self, row: int, col: int) -> KeyInfo | None:
        for k in self.keys:
            if k.matrix == (row, col):
                return k
        return None


class DatabaseError(Exception):
    """Raised when a reference database file cannot be read or parsed."""
