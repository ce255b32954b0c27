"""Topology serialization — JSON conversion."""

from __future__ import annotations

from matrixdiag.config import COL2ROW, STANDARD_MATRIX

from .models import (
    KeyboardTopology, MatrixEntry, PhysicalKey, PinAssignment, Shield,
)


def _index_map(pins: tuple[str, ...]) -> dict[str, str]:
    return {str(i): p for i, p in enumerate(pins)}


def _index_tuple(data: dict | None) -> tuple[str, ...]:
    if not data:
        return ()
    return tuple(data[k] for k in sorted(data, key=int))


def topology_to_dict(topology: KeyboardTopology) -> dict:
    """Serialize a KeyboardTopology to a JSON-safe dict."""
    return {
        "physicalKeys": [
            {"x": k.x, "y": k.y, "w": k.w, "h": k.h, "r": k.r, "rx": k.rx, "ry": k.ry}
            for k in topology.physical_keys
        ],
        "matrixMap": [
            {"row": m.row, "col": m.col}
            for m in topology.matrix_map
        ],
        "pinMap": {
            s.name: {
                "row": _index_map(s.pins.row),
                "col": _index_map(s.pins.col),
                "gpios": _index_map(s.pins.gpios),
                "direct": _index_map(s.pins.direct),
                "interrupt": s.pins.interrupt,
                "colOffset": s.col_offset,
                "rowOffset": s.row_offset,
                "wiringMode": s.wiring_mode,
                "diodeDirection": s.diode_direction,
            }
            for s in topology.shields
        },
        "diodeDirection": topology.diode_direction,
    }


def parse_topology(data: dict) -> KeyboardTopology:
    """Parse a ``topology_to_dict`` payload back into a KeyboardTopology."""
    keys = tuple(
        PhysicalKey(
            w=float(k["w"]), h=float(k["h"]),
            x=float(k["x"]), y=float(k["y"]),
            r=float(k.get("r", 0)),
            rx=float(k.get("rx", 0)),
            ry=float(k.get("ry", 0)),
        )
        for k in data["physicalKeys"]
    )
    matrix = tuple(
        MatrixEntry(row=int(m["row"]), col=int(m["col"]))
        for m in data.get("matrixMap", [])
    )
    shields = tuple(
        Shield(
            name=name,
            col_offset=int(p.get("colOffset", 0)),
            row_offset=int(p.get("rowOffset", 0)),
            wiring_mode=p.get("wiringMode", STANDARD_MATRIX),
            diode_direction=p.get("diodeDirection", COL2ROW),
            pins=PinAssignment(
                row=_index_tuple(p.get("row")),
                col=_index_tuple(p.get("col")),
                gpios=_index_tuple(p.get("gpios")),
                direct=_index_tuple(p.get("direct")),
                interrupt=p.get("interrupt"),
            ),
        )
        for name, p in data.get("pinMap", {}).items()
    )
    return KeyboardTopology(
        physical_keys=keys,
        matrix_map=matrix,
        shields=shields,
        diode_direction=data.get("diodeDirection", COL2ROW),
    )
