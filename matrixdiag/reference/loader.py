"""Reference database loader and template generator."""

from __future__ import annotations

import json
import logging
from pathlib import Path

from matrixdiag.config import DATABASE_NAMES
from matrixdiag.topology.models import KeyboardTopology

from .models import DatabaseError, KeyInfo, PinInfo, ReferenceDatabase


log = logging.getLogger(__name__)


# ── Parsing ────────────────────────────────────────────────────────

def _parse_pin(data: dict) -> PinInfo:
    return PinInfo(
        silk=str(data.get("silk", "")),
        line_diode=data.get("line_diode") or None,
        interrupt_diode=data.get("interrupt_diode") or None,
        description=data.get("description", ""),
    )


def _parse_key(data: dict) -> KeyInfo:
    row, col = data["matrix"]
    return KeyInfo(
        matrix=(int(row), int(col)),
        silk_sw=data.get("silk_sw", ""),
        silk_d=data.get("silk_d", ""),
    )


def parse_database(data: dict) -> ReferenceDatabase:
    """Parse a database dict.  Raises DatabaseError on a malformed shape."""
    try:
        return ReferenceDatabase(
            pins={k: _parse_pin(v) for k, v in (data.get("pins") or {}).items()},
            keys=[_parse_key(k) for k in (data.get("keys") or [])],
        )
    except (AttributeError, KeyError, TypeError, ValueError) as exc:
        raise DatabaseError(f"Malformed reference database: {exc}") from exc


# ── Public API ─────────────────────────────────────────────────────

def load_database(path: Path) -> ReferenceDatabase:
    """Read and parse a database file.  Raises DatabaseError."""
    try:
        raw = json.loads(path.read_text(encoding="utf-8"))
    except (json.JSONDecodeError, UnicodeDecodeError) as exc:
        raise DatabaseError(f"{path}: parse error: {exc}") from exc
    except OSError as exc:
        raise DatabaseError(f"{path}: read error: {exc}") from exc
    db = parse_database(raw)
    log.info("Loaded reference database %s (%d pins, %d keys)",
             path, len(db.pins), len(db.keys))
    return db


def find_database(root: Path) -> Path | None:
    """First existing database file under a config checkout, or None."""
    for name in DATABASE_NAMES:
        p = root / name
        if p.is_file():
            return p
    return None


def database_template(topology: KeyboardTopology) -> dict:
    """Empty database skeleton listing every known pin and matrix position."""
    pins: dict[str, dict] = {}
    for s in topology.shields:
        listed = s.pins.all_pins()
        for i, pin in enumerate(listed):
            if s.pins.interrupt and i == len(listed) - 1:
                entry = {"silk": "", "description": ""}
            else:
                entry = {"silk": "", "line_diode": "", "interrupt_diode": ""}
            pins.setdefault(f"{s.name}_{pin}", entry)
    return {
        "pins": pins,
        "keys": [
            {"matrix": [m.row, m.col], "silk_sw": "", "silk_d": ""}
            for m in topology.matrix_map
        ],
    }
