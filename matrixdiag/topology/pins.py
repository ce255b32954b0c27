"""Pin topology extraction — wiring mode, GPIO lists and diode polarity.

A kscan node comes in one of three shapes::

    kscan0: kscan { compatible = "zmk,kscan-gpio-matrix";
        diode-direction = "col2row";
        row-gpios = <&pro_micro 4 (GPIO_ACTIVE_HIGH | GPIO_PULL_DOWN)>, ...;
        col-gpios = <&pro_micro 21 GPIO_ACTIVE_HIGH>, ...; };

    kscan0: kscan { compatible = "zmk,kscan-gpio-charlieplex";
        gpios = <&xiao_d 0 GPIO_ACTIVE_HIGH>, ...;
        interrupt-gpios = <&xiao_d 6 (GPIO_ACTIVE_HIGH | GPIO_PULL_DOWN)>; };

    kscan0: kscan { compatible = "zmk,kscan-gpio-direct";
        input-gpios = <&gpio0 2 (GPIO_ACTIVE_LOW | GPIO_PULL_UP)>, ...; };

Pins become opaque ``"<node> <line>"`` strings ("pro_micro 4").
"""

from __future__ import annotations

import logging
import re

from matrixdiag.config import (
    CHARLIEPLEX, COL2ROW, DIRECT_GPIO, ROW2COL, STANDARD_MATRIX,
)

from .context import ExtractionContext
from .shields import owning_shield, target_shields
from .text import compatible_with, find_property, has_property


log = logging.getLogger(__name__)

CHARLIEPLEX_COMPATIBLE = "zmk,kscan-gpio-charlieplex"
DIRECT_COMPATIBLE = "zmk,kscan-gpio-direct"

_DELIMS = re.compile(r"[\s,<>]+")
_LINE_NUMBER = re.compile(r"\d+|0[xX][0-9a-fA-F]+")


def extract_pin_list(text: str, prop_name: str) -> dict[int, str]:
    """Ordered pins of a ``*-gpios`` property, keyed by ordinal.

    Every ``&node`` reference is paired with the number that follows it;
    flag tokens (``GPIO_ACTIVE_HIGH``, ``(GPIO_PULL_DOWN | ...)``) are
    dropped.  Returns {} if the property is absent.
    """
    prop = find_property(text, prop_name)
    if prop is None:
        return {}
    tokens = [t for t in _DELIMS.split(prop.value) if t]
    pins: dict[int, str] = {}
    for i, tok in enumerate(tokens):
        if not tok.startswith("&") or i + 1 >= len(tokens):
            continue
        line = tokens[i + 1]
        if not _LINE_NUMBER.fullmatch(line):
            log.debug("Skipping %s in %s: no line number", tok, prop_name)
            continue
        pins[len(pins)] = f"{tok[1:]} {line}"
    return pins


def classify_wiring(text: str) -> str | None:
    """Wiring mode signalled by one file, or None if it has no kscan pins."""
    has_matrix = has_property(text, "row-gpios") or has_property(text, "col-gpios")
    if has_matrix:
        return STANDARD_MATRIX
    if compatible_with(text, CHARLIEPLEX_COMPATIBLE) or has_property(text, "gpios"):
        return CHARLIEPLEX
    if compatible_with(text, DIRECT_COMPATIBLE) or has_property(text, "input-gpios"):
        return DIRECT_GPIO
    return None


def declared_diode_direction(text: str) -> str | None:
    prop = find_property(text, "diode-direction")
    if prop is None:
        return None
    m = re.search(r'"([^"]+)"', prop.value)
    return m.group(1) if m else None


def extract_pin_topology(ctx: ExtractionContext) -> None:
    """Merge every file's kscan pins into the shield buckets.

    Charlieplex and direct pins fix the global diode direction after every
    file has been read, so a later ``diode-direction`` cannot undo them.
    """
    forced: str | None = None
    for file_id, text in ctx.files.items():
        declared = declared_diode_direction(text)
        if declared:
            ctx.diode_direction = declared
            log.info("diode-direction %s (in %s)", declared, file_id)

        targets = target_shields(file_id, ctx.shields)
        if not targets:
            continue
        if declared:
            for name in targets:
                ctx.bucket(name).declared_diode = declared

        mode = classify_wiring(text)
        if mode is None:
            continue
        side = owning_shield(file_id, ctx.shields) or "common"

        if mode == STANDARD_MATRIX:
            rows = extract_pin_list(text, "row-gpios")
            cols = extract_pin_list(text, "col-gpios")
            for name in targets:
                bucket = ctx.bucket(name)
                bucket.row.update(rows)
                bucket.col.update(cols)
            log.info("Matrix pins for %s: %d rows, %d cols (applied to %s)",
                     side, len(rows), len(cols), ", ".join(targets))

        elif mode == CHARLIEPLEX:
            gpios = extract_pin_list(text, "gpios")
            interrupt = extract_pin_list(text, "interrupt-gpios")
            for name in targets:
                bucket = ctx.bucket(name)
                bucket.gpios.update(gpios)
                if interrupt:
                    bucket.interrupt = interrupt[0]
            if gpios:
                forced = COL2ROW
            log.info("Charlieplex pins for %s: %d gpios, interrupt %s (applied to %s)",
                     side, len(gpios), interrupt.get(0), ", ".join(targets))

        else:
            direct = extract_pin_list(text, "input-gpios")
            for name in targets:
                ctx.bucket(name).direct.update(direct)
            if direct:
                forced = ROW2COL
            log.info("Direct pins for %s: %d inputs (applied to %s)",
                     side, len(direct), ", ".join(targets))

    if forced:
        ctx.diode_direction = forced
        log.info("diode-direction %s (forced by wiring)", forced)
