"""Topology builder — runs the extraction passes and freezes the result.

Pass order:
  1. normalize   strip comments, fix lexicographic processing order
  2. shields     names from build.yaml
  3. layout      physical key geometry (fatal if empty)
  4. transform   matrix map + per-shield offsets
  5. pins        wiring mode, pin lists, diode polarity
"""

from __future__ import annotations

import logging
from typing import Mapping

from matrixdiag.config import (
    BUILD_CONFIG_NAME, CHARLIEPLEX, COL2ROW, DIRECT_GPIO, ROW2COL,
    SOURCE_SUFFIXES, STANDARD_MATRIX,
)

from .context import ExtractionContext, ShieldBucket
from .layout import extract_physical_layout
from .models import KeyboardTopology, PinAssignment, Shield, TopologyError
from .pins import extract_pin_topology
from .shields import resolve_shields
from .transform import extract_matrix_transform


log = logging.getLogger(__name__)


def is_source_file(file_id: str) -> bool:
    """True for hardware-description and build-configuration files."""
    return file_id.endswith(SOURCE_SUFFIXES) or file_id.endswith(BUILD_CONFIG_NAME)


def build_topology(sources: Mapping[str, str]) -> KeyboardTopology:
    """Build a KeyboardTopology from a ``{file identifier: raw text}`` map.

    Raises TopologyError when no recognized file is present or when no
    physical layout can be found.  Every other gap is tolerated.
    """
    relevant = {k: v for k, v in sources.items() if is_source_file(k)}
    if not relevant:
        raise TopologyError(
            "no_sources",
            "No hardware description files (.dtsi, .overlay, .keymap, .conf, "
            "build.yaml) found",
        )

    ctx = ExtractionContext.from_sources(relevant)
    resolve_shields(ctx)

    extract_physical_layout(ctx)
    if not ctx.physical_keys:
        raise TopologyError(
            "no_physical_layout",
            "No physical layout (&key_physical_attrs keys) found",
        )

    extract_matrix_transform(ctx)
    extract_pin_topology(ctx)

    if ctx.matrix_map and len(ctx.matrix_map) != len(ctx.physical_keys):
        log.warning("Matrix map has %d entries for %d physical keys",
                    len(ctx.matrix_map), len(ctx.physical_keys))

    return freeze(ctx)


def _ordered(pins: dict[int, str]) -> tuple[str, ...]:
    return tuple(pins[i] for i in sorted(pins))


def _freeze_shield(bucket: ShieldBucket) -> Shield:
    pins = PinAssignment(
        row=_ordered(bucket.row),
        col=_ordered(bucket.col),
        gpios=_ordered(bucket.gpios),
        direct=_ordered(bucket.direct),
        interrupt=bucket.interrupt,
    )
    # Charlieplex and direct wiring have a fixed polarity whatever the
    # source declares.
    if pins.gpios:
        mode, diode = CHARLIEPLEX, COL2ROW
    elif pins.direct:
        mode, diode = DIRECT_GPIO, ROW2COL
    else:
        mode, diode = STANDARD_MATRIX, bucket.declared_diode or COL2ROW
    return Shield(
        name=bucket.name,
        col_offset=bucket.col_offset,
        row_offset=bucket.row_offset,
        wiring_mode=mode,
        diode_direction=diode,
        pins=pins,
    )


def freeze(ctx: ExtractionContext) -> KeyboardTopology:
    """Turn an extraction context into an immutable topology."""
    return KeyboardTopology(
        physical_keys=tuple(ctx.physical_keys),
        matrix_map=tuple(ctx.matrix_map),
        shields=tuple(_freeze_shield(ctx.buckets[name]) for name in ctx.shields),
        diode_direction=ctx.diode_direction,
    )
