"""Physical layout extraction — key geometry from ``&key_physical_attrs``.

Two passes, first hit wins:
  1. ``chosen { zmk,physical-layout = &LABEL; }`` → node ``LABEL: ... {``
     → its ``keys = < ... >;``.
  2. any node with ``compatible = "zmk,physical-layout"`` → the first
     ``keys`` property after the marker, inside that node.

A node without its own ``keys`` may get them from a later
``&LABEL { keys = ...; };`` override, or from the nearest ``keys``
following the node in the same file.
"""

from __future__ import annotations

import logging
import re

from .context import ExtractionContext
from .models import PhysicalKey
from .text import (
    cell_body, enclosing_end, enclosing_start, find_node, find_property,
    iter_overrides, iter_properties, node_label,
)


log = logging.getLogger(__name__)

CHOSEN_PROPERTY = "zmk,physical-layout"
LAYOUT_COMPATIBLE = '"zmk,physical-layout"'

# &key_physical_attrs w h x y r rx ry   (centiunits / centidegrees)
# r may be "(-9000)"; "0 0 0" means no rotation.
_KEY_ATTRS = re.compile(
    r"&key_physical_attrs\s+(\d+)\s+(\d+)\s+(\d+)\s+(\d+)\s+"
    r"(?:(\(-?\d+\)|-?\d+)\s+(\d+)\s+(\d+)|0\s+0\s+0)"
)


def parse_key_attrs(block: str) -> list[PhysicalKey]:
    """Parse every well-formed key record in a ``keys`` cell body."""
    keys = []
    for m in _KEY_ATTRS.finditer(block):
        w, h, x, y, rot, rx, ry = m.groups()
        r = int(rot.strip("()")) / 100 if rot else 0.0
        keys.append(PhysicalKey(
            w=int(w) / 100,
            h=int(h) / 100,
            x=int(x) / 100,
            y=int(y) / 100,
            r=r,
            rx=int(rx) / 100 if rx else 0.0,
            ry=int(ry) / 100 if ry else 0.0,
        ))
    return keys


def _keys_between(text: str, start: int, end: int) -> list[PhysicalKey]:
    prop = find_property(text, "keys", start, end)
    if prop is None:
        return []
    body = cell_body(prop.value)
    return parse_key_attrs(body) if body is not None else []


def _chosen_label(ctx: ExtractionContext) -> str | None:
    for file_id, text in ctx.files.items():
        prop = find_property(text, CHOSEN_PROPERTY)
        if prop is None:
            continue
        m = re.match(r"\s*&([\w-]+)\s*$", prop.value)
        if m:
            log.info("Chosen physical layout &%s (in %s)", m.group(1), file_id)
            return m.group(1)
    return None


def _node_keys(
    ctx: ExtractionContext, label: str | None, text: str, body_start: int, body_end: int,
) -> list[PhysicalKey]:
    """Keys of one layout node.

    Looked up in the node body, then in ``&label { ... }`` overrides in
    any file, then in the nearest ``keys`` after the node in its own file.
    """
    keys = _keys_between(text, body_start, body_end)
    if keys:
        return keys
    if label:
        for file_id, other in ctx.files.items():
            for override in iter_overrides(other, label):
                keys = _keys_between(other, override.body_start, override.body_end)
                if keys:
                    log.info("Keys for &%s found in override in %s", label, file_id)
                    return keys
    return _keys_between(text, body_end, len(text))


def extract_physical_layout(ctx: ExtractionContext) -> list[PhysicalKey]:
    """Fill ``ctx.physical_keys`` and return them (empty if nothing found)."""
    label = _chosen_label(ctx)
    if label:
        for file_id, text in ctx.files.items():
            node = find_node(text, label)
            if node is None:
                continue
            keys = _node_keys(ctx, label, text, node.body_start, node.body_end)
            if keys:
                log.info("Parsed %d keys from &%s in %s", len(keys), label, file_id)
                ctx.physical_keys = keys
                return keys

    log.info("No keys via chosen label, trying compatible = %s", LAYOUT_COMPATIBLE)
    for file_id, text in ctx.files.items():
        for prop in iter_properties(text, "compatible"):
            if LAYOUT_COMPATIBLE not in prop.value:
                continue
            brace = enclosing_start(text, prop.start)
            owner = node_label(text, brace) if brace >= 0 else None
            keys = _node_keys(ctx, owner, text, prop.end, enclosing_end(text, prop.end))
            if keys:
                log.info("Parsed %d keys from physical-layout node in %s",
                         len(keys), file_id)
                ctx.physical_keys = keys
                return keys

    log.warning("No physical layout found")
    return []
