"""Matrix transform extraction — ``map = <RC(r,c) ...>;`` and shield offsets."""

from __future__ import annotations

import logging
import re

from .context import ExtractionContext
from .models import MatrixEntry
from .shields import owning_shield
from .text import cell_body, find_property, iter_properties


log = logging.getLogger(__name__)

_RC = re.compile(r"RC\(\s*(\d+)\s*,\s*(\d+)\s*\)")


def parse_rc_map(body: str) -> list[MatrixEntry]:
    return [MatrixEntry(row=int(r), col=int(c)) for r, c in _RC.findall(body)]


def _int_cell(text: str, name: str) -> int | None:
    prop = find_property(text, name)
    if prop is None:
        return None
    m = re.fullmatch(r"\s*<\s*(\d+)\s*>\s*", prop.value)
    return int(m.group(1)) if m else None


def extract_matrix_transform(ctx: ExtractionContext) -> list[MatrixEntry]:
    """Pick the longest transform map and record per-shield offsets.

    Several files may carry a transform (a stale 36-key map next to the
    current 42-key one); the most complete map wins, earlier files win
    ties.
    """
    best: list[MatrixEntry] = []
    for file_id, text in ctx.files.items():
        for prop in iter_properties(text, "map"):
            body = cell_body(prop.value)
            if body is None:
                continue
            entries = parse_rc_map(body)
            if len(entries) > len(best):
                best = entries
                log.info("Matrix map in %s: %d entries", file_id, len(entries))

        owner = owning_shield(file_id, ctx.shields)
        if owner is None:
            continue
        bucket = ctx.bucket(owner)
        col_offset = _int_cell(text, "col-offset")
        if col_offset is not None:
            bucket.col_offset = col_offset
            log.info("col-offset %d for %s (in %s)", col_offset, owner, file_id)
        row_offset = _int_cell(text, "row-offset")
        if row_offset is not None:
            bucket.row_offset = row_offset
            log.info("row-offset %d for %s (in %s)", row_offset, owner, file_id)

    ctx.matrix_map = best
    return best
