"""Extraction context — the mutable state threaded through the extractors.

``build_topology`` creates one context per corpus load, hands it to each
extractor in turn, then freezes it into a ``KeyboardTopology``.  Nothing
here outlives a single build.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

from matrixdiag.config import COL2ROW

from .models import MatrixEntry, PhysicalKey
from .text import strip_comments


@dataclass
class ShieldBucket:
    """Per-shield accumulator.  Pin maps are keyed by ordinal."""

    name: str
    col_offset: int = 0
    row_offset: int = 0
    row: dict[int, str] = field(default_factory=dict)
    col: dict[int, str] = field(default_factory=dict)
    gpios: dict[int, str] = field(default_factory=dict)
    direct: dict[int, str] = field(default_factory=dict)
    interrupt: str | None = None
    declared_diode: str | None = None


@dataclass
class ExtractionContext:
    files: dict[str, str]                       # comment-free text, processing order
    shields: list[str] = field(default_factory=list)
    buckets: dict[str, ShieldBucket] = field(default_factory=dict)
    physical_keys: list[PhysicalKey] = field(default_factory=list)
    matrix_map: list[MatrixEntry] = field(default_factory=list)
    diode_direction: str = COL2ROW

    @classmethod
    def from_sources(cls, sources: Mapping[str, str]) -> ExtractionContext:
        """Normalize every file and fix the processing order.

        Files are processed in lexicographic order of their identifiers
        so every "first match" and "longest wins" rule is reproducible.
        """
        return cls(files={
            name: strip_comments(sources[name]) for name in sorted(sources)
        })

    def bucket(self, name: str) -> ShieldBucket:
        if name not in self.buckets:
            self.buckets[name] = ShieldBucket(name=name)
        return self.buckets[name]
