"""Local source collector — reads a zmk-config checkout into a file map.

Identifiers are POSIX paths relative to the checkout root
("boards/shields/corne/corne_left.overlay"), which is what shield
attribution matches against.
"""

from __future__ import annotations

import logging
from pathlib import Path

from matrixdiag.topology.builder import is_source_file


log = logging.getLogger(__name__)


def load_sources(root: Path) -> dict[str, str]:
    """Read every recognized file under *root*, sorted by relative path.

    Unreadable files are skipped with a warning.  Hidden directories
    (``.git``, ``.github``) are not descended into.
    """
    files: dict[str, str] = {}
    for path in sorted(root.rglob("*")):
        rel = path.relative_to(root)
        if any(part.startswith(".") for part in rel.parts[:-1]):
            continue
        if not path.is_file() or not is_source_file(rel.as_posix()):
            continue
        try:
            files[rel.as_posix()] = path.read_text(encoding="utf-8", errors="replace")
        except OSError as exc:
            log.warning("Skipping %s: %s", rel, exc)
    log.info("Collected %d source files from %s", len(files), root)
    return files
