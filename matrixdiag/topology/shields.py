"""Shield resolution — named hardware variants from build.yaml.

``build.yaml`` lists what the firmware CI builds::

    include:
      - board: nice_nano_v2
        shield: corne_left nice_view_adapter
      - board: nice_nano_v2
        shield: [corne_right, "nice_view"]
      - board: nice_nano_v2
        shield: settings_reset

Each entry's first token is the shield base name.  Every other file is
attributed to a shield by filename substring; files that match no shield
are shared by all of them.
"""

from __future__ import annotations

import logging
import re

from matrixdiag.config import BUILD_CONFIG_NAME, RESET_SHIELD

from .context import ExtractionContext


log = logging.getLogger(__name__)

_SHIELD_LINE = re.compile(r"shield:\s*(.*)")


def parse_shield_names(text: str) -> list[str]:
    """Return shield base names declared in one build-configuration text."""
    names: list[str] = []
    for line in text.splitlines():
        m = _SHIELD_LINE.search(line)
        if m is None:
            continue
        value = re.sub(r"[\[\]]", "", m.group(1).strip())
        for entry in value.split(","):
            tokens = re.sub(r"[\"']", "", entry).split()
            if not tokens:
                continue
            base = tokens[0]
            if base != RESET_SHIELD and base not in names:
                names.append(base)
    return names


def resolve_shields(ctx: ExtractionContext) -> list[str]:
    """Collect shield names from every build.yaml and seed their buckets."""
    for file_id, text in ctx.files.items():
        if not file_id.endswith(BUILD_CONFIG_NAME):
            continue
        log.info("Found build config: %s", file_id)
        for name in parse_shield_names(text):
            if name in ctx.shields:
                continue
            ctx.shields.append(name)
            ctx.bucket(name)
            log.info("Identified shield: %s", name)
    return ctx.shields


def owning_shield(file_id: str, shields: list[str]) -> str | None:
    """The longest shield name contained in *file_id*, or None (common file).

    Ties keep the earlier-discovered shield.
    """
    best: str | None = None
    for name in shields:
        if name in file_id and (best is None or len(name) > len(best)):
            best = name
    return best


def target_shields(file_id: str, shields: list[str]) -> list[str]:
    """Shields a file applies to: its owner, or every shield if common."""
    owner = owning_shield(file_id, shields)
    return [owner] if owner else list(shields)
