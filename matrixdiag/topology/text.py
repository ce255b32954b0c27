"""Comment stripping and a small structural scanner for devicetree text.

Devicetree sources (``.dtsi`` / ``.overlay`` / ``.keymap``) are scanned
structurally rather than by long regexes:

  strip_comments   blank out ``//``, ``/* */`` and ``#`` comments in place
  iter_properties  every ``name = ... ;`` assignment (value up to its ``;``)
  cell_body        the text between the outer ``<`` and ``>`` of a value
  find_node        the ``{ ... }`` body of a labelled node
  enclosing_end    end of the innermost block containing a position
  iter_overrides   ``&label { ... }`` bodies that extend a labelled node

Positions returned by all helpers index into the text they were given.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Iterator


@dataclass(frozen=True)
class Property:
    """A ``name = value;`` assignment found in the text."""

    name: str
    start: int          # index of the first character of the name
    end: int            # index just past the terminating ';'
    value: str          # raw text between '=' and ';'


@dataclass(frozen=True)
class NodeSpan:
    """A labelled node ``label: name { ... };``."""

    label: str
    name: str
    start: int          # index of the label
    body_start: int     # index just past '{'
    body_end: int       # index of the matching '}' (or len(text) if unbalanced)


# ── Comments ───────────────────────────────────────────────────────


def strip_comments(text: str) -> str:
    """Replace every comment with spaces, keeping newlines in place.

    Handles ``// line``, ``/* block */`` and ``# line`` comments.  A
    double-quoted string is copied verbatim up to its closing quote or
    the end of its line, so ``"a//b"`` survives.
    """
    out: list[str] = []
    i = 0
    n = len(text)
    while i < n:
        ch = text[i]
        if ch == '"':
            j = i + 1
            while j < n and text[j] not in '"\n':
                j += 2 if text[j] == "\\" else 1
            j = min(j + 1 if j < n and text[j] == '"' else j, n)
            out.append(text[i:j])
            i = j
        elif text.startswith("/*", i):
            j = text.find("*/", i + 2)
            j = n if j < 0 else j + 2
            out.append(_blank(text[i:j]))
            i = j
        elif ch == "#" or text.startswith("//", i):
            j = text.find("\n", i)
            j = n if j < 0 else j
            out.append(" " * (j - i))
            i = j
        else:
            out.append(ch)
            i += 1
    return "".join(out)


def _blank(chunk: str) -> str:
    return "".join("\n" if c == "\n" else " " for c in chunk)


# ── Properties ─────────────────────────────────────────────────────


def _property_regex(name: str) -> re.Pattern:
    # The name must not continue a longer identifier ("input-gpios" is
    # not "gpios", "keymap" is not "map").
    return re.compile(r"(?<![\w,.#&-])" + re.escape(name) + r"\s*=")


def _statement_end(text: str, pos: int, limit: int) -> int:
    """Index of the first ';' at or after *pos* outside quotes, or -1."""
    i = pos
    in_str = False
    while i < limit:
        ch = text[i]
        if in_str:
            if ch == "\\":
                i += 1
            elif ch == '"':
                in_str = False
        elif ch == '"':
            in_str = True
        elif ch == ";":
            return i
        i += 1
    return -1


def iter_properties(
    text: str, name: str, start: int = 0, end: int | None = None,
) -> Iterator[Property]:
    """Yield every ``name = ...;`` assignment between *start* and *end*.

    Unterminated assignments (no ``;`` before *end*) are skipped.
    """
    limit = len(text) if end is None else end
    for m in _property_regex(name).finditer(text, start, limit):
        stop = _statement_end(text, m.end(), limit)
        if stop < 0:
            continue
        yield Property(name=name, start=m.start(), end=stop + 1,
                       value=text[m.end():stop])


def find_property(
    text: str, name: str, start: int = 0, end: int | None = None,
) -> Property | None:
    """Return the first ``name = ...;`` assignment, or None."""
    return next(iter_properties(text, name, start, end), None)


def has_property(text: str, name: str) -> bool:
    return find_property(text, name) is not None


def cell_body(value: str) -> str | None:
    """Return the text inside ``< ... >`` for a cell-array value.

    Returns None when the value is not a cell array (does not start with
    '<').  Multiple groups (``<a>, <b>``) are returned as one span.
    """
    v = value.strip()
    if not v.startswith("<"):
        return None
    close = v.rfind(">")
    if close <= 0:
        return None
    return v[1:close]


def compatible_with(text: str, marker: str) -> bool:
    """True if any ``compatible`` property lists *marker*."""
    quoted = f'"{marker}"'
    return any(quoted in p.value for p in iter_properties(text, "compatible"))


# ── Nodes and blocks ───────────────────────────────────────────────


def enclosing_end(text: str, pos: int) -> int:
    """Index of the '}' closing the block that contains *pos*.

    Returns ``len(text)`` when the block is never closed.
    """
    depth = 0
    i = pos
    n = len(text)
    in_str = False
    while i < n:
        ch = text[i]
        if in_str:
            if ch == "\\":
                i += 1
            elif ch == '"':
                in_str = False
        elif ch == '"':
            in_str = True
        elif ch == "{":
            depth += 1
        elif ch == "}":
            if depth == 0:
                return i
            depth -= 1
        i += 1
    return n


def find_node(text: str, label: str) -> NodeSpan | None:
    """Locate ``label: node-name {`` and return its body span."""
    pattern = re.compile(
        r"(?<![\w-])" + re.escape(label) + r"\s*:\s*([\w,@.-]+)\s*\{")
    m = pattern.search(text)
    if m is None:
        return None
    body_start = m.end()
    return NodeSpan(
        label=label,
        name=m.group(1),
        start=m.start(),
        body_start=body_start,
        body_end=enclosing_end(text, body_start),
    )


def enclosing_start(text: str, pos: int) -> int:
    """Index of the '{' opening the block that contains *pos*, or -1."""
    depth = 0
    for i in range(pos - 1, -1, -1):
        ch = text[i]
        if ch == "}":
            depth += 1
        elif ch == "{":
            if depth == 0:
                return i
            depth -= 1
    return -1


def node_label(text: str, brace: int) -> str | None:
    """Label of the node whose body opens at *brace* (``label: name {``)."""
    m = re.search(r"(?<![\w-])([\w-]+)\s*:\s*[\w,@.-]+\s*$", text[:brace])
    return m.group(1) if m else None


def iter_overrides(text: str, label: str) -> Iterator[NodeSpan]:
    """Yield every ``&label { ... }`` reference-node body."""
    pattern = re.compile(r"&" + re.escape(label) + r"\s*\{")
    for m in pattern.finditer(text):
        yield NodeSpan(
            label=label,
            name=f"&{label}",
            start=m.start(),
            body_start=m.end(),
            body_end=enclosing_end(text, m.end()),
        )
