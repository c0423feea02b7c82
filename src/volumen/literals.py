"""Outer/inner span shapes for the string literal forms of every dialect.

All functions take the UTF-8 source buffer and byte offsets, and clamp what
they compute to the literal's own range, so a truncated or unterminated
literal still yields a usable (if approximate) shape.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from .spans import SpanShape


@dataclass(frozen=True, slots=True)
class LiteralShape:
    span: SpanShape
    # Whether the language strips incidental leading whitespace from the body.
    dedent: bool = False


_QUOTES = b"\"'`"
_PAIRS = {ord("("): ord(")"), ord("["): ord("]"), ord("{"): ord("}"), ord("<"): ord(">")}
_LABEL = re.compile(rb"""(?P<q>['"]?)(?P<label>[A-Za-z_][A-Za-z0-9_]*)(?P=q)""")
_TERMINATORS = b";,)."


def _clamp(start: int, end: int, lo: int, hi: int) -> tuple[int, int]:
    start = max(lo, min(start, hi))
    end = max(start, min(end, hi))
    return start, end


def quoted(src: bytes, start: int, end: int, *, max_run: int | None = 3) -> LiteralShape:
    """Quoted literal with an optional prefix (`f"`, `rb'`, `$"`, `@"`, `$@"`).

    A delimiter of three or more quote characters marks a triple-quoted or
    raw block, which always strips incidental indentation. The delimiter is
    the shorter of the opening and closing quote runs, capped at `max_run`;
    pass None for raw strings whose delimiter length is variable.
    """
    q = start
    while q < end and src[q] not in _QUOTES:
        q += 1
    if q >= end:
        return LiteralShape(SpanShape.of((start, end)))
    quote = src[q]
    total = end - q
    run = 1
    while run < total and src[q + run] == quote:
        run += 1
    close_run = 0
    while close_run < total and src[end - 1 - close_run] == quote:
        close_run += 1
    width = min(run, close_run, total // 2)
    if max_run is not None:
        width = min(width, max_run)
    dedent = width >= 3
    if not dedent:
        width = 1
    close = end
    if src[end - width : end] == bytes([quote]) * width and end - width >= q + width:
        close = end - width
    inner = _clamp(q + width, close, start, end)
    return LiteralShape(SpanShape.of((start, end), inner), dedent=dedent)


def percent(src: bytes, start: int, end: int) -> LiteralShape:
    """Ruby percent literals: `%q(...)`, `%Q[...]`, `%(...)`, `%|...|`."""
    i = start + 1
    if i < end and chr(src[i]).isalpha():
        i += 1
    if i >= end:
        return LiteralShape(SpanShape.of((start, end)))
    opener = src[i]
    closer = _PAIRS.get(opener, opener)
    close = end - 1 if end - 1 > i and src[end - 1] == closer else end
    return LiteralShape(SpanShape.of((start, end), _clamp(i + 1, close, start, end)))


def heredoc(
    src: bytes,
    start: int,
    limit: int,
    *,
    marker: bytes,
    keep_final_newline: bool,
    indent_dedents: bool,
) -> LiteralShape:
    """Heredoc/nowdoc starting at `start` (the `<<` or `<<<` marker).

    The body begins after the first newline following the opening marker and
    ends at the line whose trimmed text is the label, optionally followed by a
    statement terminator. `limit` bounds the search for the closing label.
    Dedenting applies to the squiggly `<<~` form, and to an indented closing
    label when `indent_dedents` is set.
    """
    i = start + len(marker)
    squiggly = False
    if i < limit and src[i] in b"~-":
        squiggly = src[i] == ord("~")
        i += 1
    while i < limit and src[i] in b" \t":
        i += 1
    m = _LABEL.match(src, i, limit)
    newline = src.find(b"\n", i, limit)
    if m is None or newline < 0:
        return LiteralShape(SpanShape.of((start, limit)))
    label = m.group("label")
    body_start = newline + 1

    line_start = body_start
    while line_start < limit:
        line_end = src.find(b"\n", line_start, limit)
        if line_end < 0:
            line_end = limit
        line = src[line_start:line_end].rstrip(b"\r")
        stripped = line.lstrip(b" \t")
        rest = stripped[len(label) :].strip()
        if stripped.startswith(label) and (rest == b"" or rest[:1] in _TERMINATORS):
            indent = len(line) - len(stripped)
            body_end = line_start
            if not keep_final_newline and body_end > body_start:
                body_end -= 1
                if body_end > body_start and src[body_end - 1] == ord("\r"):
                    body_end -= 1
            outer_end = line_start + indent + len(label)
            return LiteralShape(
                SpanShape.of((start, outer_end), (body_start, body_end)),
                dedent=squiggly or (indent_dedents and indent > 0),
            )
        line_start = line_end + 1

    return LiteralShape(SpanShape.of((start, limit), _clamp(body_start, limit, start, limit)))
