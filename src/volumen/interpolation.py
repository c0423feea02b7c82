"""Embedded expressions inside string literals.

Grammars that expose interpolations as child nodes (template substitutions,
f-string and C# interpolations) go through `var_from_node`. PHP and Ruby
interpolation is recognized from the raw text with depth-counted braces.
"""

from __future__ import annotations

from .model import PromptVar
from .spans import SpanShape

_WS = b" \t\r\n"


def _trim(src: bytes, start: int, end: int) -> tuple[int, int]:
    while start < end and src[start] in _WS:
        start += 1
    while end > start and src[end - 1] in _WS:
        end -= 1
    return start, end


def make_var(src: bytes, outer: tuple[int, int], inner: tuple[int, int]) -> PromptVar:
    exp = src[outer[0] : outer[1]].decode("utf-8", errors="replace")
    return PromptVar(exp=exp, span=SpanShape.of(outer, inner))


def var_from_node(
    src: bytes,
    start: int,
    end: int,
    *,
    open_len: int,
    close_len: int = 1,
    expression: tuple[int, int] | None = None,
) -> PromptVar:
    """A var for a delimited interpolation node such as `{name}` or `${ value }`.

    `expression` is the span of the wrapped expression when the grammar
    exposes it; otherwise the delimiters are stripped and whitespace trimmed.
    """
    if expression is not None:
        inner = expression
    else:
        inner = _trim(src, min(start + open_len, end), max(end - close_len, start))
    return make_var(src, (start, end), inner)


def match_brace(src: bytes, open_idx: int, end: int) -> int | None:
    """Index of the `}` closing the `{` at `open_idx`, or None if unbalanced."""
    depth = 0
    k = open_idx
    while k < end:
        c = src[k]
        if c == 0x5C:  # backslash
            k += 2
            continue
        if c == 0x7B:
            depth += 1
        elif c == 0x7D:
            depth -= 1
            if depth == 0:
                return k
        k += 1
    return None


def _ident_end(src: bytes, i: int, end: int) -> int:
    while i < end and (chr(src[i]).isalnum() or src[i] == 0x5F or src[i] >= 0x80):
        i += 1
    return i


def _ident_start(src: bytes, i: int, end: int) -> bool:
    return i < end and (chr(src[i]).isalpha() or src[i] == 0x5F or src[i] >= 0x80)


def scan_ruby(src: bytes, start: int, end: int) -> list[PromptVar]:
    """`#{expr}`, plus the short `#@ivar`, `#@@cvar` and `#$global` forms."""
    out: list[PromptVar] = []
    i = start
    while i < end:
        c = src[i]
        if c == 0x5C:
            i += 2
            continue
        if c == 0x23 and i + 1 < end:  # '#'
            nxt = src[i + 1]
            if nxt == 0x7B:
                close = match_brace(src, i + 1, end)
                if close is None:
                    break
                out.append(make_var(src, (i, close + 1), _trim(src, i + 2, close)))
                i = close + 1
                continue
            if nxt in b"@$":
                j = i + 2
                if nxt == 0x40 and j < end and src[j] == 0x40:
                    j += 1
                if _ident_start(src, j, end):
                    k = _ident_end(src, j, end)
                    out.append(make_var(src, (i, k), (i + 1, k)))
                    i = k
                    continue
        i += 1
    return out


def scan_php(src: bytes, start: int, end: int) -> list[PromptVar]:
    """`{$expr}`, `${name}` and simple `$name`, `$name->prop`, `$name[key]`."""
    out: list[PromptVar] = []
    i = start
    while i < end:
        c = src[i]
        if c == 0x5C:
            i += 2
            continue
        if c == 0x7B and i + 1 < end and src[i + 1] == 0x24:  # "{$"
            close = match_brace(src, i, end)
            if close is None:
                break
            out.append(make_var(src, (i, close + 1), _trim(src, i + 1, close)))
            i = close + 1
            continue
        if c == 0x24 and i + 1 < end and src[i + 1] == 0x7B:  # "${"
            close = match_brace(src, i + 1, end)
            if close is None:
                break
            out.append(make_var(src, (i, close + 1), _trim(src, i + 2, close)))
            i = close + 1
            continue
        if c == 0x24 and _ident_start(src, i + 1, end):
            k = _ident_end(src, i + 1, end)
            if src[k : k + 2] == b"->" and _ident_start(src, k + 2, end):
                k = _ident_end(src, k + 2, end)
            elif k < end and src[k] == 0x5B:
                close = src.find(b"]", k, end)
                if close > k + 1:
                    k = close + 1
            out.append(make_var(src, (i, k), (i, k)))
            i = k
            continue
        i += 1
    return out
