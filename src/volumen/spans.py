from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True, slots=True)
class Position:
    """A concrete source position.

    Offsets are 0-based bytes; line/column are 1-based for user-facing messages.
    """

    offset: int
    line: int
    column: int


@dataclass(frozen=True, slots=True)
class Span:
    """Half-open byte span [start, end) into a UTF-8 source buffer."""

    start: int
    end: int

    def __len__(self) -> int:
        return self.end - self.start

    def contains(self, other: Span) -> bool:
        return self.start <= other.start and other.end <= self.end

    def slice(self, src: bytes) -> str:
        return src[self.start : self.end].decode("utf-8", errors="replace")


@dataclass(frozen=True, slots=True)
class SpanShape:
    """A literal's full extent (outer) and its delimiter-stripped content (inner)."""

    outer: Span
    inner: Span

    @classmethod
    def of(cls, outer: tuple[int, int], inner: tuple[int, int] | None = None) -> SpanShape:
        o = Span(*outer)
        return cls(outer=o, inner=Span(*inner) if inner is not None else o)

    @classmethod
    def zero(cls) -> SpanShape:
        return _ZERO

    def is_zero(self) -> bool:
        return self == _ZERO


_ZERO = SpanShape(outer=Span(0, 0), inner=Span(0, 0))


def position_at(src: bytes, offset: int) -> Position:
    offset = max(0, min(offset, len(src)))
    line = src.count(b"\n", 0, offset) + 1
    line_start = src.rfind(b"\n", 0, offset) + 1
    return Position(offset=offset, line=line, column=offset - line_start + 1)
