from __future__ import annotations

from bisect import bisect_right
from collections.abc import Iterable

import tree_sitter

from .annotation import comment_inner_offsets, match_annotation
from .grammar import iter_nodes
from .model import PromptAnnotation
from .spans import SpanShape


class CommentCollector:
    """Index of every comment in one file, sorted by start offset.

    Leading blocks are runs of comments separated from each other, and from
    the statement they precede, by whitespace that contains no blank line.
    """

    def __init__(self, src: bytes, ranges: Iterable[tuple[int, int]]) -> None:
        self.src = src
        self.ranges = sorted(ranges)
        self._starts = [s for s, _ in self.ranges]

    @classmethod
    def from_tree(
        cls, src: bytes, root: tree_sitter.Node, comment_types: frozenset[str]
    ) -> CommentCollector:
        ranges = [(n.start_byte, n.end_byte) for n in iter_nodes(root) if n.type in comment_types]
        return cls(src, ranges)

    def _text(self, start: int, end: int) -> str:
        return self.src[start:end].decode("utf-8", errors="replace")

    def _adjacent(self, start: int, end: int) -> bool:
        gap = self.src[start:end]
        return gap.strip() == b"" and gap.count(b"\n") < 2

    def _opens_line(self, start: int, floor: int) -> bool:
        line_start = self.src.rfind(b"\n", 0, start) + 1
        return self.src[max(line_start, floor) : start].strip() == b""

    def _leading_block(self, stmt_start: int, floor: int = 0) -> list[int]:
        i = bisect_right(self._starts, stmt_start) - 1
        # Skip comments that overlap the statement itself.
        while i >= 0 and self.ranges[i][1] > stmt_start:
            i -= 1
        block: list[int] = []
        anchor = stmt_start
        while i >= 0:
            start, end = self.ranges[i]
            if start < floor or not self._adjacent(end, anchor) or not self._opens_line(start, floor):
                break
            block.append(i)
            anchor = start
            i -= 1
        block.reverse()
        return block

    def _qualifies(self, block: list[int]) -> bool:
        return any(match_annotation(self._text(*self.ranges[i])) for i in block)

    def collect_adjacent_leading(self, stmt_start: int, floor: int = 0) -> PromptAnnotation | None:
        block = self._leading_block(stmt_start, floor)
        if not block or not self._qualifies(block):
            return None
        return self._annotation(block)

    def leading_start(self, stmt_start: int, floor: int = 0) -> int | None:
        block = self._leading_block(stmt_start, floor)
        if not block or not self._qualifies(block):
            return None
        return self.ranges[block[0]][0]

    def collect_inline_prompt(self, start: int, end: int) -> list[PromptAnnotation]:
        out: list[PromptAnnotation] = []
        i = bisect_right(self._starts, start - 1)
        while i < len(self.ranges) and self.ranges[i][0] < end:
            if match_annotation(self._text(*self.ranges[i])):
                out.append(self._annotation([i]))
            i += 1
        return out

    def _annotation(self, block: list[int]) -> PromptAnnotation:
        spans: list[SpanShape] = []
        for i in block:
            spans.extend(self._line_shapes(*self.ranges[i]))
        start = self.ranges[block[0]][0]
        end = self.ranges[block[-1]][1]
        return PromptAnnotation(spans=tuple(spans), exp=self._text(start, end))

    def _line_shapes(self, start: int, end: int) -> list[SpanShape]:
        """One shape per physical line of a single comment."""
        raw = self.src[start:end]
        if b"\n" not in raw:
            lo, hi = comment_inner_offsets(self._text(start, end))
            return [SpanShape.of((start, end), _byte_offsets(raw, lo, hi, start))]

        lines: list[tuple[int, int]] = []
        pos = start
        while pos <= end:
            nl = self.src.find(b"\n", pos, end)
            stop = end if nl < 0 else nl
            line_end = stop - 1 if stop > pos and self.src[stop - 1] == 0x0D else stop
            lines.append((pos, line_end))
            if nl < 0:
                break
            pos = nl + 1

        block = raw.startswith(b"/*")
        shapes: list[SpanShape] = []
        for n, (ls, le) in enumerate(lines):
            while n > 0 and ls < le and self.src[ls] in b" \t":
                ls += 1
            lo, hi = ls, le
            line = self.src[ls:le]
            if n == 0:
                if line.startswith(b"/**"):
                    lo += 3
                elif line.startswith(b"/*"):
                    lo += 2
                elif line.startswith(b"=begin"):
                    lo += 6
                elif line.startswith((b'"""', b"'''")):
                    lo += 3
            elif block and line.startswith(b"*") and not line.startswith(b"*/"):
                lo += 1
            if n == len(lines) - 1:
                if block and line.endswith(b"*/"):
                    hi -= 2
                elif line.startswith(b"=end"):
                    lo = hi
                elif line.endswith((b'"""', b"'''")):
                    hi -= 3
            lo = min(lo, hi)
            shapes.append(SpanShape.of((ls, le), (lo, hi)))
        return shapes


def _byte_offsets(raw: bytes, lo: int, hi: int, base: int) -> tuple[int, int]:
    # comment_inner_offsets works on text; convert back to byte offsets.
    text = raw.decode("utf-8", errors="replace")
    return (
        base + len(text[:lo].encode("utf-8")),
        base + len(text[:hi].encode("utf-8")),
    )
