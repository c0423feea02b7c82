from __future__ import annotations

from volumen.comments import CommentCollector
from volumen.spans import Span


def _collector(src: bytes, *comments: bytes) -> CommentCollector:
    ranges = []
    for c in comments:
        start = src.index(c)
        ranges.append((start, start + len(c)))
    return CommentCollector(src, ranges)


def test_leading_block_merges_adjacent_comments() -> None:
    src = b"# @prompt\n# extra\nmsg = 1\n"
    cc = _collector(src, b"# @prompt", b"# extra")
    ann = cc.collect_adjacent_leading(src.index(b"msg"))
    assert ann is not None
    assert ann.exp == "# @prompt\n# extra"
    assert [s.outer for s in ann.spans] == [Span(0, 9), Span(10, 17)]
    assert ann.spans[0].inner.slice(src) == " @prompt"
    assert cc.leading_start(src.index(b"msg")) == 0


def test_blank_line_breaks_adjacency() -> None:
    src = b"# @prompt\n\nmsg = 1\n"
    cc = _collector(src, b"# @prompt")
    assert cc.collect_adjacent_leading(src.index(b"msg")) is None
    assert cc.leading_start(src.index(b"msg")) is None


def test_block_without_marker_does_not_qualify() -> None:
    src = b"# hello\nmsg = 1\n"
    cc = _collector(src, b"# hello")
    assert cc.collect_adjacent_leading(src.index(b"msg")) is None


def test_trailing_comment_of_previous_line_is_not_leading() -> None:
    src = b"x = 1 # @prompt\nmsg = 2\n"
    cc = _collector(src, b"# @prompt")
    assert cc.collect_adjacent_leading(src.index(b"msg")) is None


def test_floor_limits_the_block() -> None:
    src = b"f(# @prompt\n  'x')"
    cc = _collector(src, b"# @prompt")
    arg = src.index(b"'x'")
    assert cc.collect_adjacent_leading(arg, floor=2) is not None
    assert cc.collect_adjacent_leading(arg, floor=src.index(b"\n")) is None


def test_inline_comment() -> None:
    src = b'msg = "x"  # @prompt\n'
    cc = _collector(src, b"# @prompt")
    (ann,) = cc.collect_inline_prompt(0, len(src) - 1)
    assert ann.exp == "# @prompt"
    assert cc.collect_inline_prompt(0, 9) == []


def test_block_comment_is_split_per_line() -> None:
    src = b"/* @prompt\n * second\n */\nconst x = 1;\n"
    cc = _collector(src, b"/* @prompt\n * second\n */")
    ann = cc.collect_adjacent_leading(src.index(b"const"))
    assert ann is not None
    assert len(ann.spans) == 3
    assert ann.spans[0].inner.slice(src) == " @prompt"
    assert ann.spans[1].inner.slice(src) == " second"
    assert len(ann.spans[2].inner) == 0
