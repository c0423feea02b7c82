from __future__ import annotations

from volumen.interpolation import match_brace, scan_php, scan_ruby, var_from_node


def test_var_from_node_strips_delimiters() -> None:
    src = b"`a ${ name } b`"
    var = var_from_node(src, 3, 12, open_len=2)
    assert var.exp == "${ name }"
    assert var.span.inner.slice(src) == "name"


def test_match_brace_nested() -> None:
    src = b"{a {b} c}"
    assert match_brace(src, 0, len(src)) == 8
    assert match_brace(b"{open", 0, 5) is None


def test_ruby_interpolation() -> None:
    src = b'"a #{x} b"'
    (var,) = scan_ruby(src, 1, 9)
    assert var.exp == "#{x}"
    assert var.span.inner.slice(src) == "x"


def test_ruby_short_forms() -> None:
    src = b'"hi #@name and #@@count and #$g"'
    exps = [v.exp for v in scan_ruby(src, 1, len(src) - 1)]
    assert exps == ["#@name", "#@@count", "#$g"]


def test_ruby_escaped_hash_is_literal() -> None:
    src = b'"\\#{x}"'
    assert scan_ruby(src, 1, len(src) - 1) == []


def test_php_simple_and_complex() -> None:
    src = b'"Hi $name, {$user->name} ${x}!"'
    vars = scan_php(src, 1, len(src) - 1)
    assert [v.exp for v in vars] == ["$name", "{$user->name}", "${x}"]
    assert vars[1].span.inner.slice(src) == "$user->name"
    assert vars[2].span.inner.slice(src) == "x"


def test_php_property_and_index() -> None:
    src = b'"$a->b $c[0]"'
    assert [v.exp for v in scan_php(src, 1, len(src) - 1)] == ["$a->b", "$c[0]"]


def test_php_escaped_dollar() -> None:
    src = b'"\\$x"'
    assert scan_php(src, 1, len(src) - 1) == []
