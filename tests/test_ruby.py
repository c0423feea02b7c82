from __future__ import annotations

from volumen import parse_source
from volumen.testing import cut, interpolate


def _prompts(src: str):
    return parse_source(src, file="prompts.rb")


def test_interpolated_string() -> None:
    src = '# @prompt\ngreeting = "Hello #{name}"\n'
    (p,) = _prompts(src)
    assert p.vars[0].exp == "#{name}"
    assert cut(src, p.vars[0].span.inner) == "name"
    assert interpolate(src, p) == "Hello {0}"


def test_single_quotes_do_not_interpolate() -> None:
    src = "user_prompt = 'Hello #{name}'\n"
    (p,) = _prompts(src)
    assert p.vars == ()
    assert interpolate(src, p) == "Hello #{name}"


def test_squiggly_heredoc() -> None:
    src = "system_prompt = <<~EOS\n  You are helpful.\nEOS\n"
    (p,) = _prompts(src)
    assert interpolate(src, p) == "  You are helpful.\n"
    assert p.enclosure.end >= p.span.outer.end
    assert cut(src, p.span.outer).endswith("EOS")


def test_percent_format() -> None:
    src = 'prompt = "Hi %s" % [name]\n'
    (p,) = _prompts(src)
    assert interpolate(src, p) == "Hi {0}"


def test_format_with_named_references() -> None:
    src = 'prompt = format("Hi %{who}", who: user)\n'
    (p,) = _prompts(src)
    assert [v.exp for v in p.vars] == ["user"]
    assert interpolate(src, p) == "Hi {0}"


def test_array_join() -> None:
    src = 'prompt = ["a", name].join(", ")\n'
    (p,) = _prompts(src)
    assert interpolate(src, p) == "a, {0}"


def test_first_assignment_defines_annotation() -> None:
    src = '# @prompt\nmsg = "a"\nmsg = "b #{x}"\n'
    first, second = _prompts(src)
    assert second.annotations == first.annotations
    assert interpolate(src, second) == "b {0}"


def test_method_scope() -> None:
    src = 'def build\n  # @prompt\n  text = "inside"\nend\n\ntext = "outside"\n'
    (p,) = _prompts(src)
    assert cut(src, p.span.inner) == "inside"
