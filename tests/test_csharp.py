from __future__ import annotations

from volumen import parse_source
from volumen.testing import cut, interpolate


def _prompts(src: str):
    return parse_source(src, file="Prompts.cs")


def test_interpolated_string() -> None:
    src = (
        "class A {\n"
        "    void F() {\n"
        "        // @prompt\n"
        '        var greeting = $"Hello {name}!";\n'
        "    }\n"
        "}\n"
    )
    (p,) = _prompts(src)
    assert p.vars[0].exp == "{name}"
    assert cut(src, p.vars[0].span.inner) == "name"
    assert interpolate(src, p) == "Hello {0}!"


def test_string_format() -> None:
    src = 'class A {\n    void F() {\n        string prompt = string.Format("Hi {0}", user);\n    }\n}\n'
    (p,) = _prompts(src)
    assert interpolate(src, p) == "Hi {0}"
    assert p.vars[0].exp == "user"


def test_verbatim_string() -> None:
    src = 'class A {\n    void F() {\n        string prompt = @"Hello";\n    }\n}\n'
    (p,) = _prompts(src)
    assert cut(src, p.span.inner) == "Hello"


def test_naming_heuristic_on_field() -> None:
    src = 'class A { string userPrompt = "hi"; }\n'
    (p,) = _prompts(src)
    assert cut(src, p.span.inner) == "hi"
    assert p.annotations == ()


def test_inline_block_comment() -> None:
    src = 'class A {\n    void F() {\n        string p = /* @prompt */ "hi";\n    }\n}\n'
    (p,) = _prompts(src)
    assert cut(src, p.span.inner) == "hi"
    assert p.annotations[0].exp == "/* @prompt */"


def test_reassignment_carries_declaration_annotation() -> None:
    src = (
        "class A {\n"
        "    void F() {\n"
        "        // @prompt\n"
        '        string msg = "a";\n'
        '        msg = "b";\n'
        "    }\n"
        "}\n"
    )
    first, second = _prompts(src)
    assert cut(src, second.span.inner) == "b"
    assert second.annotations == first.annotations
    assert cut(src, second.enclosure) == 'msg = "b";'


def test_raw_string_keeps_its_delimiter_length() -> None:
    src = 'class A {\n    string prompt = """"He said """ ok"""";\n}\n'
    (p,) = _prompts(src)
    assert cut(src, p.span.inner) == 'He said """ ok'
