from __future__ import annotations

from pathlib import Path

import pytest

from volumen import (
    ParseError,
    ParseResultError,
    ParseResultSuccess,
    UnsupportedLanguageError,
    parse,
    parse_file,
    parse_files,
    parse_source,
    register_extension,
)
from volumen.languages import dialect_for, reset_extensions


def test_unsupported_extension() -> None:
    res = parse('prompt = "x"', "notes.txt")
    assert isinstance(res, ParseResultError)
    assert res.state == "error"
    assert res.message == "Unsupported file extension for file: notes.txt"


def test_parse_source_raises() -> None:
    with pytest.raises(UnsupportedLanguageError) as e:
        parse_source('prompt = "x"', file="notes.txt")
    assert "notes.txt" in str(e.value)
    assert "hint:" in str(e.value)


def test_syntax_error_is_reported_with_position() -> None:
    with pytest.raises(ParseError) as e:
        parse_source('prompt = "abc\n', file="bad.py")
    assert e.value.position is not None
    assert str(e.value).startswith("bad.py:")


@pytest.mark.parametrize(
    ("filename", "source"),
    [
        ("a.py", 'prompt = "abc\n'),
        ("a.ts", 'const prompt = "abc;\n'),
        ("a.tsx", 'const prompt = "abc;\n'),
        ("a.rb", 'prompt = "abc\n'),
        ("a.php", "<?php\n$prompt = <<<EOT\nHello\n"),
        ("a.go", 'package main\n\nvar prompt = "abc\n'),
        ("a.java", 'class A { String prompt = "abc; }\n'),
        ("a.cs", 'class A { string prompt = "abc; }\n'),
    ],
)
def test_unterminated_string_is_a_syntax_error(filename: str, source: str) -> None:
    res = parse(source, filename)
    assert isinstance(res, ParseResultError)
    assert res.message.startswith("Syntax error at line")


@pytest.mark.parametrize(
    ("filename", "language"),
    [
        ("a.py", "python"),
        ("a.pyi", "python"),
        ("a.js", "typescript"),
        ("a.MTS", "typescript"),
        ("a.jsx", "tsx"),
        ("a.tsx", "tsx"),
        ("a.rb", "ruby"),
        ("a.php", "php"),
        ("a.go", "go"),
        ("a.java", "java"),
        ("a.cs", "csharp"),
    ],
)
def test_dispatch_by_extension(filename: str, language: str) -> None:
    assert dialect_for(filename).name == language


def test_register_extension() -> None:
    try:
        register_extension(".pyw", "python")
        res = parse('prompt = "x"\n', "script.pyw")
        assert isinstance(res, ParseResultSuccess)
        assert len(res.prompts) == 1
    finally:
        reset_extensions()
    assert parse('prompt = "x"\n', "script.pyw").state == "error"


def test_register_unknown_language() -> None:
    with pytest.raises(ValueError):
        register_extension(".x", "cobol")


def test_success_result() -> None:
    res = parse('prompt = "x"\n', "a.py")
    assert res.state == "success"
    assert res.prompts[0].file == "a.py"


def test_parse_file_and_files(tmp_path: Path) -> None:
    good = tmp_path / "good.py"
    good.write_text('system_prompt = "Be brief"\n', encoding="utf-8")
    bad = tmp_path / "bad.txt"
    bad.write_text("hello\n", encoding="utf-8")
    broken = tmp_path / "broken.ts"
    broken.write_text("const prompt = `oops\n", encoding="utf-8")

    single = parse_file(good)
    assert isinstance(single, ParseResultSuccess)
    assert single.prompts[0].file == str(good.resolve())

    res = parse_files([good, bad, broken, tmp_path / "missing.py"])
    assert set(res) == {str(p.resolve()) for p in (good, bad, broken, tmp_path / "missing.py")}
    assert res[str(good.resolve())].state == "success"
    assert res[str(bad.resolve())].state == "error"
    assert res[str(broken.resolve())].state == "error"
    assert res[str((tmp_path / "missing.py").resolve())].state == "error"
