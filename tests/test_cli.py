from __future__ import annotations

import json
from pathlib import Path

import pytest

from volumen.cli import main
from volumen.languages import reset_extensions


def test_text_output(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    f = tmp_path / "a.py"
    f.write_text('user_prompt = "Hello"\n', encoding="utf-8")
    assert main([str(f)]) == 0
    out = capsys.readouterr().out
    assert out.strip() == f"{f.resolve()}:1:15: Hello"


def test_json_output(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    f = tmp_path / "a.ts"
    f.write_text("const prompt = `Hi ${name}`;\n", encoding="utf-8")
    assert main([str(f), "--json"]) == 0
    payload = json.loads(capsys.readouterr().out)
    (res,) = payload.values()
    assert res["state"] == "success"
    assert res["prompts"][0]["vars"][0]["exp"] == "${name}"


def test_directory_walk_and_exclude(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    (tmp_path / "volumen.toml").write_text('exclude = ["vendor"]\n', encoding="utf-8")
    (tmp_path / "src").mkdir()
    (tmp_path / "vendor").mkdir()
    (tmp_path / "src" / "a.rb").write_text('prompt = "from src"\n', encoding="utf-8")
    (tmp_path / "vendor" / "b.rb").write_text('prompt = "from vendor"\n', encoding="utf-8")
    (tmp_path / "src" / "notes.txt").write_text("prompt\n", encoding="utf-8")
    try:
        assert main([str(tmp_path), "--json"]) == 0
    finally:
        reset_extensions()
    payload = json.loads(capsys.readouterr().out)
    assert list(payload) == [str((tmp_path / "src" / "a.rb").resolve())]


def test_failure_exit_code(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    bad = tmp_path / "bad.py"
    bad.write_text('prompt = "oops\n', encoding="utf-8")
    assert main([str(bad)]) == 1


def test_explicit_config(tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
    cfg = tmp_path / "custom.toml"
    cfg.write_text('[extensions]\n".pyw" = "python"\n', encoding="utf-8")
    f = tmp_path / "tool.pyw"
    f.write_text('prompt = "hi"\n', encoding="utf-8")
    try:
        assert main([str(f), "--config", str(cfg)]) == 0
    finally:
        reset_extensions()
    assert capsys.readouterr().out.strip().endswith(": hi")
