from __future__ import annotations

from pathlib import Path

import pytest

from volumen.config import find_config, load_config
from volumen.languages import EXTENSIONS, reset_extensions


def test_find_volumen_toml_upwards(tmp_path: Path) -> None:
    cfg = tmp_path / "volumen.toml"
    cfg.write_text('exclude = ["vendor/*"]\n', encoding="utf-8")
    nested = tmp_path / "a" / "b"
    nested.mkdir(parents=True)
    assert find_config(nested) == cfg


def test_find_pyproject_table(tmp_path: Path) -> None:
    cfg = tmp_path / "pyproject.toml"
    cfg.write_text('[tool.volumen]\nexclude = ["build/*"]\n', encoding="utf-8")
    assert find_config(tmp_path) == cfg
    assert load_config(cfg).exclude == ["build/*"]


def test_load_config(tmp_path: Path) -> None:
    cfg = tmp_path / "volumen.toml"
    cfg.write_text('exclude = ["vendor/*"]\n\n[extensions]\n".pyw" = "python"\nmjsx = "tsx"\n', encoding="utf-8")
    config = load_config(cfg)
    assert config.extensions == {".pyw": "python", ".mjsx": "tsx"}
    assert config.is_excluded(tmp_path / "vendor" / "lib.py")
    assert not config.is_excluded(tmp_path / "src" / "lib.py")
    try:
        config.apply()
        assert EXTENSIONS[".pyw"] == "python"
    finally:
        reset_extensions()
    assert ".pyw" not in EXTENSIONS


def test_unknown_language_is_rejected(tmp_path: Path) -> None:
    cfg = tmp_path / "volumen.toml"
    cfg.write_text('[extensions]\n".cob" = "cobol"\n', encoding="utf-8")
    with pytest.raises(ValueError):
        load_config(cfg)


def test_defaults() -> None:
    config = load_config(None)
    assert config.extensions == {}
    assert config.exclude == []
