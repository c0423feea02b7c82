"""TOML config loading for volumen.toml and pyproject.toml's [tool.volumen]."""

from __future__ import annotations

import fnmatch
import tomllib
from dataclasses import dataclass, field
from pathlib import Path

from .languages import DIALECTS, register_extension

CONFIG_NAME = "volumen.toml"


@dataclass
class VolumenConfig:
    extensions: dict[str, str] = field(default_factory=dict)  # ".pyw" -> "python"
    exclude: list[str] = field(default_factory=list)
    path: Path | None = None

    def apply(self) -> None:
        for ext, language in self.extensions.items():
            register_extension(ext, language)

    def is_excluded(self, path: Path) -> bool:
        rel = path
        if self.path is not None:
            try:
                rel = path.resolve().relative_to(self.path.parent.resolve())
            except ValueError:
                rel = path
        candidates = (rel.as_posix(), path.name)
        return any(fnmatch.fnmatch(c, pat) for pat in self.exclude for c in candidates)


def _volumen_table(path: Path) -> dict | None:
    with open(path, "rb") as f:
        data = tomllib.load(f)
    if path.name == "pyproject.toml":
        return data.get("tool", {}).get("volumen")
    return data


def find_config(start_path: Path | None = None) -> Path | None:
    """Walk up directories to the nearest volumen.toml, or pyproject.toml with
    a [tool.volumen] table. Returns None when there is none."""
    path = (start_path or Path.cwd()).resolve()
    if path.is_file():
        path = path.parent
    while True:
        candidate = path / CONFIG_NAME
        if candidate.exists():
            return candidate
        pyproject = path / "pyproject.toml"
        if pyproject.exists() and _volumen_table(pyproject) is not None:
            return pyproject
        parent = path.parent
        if parent == path:
            return None
        path = parent


def load_config(path: Path | None) -> VolumenConfig:
    """Parse a config file into a VolumenConfig; None gives the defaults."""
    if path is None:
        return VolumenConfig()
    data = _volumen_table(path) or {}
    config = VolumenConfig(path=path)

    exts = data.get("extensions", {})
    if not isinstance(exts, dict):
        raise ValueError(f"{path}: 'extensions' must be a table of extension = language")
    for ext, language in exts.items():
        if language not in DIALECTS:
            raise ValueError(
                f"{path}: unknown language {language!r} for {ext!r}; expected one of {sorted(DIALECTS)}"
            )
        config.extensions[ext if ext.startswith(".") else "." + ext] = language

    exclude = data.get("exclude", [])
    if not isinstance(exclude, list) or not all(isinstance(p, str) for p in exclude):
        raise ValueError(f"{path}: 'exclude' must be a list of glob patterns")
    config.exclude = list(exclude)
    return config
