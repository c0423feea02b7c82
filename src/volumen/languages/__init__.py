from __future__ import annotations

from pathlib import PurePath

from ..errors import UnsupportedLanguageError
from .base import Dialect, Role
from .csharp import CSharpDialect
from .go import GoDialect
from .java import JavaDialect
from .php import PhpDialect
from .python import PythonDialect
from .ruby import RubyDialect
from .typescript import TypeScriptDialect

DIALECTS: dict[str, Dialect] = {
    d.name: d
    for d in (
        PythonDialect(),
        TypeScriptDialect("typescript", "typescript"),
        TypeScriptDialect("tsx", "tsx"),
        RubyDialect(),
        PhpDialect(),
        GoDialect(),
        JavaDialect(),
        CSharpDialect(),
    )
}

_DEFAULT_EXTENSIONS: dict[str, str] = {
    ".py": "python",
    ".pyi": "python",
    ".js": "typescript",
    ".mjs": "typescript",
    ".cjs": "typescript",
    ".ts": "typescript",
    ".mts": "typescript",
    ".cts": "typescript",
    ".jsx": "tsx",
    ".mjsx": "tsx",
    ".cjsx": "tsx",
    ".tsx": "tsx",
    ".rb": "ruby",
    ".ruby": "ruby",
    ".php": "php",
    ".go": "go",
    ".java": "java",
    ".cs": "csharp",
}

EXTENSIONS: dict[str, str] = dict(_DEFAULT_EXTENSIONS)


def register_extension(ext: str, language: str) -> None:
    """Route files ending in `ext` (e.g. ".pyw") to a known language."""
    if language not in DIALECTS:
        raise ValueError(f"unknown language {language!r}; expected one of {sorted(DIALECTS)}")
    if not ext.startswith("."):
        ext = "." + ext
    EXTENSIONS[ext.lower()] = language


def reset_extensions() -> None:
    EXTENSIONS.clear()
    EXTENSIONS.update(_DEFAULT_EXTENSIONS)


def is_supported(filename: str) -> bool:
    return PurePath(filename).suffix.lower() in EXTENSIONS


def dialect_for(filename: str) -> Dialect:
    language = EXTENSIONS.get(PurePath(filename).suffix.lower())
    if language is None:
        raise UnsupportedLanguageError(
            file=filename,
            position=None,
            message=f"Unsupported file extension for file: {filename}",
            hint=f"supported extensions: {', '.join(sorted(EXTENSIONS))}",
        )
    return DIALECTS[language]


__all__ = [
    "DIALECTS",
    "EXTENSIONS",
    "Dialect",
    "Role",
    "dialect_for",
    "is_supported",
    "register_extension",
    "reset_extensions",
]
