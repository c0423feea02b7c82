from __future__ import annotations

from dataclasses import dataclass

from .spans import Position


@dataclass(slots=True)
class ParseError(Exception):
    file: str
    position: Position | None
    message: str
    hint: str | None = None

    def __str__(self) -> str:
        if self.position is None:
            base = f"{self.file}: {self.message}"
        else:
            base = f"{self.file}:{self.position.line}:{self.position.column}: {self.message}"
        if self.hint:
            return f"{base}\nhint: {self.hint}"
        return base


class UnsupportedLanguageError(ParseError):
    pass
