from __future__ import annotations

from .api import parse, parse_file, parse_files, parse_source
from .errors import ParseError, UnsupportedLanguageError
from .languages import register_extension
from .model import (
    JointToken,
    ParseResult,
    ParseResultError,
    ParseResultSuccess,
    Prompt,
    PromptAnnotation,
    PromptContentToken,
    PromptVar,
    StrToken,
    VarToken,
)
from .spans import Position, Span, SpanShape

__all__ = [
    "JointToken",
    "ParseError",
    "ParseResult",
    "ParseResultError",
    "ParseResultSuccess",
    "Position",
    "Prompt",
    "PromptAnnotation",
    "PromptContentToken",
    "PromptVar",
    "Span",
    "SpanShape",
    "StrToken",
    "UnsupportedLanguageError",
    "VarToken",
    "parse",
    "parse_file",
    "parse_files",
    "parse_source",
    "register_extension",
]
