from __future__ import annotations

import logging
from pathlib import Path

from .engine import PromptAssembler
from .errors import ParseError
from .languages import dialect_for
from .model import ParseResult, ParseResultError, ParseResultSuccess, Prompt

logger = logging.getLogger(__name__)


def parse_source(src: str, *, file: str) -> tuple[Prompt, ...]:
    """Extract the prompts of one source buffer; `file` picks the language.

    Raises ParseError on syntax errors and UnsupportedLanguageError for
    extensions no dialect claims.
    """
    dialect = dialect_for(file)
    logger.debug("parsing %s as %s", file, dialect.name)
    prompts = PromptAssembler(dialect).extract(src.encode("utf-8"), file=file)
    return tuple(prompts)


def parse(source: str, filename: str) -> ParseResult:
    try:
        return ParseResultSuccess(prompts=parse_source(source, file=filename))
    except ParseError as err:
        logger.debug("%s", err)
        return ParseResultError(message=err.message)


def parse_file(path: str | Path) -> ParseResult:
    p = Path(path).expanduser().resolve()
    src = p.read_text(encoding="utf-8")
    return parse(src, str(p))


def parse_files(paths: list[str | Path]) -> dict[str, ParseResult]:
    out: dict[str, ParseResult] = {}
    for path in paths:
        p = Path(path).expanduser().resolve()
        key = str(p)
        if key in out:
            continue
        try:
            out[key] = parse_file(p)
        except (OSError, UnicodeDecodeError) as err:
            out[key] = ParseResultError(message=f"cannot read {key}: {err}")
    return out
