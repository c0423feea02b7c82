from __future__ import annotations

from dataclasses import dataclass, field

from .spans import Span, SpanShape


@dataclass(frozen=True, slots=True)
class PromptVar:
    """An embedded sub-expression; `exp` is the source slice at `span.outer`."""

    exp: str
    span: SpanShape


@dataclass(frozen=True, slots=True)
class PromptAnnotation:
    """A merged, contiguous `@prompt` comment block.

    `spans` holds one shape per physical comment line: `outer` covers the line
    including its comment marker, `inner` the text after it.
    """

    spans: tuple[SpanShape, ...]
    exp: str


@dataclass(frozen=True, slots=True)
class StrToken:
    span: Span


@dataclass(frozen=True, slots=True)
class VarToken:
    span: Span
    index: int  # into Prompt.vars


@dataclass(frozen=True, slots=True)
class JointToken:
    """Separator position; the separator itself is `Prompt.joint`."""


PromptContentToken = StrToken | VarToken | JointToken


@dataclass(frozen=True, slots=True)
class Prompt:
    file: str
    enclosure: Span
    span: SpanShape
    content: tuple[PromptContentToken, ...]
    joint: SpanShape = field(default_factory=SpanShape.zero)
    vars: tuple[PromptVar, ...] = ()
    annotations: tuple[PromptAnnotation, ...] = ()


@dataclass(frozen=True, slots=True)
class ParseResultSuccess:
    prompts: tuple[Prompt, ...]

    @property
    def state(self) -> str:
        return "success"


@dataclass(frozen=True, slots=True)
class ParseResultError:
    message: str

    @property
    def state(self) -> str:
        return "error"


ParseResult = ParseResultSuccess | ParseResultError
