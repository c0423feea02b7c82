"""JSON-compatible encoding of parse results.

Spans become `[start, end]` pairs, shapes `{"outer", "inner"}` objects and
content tokens carry a `"type"` tag. `from_dict(to_dict(x)) == x` for every
result the engine produces.
"""

from __future__ import annotations

import json
from typing import Any

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
from .spans import Span, SpanShape


def _span(s: Span) -> list[int]:
    return [s.start, s.end]


def _shape(s: SpanShape) -> dict[str, list[int]]:
    return {"outer": _span(s.outer), "inner": _span(s.inner)}


def _token(t: PromptContentToken) -> dict[str, Any]:
    if isinstance(t, StrToken):
        return {"type": "str", "span": _span(t.span)}
    if isinstance(t, VarToken):
        return {"type": "var", "span": _span(t.span), "index": t.index}
    return {"type": "joint"}


def prompt_to_dict(p: Prompt) -> dict[str, Any]:
    return {
        "file": p.file,
        "enclosure": _span(p.enclosure),
        "span": _shape(p.span),
        "content": [_token(t) for t in p.content],
        "joint": _shape(p.joint),
        "vars": [{"exp": v.exp, "span": _shape(v.span)} for v in p.vars],
        "annotations": [
            {"spans": [_shape(s) for s in a.spans], "exp": a.exp} for a in p.annotations
        ],
    }


def to_dict(result: ParseResult) -> dict[str, Any]:
    if isinstance(result, ParseResultError):
        return {"state": "error", "error": result.message}
    return {"state": "success", "prompts": [prompt_to_dict(p) for p in result.prompts]}


def _load_span(raw: Any) -> Span:
    start, end = raw
    return Span(int(start), int(end))


def _load_shape(raw: dict[str, Any]) -> SpanShape:
    return SpanShape(outer=_load_span(raw["outer"]), inner=_load_span(raw["inner"]))


def _load_token(raw: dict[str, Any]) -> PromptContentToken:
    kind = raw.get("type")
    if kind == "str":
        return StrToken(_load_span(raw["span"]))
    if kind == "var":
        return VarToken(_load_span(raw["span"]), int(raw["index"]))
    if kind == "joint":
        return JointToken()
    raise ValueError(f"unknown content token type: {kind!r}")


def prompt_from_dict(raw: dict[str, Any]) -> Prompt:
    return Prompt(
        file=raw["file"],
        enclosure=_load_span(raw["enclosure"]),
        span=_load_shape(raw["span"]),
        content=tuple(_load_token(t) for t in raw["content"]),
        joint=_load_shape(raw["joint"]),
        vars=tuple(PromptVar(exp=v["exp"], span=_load_shape(v["span"])) for v in raw.get("vars", [])),
        annotations=tuple(
            PromptAnnotation(spans=tuple(_load_shape(s) for s in a["spans"]), exp=a["exp"])
            for a in raw.get("annotations", [])
        ),
    )


def from_dict(raw: dict[str, Any]) -> ParseResult:
    state = raw.get("state")
    if state == "error":
        return ParseResultError(message=raw["error"])
    if state == "success":
        return ParseResultSuccess(prompts=tuple(prompt_from_dict(p) for p in raw["prompts"]))
    raise ValueError(f"unknown parse result state: {state!r}")


def dumps(result: ParseResult, *, indent: int | None = None) -> str:
    return json.dumps(to_dict(result), indent=indent, sort_keys=True)


def loads(data: str) -> ParseResult:
    return from_dict(json.loads(data))
