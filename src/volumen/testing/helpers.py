from __future__ import annotations

from ..model import JointToken, Prompt, StrToken, VarToken
from ..spans import Span


def cut(source: str | bytes, span: Span) -> str:
    """The text of a byte span; spans index the UTF-8 encoding."""
    buf = source.encode("utf-8") if isinstance(source, str) else source
    return span.slice(buf)


def interpolate(source: str | bytes, prompt: Prompt) -> str:
    """The prompt's template: literal parts verbatim, each var as `{index}`
    and each joint as the separator text."""
    buf = source.encode("utf-8") if isinstance(source, str) else source
    parts: list[str] = []
    for token in prompt.content:
        if isinstance(token, StrToken):
            parts.append(token.span.slice(buf))
        elif isinstance(token, VarToken):
            parts.append(f"{{{token.index}}}")
        elif isinstance(token, JointToken):
            parts.append(prompt.joint.inner.slice(buf))
    return "".join(parts)
