from __future__ import annotations

import logging
import re
from dataclasses import dataclass

from tree_sitter import Node

from .interpolation import make_var
from .languages.base import Dialect, FormatCall, JoinCall, Role
from .model import JointToken, PromptContentToken, PromptVar, StrToken, VarToken
from .spans import Span, SpanShape

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class Tokenized:
    span: SpanShape
    content: tuple[PromptContentToken, ...]
    vars: tuple[PromptVar, ...]
    joint: SpanShape


@dataclass(frozen=True, slots=True)
class Placeholder:
    """A placeholder at [start, end) of a template body.

    `key` is None for the next positional argument, an int for an explicit
    index, or a keyword name. `skip` counts positional arguments consumed
    before it (printf `*` width and precision).
    """

    start: int
    end: int
    key: int | str | None = None
    skip: int = 0


_PRINTF = re.compile(
    rb"""%(?:
        (?P<escape>%)
      | (?:\((?P<pyname>[^)]*)\)|<(?P<rbname>\w+)>)?
        (?:(?P<argnum>[1-9][0-9]*)\$)?
        [-+ #0']*
        (?P<width>\*|[0-9]+)?
        (?:\.(?P<prec>\*|[0-9]+))?
        [hlLqjzt]*
        [a-zA-Z]
      | \{(?P<rbbrace>\w+)\}
    )""",
    re.VERBOSE,
)


def printf_placeholders(body: bytes) -> list[Placeholder]:
    """`%s`-style placeholders; `%%` is an escape."""
    out: list[Placeholder] = []
    for m in _PRINTF.finditer(body):
        if m.group("escape"):
            continue
        skip = (m.group("width") == b"*") + (m.group("prec") == b"*")
        name = m.group("pyname") or m.group("rbname") or m.group("rbbrace")
        key: int | str | None = None
        if name is not None:
            key = name.decode("utf-8", errors="replace")
        elif m.group("argnum"):
            key = int(m.group("argnum")) - 1
        out.append(Placeholder(m.start(), m.end(), key, skip))
    return out


def brace_placeholders(body: bytes) -> list[Placeholder] | None:
    """`{}`, `{0}`, `{name}` placeholders with `{{`/`}}` escapes and format specs.

    Returns None for an unbalanced template.
    """
    out: list[Placeholder] = []
    i = 0
    n = len(body)
    while i < n:
        c = body[i]
        if c == 0x7B:
            if i + 1 < n and body[i + 1] == 0x7B:
                i += 2
                continue
            depth = 0
            j = i
            while j < n:
                if body[j] == 0x7B:
                    depth += 1
                elif body[j] == 0x7D:
                    depth -= 1
                    if depth == 0:
                        break
                j += 1
            if j >= n:
                return None
            field_text = re.split(rb"[:!,]", body[i + 1 : j], maxsplit=1)[0].strip()
            head = re.split(rb"[.\[]", field_text, maxsplit=1)[0]
            key: int | str | None
            if head == b"":
                key = None
            elif head.isdigit():
                key = int(head)
            else:
                key = head.decode("utf-8", errors="replace")
            out.append(Placeholder(i, j + 1, key))
            i = j + 1
            continue
        if c == 0x7D and i + 1 < n and body[i + 1] == 0x7D:
            i += 2
            continue
        i += 1
    return out


class ContentTokenizer:
    """Decomposes a candidate expression into Str/Var/Joint tokens.

    Shapes are tried in order: bare literal, format call, join call,
    concatenation chain, bare array. Anything else yields None.
    """

    def __init__(self, dialect: Dialect, src: bytes) -> None:
        self.dialect = dialect
        self.src = src

    def tokenize(self, node: Node) -> Tokenized | None:
        d = self.dialect
        node = d.unwrap(node)
        role = d.role(node)
        if role is Role.STRING:
            return self._literal(node)
        fmt = d.format_call(node, self.src)
        if fmt is not None:
            return self._format(node, fmt)
        join = d.join_call(node, self.src)
        if join is not None:
            return self._join(node, join)
        operands = d.concat_operands(node, self.src)
        if operands is not None:
            return self._concat(node, operands)
        if role is Role.ARRAY:
            return self._array(node)
        logger.debug("not a prompt shape: %s at byte %d", node.type, node.start_byte)
        return None

    # Literals

    def _literal_parts(
        self, node: Node, tokens: list[PromptContentToken], vars: list[PromptVar]
    ) -> SpanShape:
        shape = self.dialect.span_shape(node, self.src).span
        pos = shape.inner.start
        for v in self.dialect.extract_vars(node, self.src):
            if v.span.outer.start > pos:
                tokens.append(StrToken(Span(pos, v.span.outer.start)))
            tokens.append(VarToken(v.span.outer, len(vars)))
            vars.append(v)
            pos = max(pos, v.span.outer.end)
        if pos < shape.inner.end:
            tokens.append(StrToken(Span(pos, shape.inner.end)))
        return shape

    def _literal(self, node: Node) -> Tokenized:
        tokens: list[PromptContentToken] = []
        vars: list[PromptVar] = []
        shape = self._literal_parts(node, tokens, vars)
        if not tokens:
            tokens.append(StrToken(shape.inner))
        return Tokenized(shape, tuple(tokens), tuple(vars), SpanShape.zero())

    def _element(self, node: Node, tokens: list[PromptContentToken], vars: list[PromptVar]) -> bool:
        """A join/array element; False when it cannot be part of a prompt."""
        d = self.dialect
        node = d.unwrap(node)
        role = d.role(node)
        if role is Role.STRING:
            self._literal_parts(node, tokens, vars)
        elif role is Role.PRIMITIVE:
            tokens.append(StrToken(Span(node.start_byte, node.end_byte)))
        elif role in (Role.ARRAY, Role.COLLECTION):
            return False
        else:
            span = (node.start_byte, node.end_byte)
            tokens.append(VarToken(Span(*span), len(vars)))
            vars.append(make_var(self.src, span, span))
        return True

    # Composite shapes

    def _join(self, node: Node, join: JoinCall) -> Tokenized | None:
        if not join.elements or not self.dialect.is_string_like(join.separator):
            return None
        tokens: list[PromptContentToken] = []
        vars: list[PromptVar] = []
        for i, el in enumerate(join.elements):
            if i:
                tokens.append(JointToken())
            if not self._element(el, tokens, vars):
                logger.debug("join element %s excludes the prompt", el.type)
                return None
        span = SpanShape.of(
            (node.start_byte, node.end_byte),
            (join.elements[0].start_byte, join.elements[-1].end_byte),
        )
        joint = self.dialect.span_shape(join.separator, self.src).span
        return Tokenized(span, tuple(tokens), tuple(vars), joint)

    def _array(self, node: Node) -> Tokenized | None:
        elements = self.dialect.array_elements(node)
        if not elements:
            return None
        tokens: list[PromptContentToken] = []
        vars: list[PromptVar] = []
        for el in elements:
            if not self._element(el, tokens, vars):
                return None
        span = SpanShape.of(
            (node.start_byte, node.end_byte),
            (elements[0].start_byte, elements[-1].end_byte),
        )
        return Tokenized(span, tuple(tokens), tuple(vars), SpanShape.zero())

    def _concat(self, node: Node, operands: list[Node]) -> Tokenized | None:
        d = self.dialect
        operands = [d.unwrap(o) for o in operands]
        roles = [d.role(o) for o in operands]
        if Role.STRING not in roles:
            return None
        if any(r in (Role.ARRAY, Role.COLLECTION) for r in roles):
            logger.debug("concatenation with a collection operand at byte %d", node.start_byte)
            return None

        tokens: list[PromptContentToken] = []
        vars: list[PromptVar] = []
        bounds: list[Span] = []
        for i, (op, role) in enumerate(zip(operands, roles)):
            if role is Role.STRING:
                bounds.append(self._literal_parts(op, tokens, vars).inner)
            elif role is Role.PRIMITIVE:
                tokens.append(StrToken(Span(op.start_byte, op.end_byte)))
                bounds.append(Span(op.start_byte, op.end_byte))
            else:
                # The var reaches over the operators up to its neighbours.
                lo = operands[i - 1].end_byte if i > 0 else op.start_byte
                hi = operands[i + 1].start_byte if i + 1 < len(operands) else op.end_byte
                tokens.append(VarToken(Span(op.start_byte, op.end_byte), len(vars)))
                vars.append(make_var(self.src, (lo, hi), (op.start_byte, op.end_byte)))
                bounds.append(Span(op.start_byte, op.end_byte))
        span = SpanShape.of((node.start_byte, node.end_byte), (bounds[0].start, bounds[-1].end))
        return Tokenized(span, tuple(tokens), tuple(vars), SpanShape.zero())

    def _format(self, node: Node, fmt: FormatCall) -> Tokenized | None:
        d = self.dialect
        template = d.unwrap(fmt.template)
        if not d.is_string_like(template) or d.extract_vars(template, self.src):
            return None
        shape = d.span_shape(template, self.src).span
        body = self.src[shape.inner.start : shape.inner.end]
        if fmt.style == "printf":
            placeholders = printf_placeholders(body)
        else:
            placeholders = brace_placeholders(body)
        if not placeholders:
            return None

        auto = 0
        refs: list[tuple[Placeholder, Node]] = []
        for ph in placeholders:
            auto += ph.skip
            target: Node | None
            if ph.key is None:
                target = fmt.args[auto] if auto < len(fmt.args) else None
                auto += 1
            elif isinstance(ph.key, int):
                target = fmt.args[ph.key] if ph.key < len(fmt.args) else None
            else:
                target = fmt.keywords.get(ph.key)
            if target is None:
                logger.debug("unmapped placeholder %r at byte %d", ph.key, node.start_byte)
                return None
            refs.append((ph, target))

        # vars are the referenced arguments, in argument order
        keys = sorted({(t.start_byte, t.end_byte) for _, t in refs})
        index = {k: i for i, k in enumerate(keys)}

        base = shape.inner.start
        tokens: list[PromptContentToken] = []
        pos = base
        for ph, target in refs:
            if base + ph.start > pos:
                tokens.append(StrToken(Span(pos, base + ph.start)))
            tokens.append(VarToken(Span(base + ph.start, base + ph.end), index[(target.start_byte, target.end_byte)]))
            pos = base + ph.end
        if pos < shape.inner.end:
            tokens.append(StrToken(Span(pos, shape.inner.end)))
        vars = tuple(make_var(self.src, k, k) for k in keys)
        span = SpanShape(outer=Span(node.start_byte, node.end_byte), inner=shape.inner)
        return Tokenized(span, tuple(tokens), vars, SpanShape.zero())
