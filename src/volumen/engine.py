from __future__ import annotations

import logging
from bisect import bisect_right
from dataclasses import dataclass, field

from tree_sitter import Node

from .comments import CommentCollector
from .content import ContentTokenizer
from .errors import ParseError
from .grammar import first_error, parse_tree
from .languages.base import Binding, Dialect, Role, Site
from .model import Prompt, PromptAnnotation
from .scope import ScopeTracker
from .spans import Span, position_at

logger = logging.getLogger(__name__)

PROMPT_NAME = "prompt"


def _line_end(src: bytes, offset: int) -> int:
    nl = src.find(b"\n", offset)
    return len(src) if nl < 0 else nl


@dataclass(slots=True)
class _Context:
    """Everything one parse call owns."""

    file: str
    src: bytes
    comments: CommentCollector
    tokenizer: ContentTokenizer
    scopes: ScopeTracker = field(default_factory=ScopeTracker)
    prompts: list[Prompt] = field(default_factory=list)
    # Emitted outer spans sorted by start, with the running maximum of their
    # ends, so containment is one bisect.
    _claim_starts: list[int] = field(default_factory=list)
    _claim_ends: list[int] = field(default_factory=list)
    _claim_reach: list[int] = field(default_factory=list)

    def emit(self, prompt: Prompt) -> None:
        self.prompts.append(prompt)
        outer = prompt.span.outer
        i = bisect_right(self._claim_starts, outer.start)
        self._claim_starts.insert(i, outer.start)
        self._claim_ends.insert(i, outer.end)
        self._claim_reach.insert(i, 0)
        # The walk is pre-order, so this loop normally touches one entry.
        reach = self._claim_reach[i - 1] if i else 0
        for j in range(i, len(self._claim_reach)):
            reach = max(reach, self._claim_ends[j])
            self._claim_reach[j] = reach

    def claimed(self, node: Node) -> bool:
        i = bisect_right(self._claim_starts, node.start_byte)
        return i > 0 and self._claim_reach[i - 1] >= node.end_byte


class PromptAssembler:
    """Walks one syntax tree and emits the prompts found at its sites."""

    def __init__(self, dialect: Dialect) -> None:
        self.dialect = dialect

    def extract(self, src: bytes, *, file: str) -> list[Prompt]:
        tree = parse_tree(self.dialect.grammar, src)
        root = tree.root_node
        err = first_error(root)
        if err is not None:
            pos = position_at(src, err.start_byte)
            raise ParseError(
                file=file,
                position=pos,
                message=f"Syntax error at line {pos.line}, column {pos.column}",
            )

        ctx = _Context(
            file=file,
            src=src,
            comments=CommentCollector.from_tree(src, root, self.dialect.comment_types()),
            tokenizer=ContentTokenizer(self.dialect, src),
        )

        # (node, leaving) pairs; leaving marks the end of a scope node.
        stack: list[tuple[Node, bool]] = [(root, False)]
        while stack:
            node, leaving = stack.pop()
            if leaving:
                ctx.scopes.exit()
                continue
            role = self.dialect.role(node)
            if role is Role.SCOPE:
                ctx.scopes.enter()
                stack.append((node, True))
            site = self.dialect.site(node, src)
            if site is not None:
                self._visit_site(ctx, site)
            elif role is Role.CALL:
                self._visit_call(ctx, node)
            stack.extend((child, False) for child in reversed(node.children))

        return sorted(ctx.prompts, key=lambda p: p.span.outer.start)

    def _annotations(self, ctx: _Context, node: Node) -> tuple[tuple[PromptAnnotation, ...], int]:
        """A statement's own annotations and where its enclosure starts."""
        start = node.start_byte
        found: list[PromptAnnotation] = []
        leading = ctx.comments.collect_adjacent_leading(start)
        if leading is not None:
            found.append(leading)
            start = leading.spans[0].outer.start
        nested = self._nested_scopes(node)
        for annotation in ctx.comments.collect_inline_prompt(node.start_byte, _line_end(ctx.src, node.end_byte)):
            at = annotation.spans[0].outer.start
            # Comments inside a nested function body belong to its statements.
            if not any(s <= at < e for s, e in nested):
                found.append(annotation)
        return tuple(found), start

    def _nested_scopes(self, node: Node) -> list[tuple[int, int]]:
        out: list[tuple[int, int]] = []
        stack = list(node.children)
        while stack:
            cur = stack.pop()
            if self.dialect.role(cur) is Role.SCOPE:
                out.append((cur.start_byte, cur.end_byte))
            else:
                stack.extend(cur.children)
        return out

    def _visit_site(self, ctx: _Context, site: Site) -> None:
        own, enclosure_start = self._annotations(ctx, site.node)
        for binding in site.bindings:
            self._visit_binding(ctx, site.node, binding, own, enclosure_start)

    def _visit_binding(
        self,
        ctx: _Context,
        stmt: Node,
        binding: Binding,
        own: tuple[PromptAnnotation, ...],
        enclosure_start: int,
    ) -> None:
        scopes = ctx.scopes
        name = binding.name
        if binding.typed:
            scopes.mark_typed(name)

        inherited = scopes.get_def_annotation(name)
        by_name = PROMPT_NAME in name.lower()
        if not (own or by_name or inherited is not None or scopes.is_prompt_ident(name)):
            return

        scopes.mark_prompt_ident(name)
        declares = binding.declaration or (self.dialect.assignment_declares and inherited is None)
        if own and (declares or scopes.is_typed(name)):
            scopes.store_def_annotation(name, own)

        if binding.value is None:
            return
        tokens = ctx.tokenizer.tokenize(binding.value)
        if tokens is None:
            logger.debug("%s: %r is not a prompt expression", ctx.file, name)
            return

        annotations = own or inherited or ()
        start = enclosure_start if own else stmt.start_byte
        ctx.emit(
            Prompt(
                file=ctx.file,
                enclosure=Span(start, max(stmt.end_byte, tokens.span.outer.end)),
                span=tokens.span,
                content=tokens.content,
                joint=tokens.joint,
                vars=tokens.vars,
                annotations=annotations,
            )
        )

    def _visit_call(self, ctx: _Context, call: Node) -> None:
        for floor, arg in self.dialect.call_arguments(call):
            if ctx.claimed(arg):
                continue
            annotations: list[PromptAnnotation] = []
            leading = ctx.comments.collect_adjacent_leading(arg.start_byte, floor)
            if leading is not None:
                annotations.append(leading)
            annotations.extend(ctx.comments.collect_inline_prompt(arg.start_byte, arg.end_byte))
            if not annotations:
                continue
            tokens = ctx.tokenizer.tokenize(arg)
            if tokens is None:
                continue
            ctx.emit(
                Prompt(
                    file=ctx.file,
                    enclosure=Span(call.start_byte, call.end_byte),
                    span=tokens.span,
                    content=tokens.content,
                    joint=tokens.joint,
                    vars=tokens.vars,
                    annotations=tuple(annotations),
                )
            )
