from __future__ import annotations

from tree_sitter import Node

from .. import literals
from ..grammar import field, text
from ..interpolation import scan_ruby
from ..literals import LiteralShape
from ..model import PromptVar
from .base import Binding, Dialect, FormatCall, JoinCall, Role, Site, positional_args

_TARGETS = {
    "identifier",
    "instance_variable",
    "class_variable",
    "global_variable",
    "constant",
    "call",
    "element_reference",
}
_STATEMENT_PARENTS = {"program", "body_statement", "begin_block", "block_body", "then", "else"}


class RubyDialect(Dialect):
    name = "ruby"
    grammar = "ruby"
    assignment_declares = True
    roles = {
        "string": Role.STRING,
        "heredoc_beginning": Role.STRING,
        "chained_string": Role.CONCAT,
        "binary": Role.CONCAT,
        "call": Role.CALL,
        "method_call": Role.CALL,
        "array": Role.ARRAY,
        "hash": Role.COLLECTION,
        "integer": Role.PRIMITIVE,
        "float": Role.PRIMITIVE,
        "true": Role.PRIMITIVE,
        "false": Role.PRIMITIVE,
        "nil": Role.PRIMITIVE,
        "parenthesized_statements": Role.PAREN,
        "comment": Role.COMMENT,
        "method": Role.SCOPE,
        "singleton_method": Role.SCOPE,
        "class": Role.SCOPE,
        "singleton_class": Role.SCOPE,
        "module": Role.SCOPE,
        "lambda": Role.SCOPE,
    }

    def span_shape(self, node: Node, src: bytes) -> LiteralShape:
        if node.type == "heredoc_beginning":
            return literals.heredoc(
                src, node.start_byte, len(src), marker=b"<<", keep_final_newline=True, indent_dedents=False
            )
        if src[node.start_byte : node.start_byte + 1] == b"%":
            return literals.percent(src, node.start_byte, node.end_byte)
        return literals.quoted(src, node.start_byte, node.end_byte)

    def _interpolates(self, node: Node, src: bytes) -> bool:
        head = src[node.start_byte : node.start_byte + 4]
        if node.type == "heredoc_beginning":
            label = head.lstrip(b"<~-")
            return not label.startswith(b"'")
        if head.startswith(b"%"):
            return not head.startswith(b"%q")
        return head.startswith(b'"')

    def extract_vars(self, node: Node, src: bytes) -> list[PromptVar]:
        if not self._interpolates(node, src):
            return []
        inner = self.span_shape(node, src).span.inner
        return scan_ruby(src, inner.start, inner.end)

    def concat_operands(self, node: Node, src: bytes) -> list[Node] | None:
        if node.type == "chained_string":
            return [c for c in node.named_children if c.type == "string"]
        return super().concat_operands(node, src)

    def _call_parts(self, node: Node, src: bytes) -> tuple[Node | None, str, list[Node]] | None:
        if self.role(node) is not Role.CALL:
            return None
        method = field(node, "method")
        if method is None:
            return None
        receiver = field(node, "receiver")
        args = positional_args(self, field(node, "arguments"))
        return (self.unwrap(receiver) if receiver is not None else None), text(src, method), args

    def join_call(self, node: Node, src: bytes) -> JoinCall | None:
        parts = self._call_parts(node, src)
        if parts is None:
            return None
        receiver, method, args = parts
        if method != "join" or receiver is None or receiver.type != "array" or len(args) != 1:
            return None
        return JoinCall(elements=tuple(self.array_elements(receiver)), separator=self.unwrap(args[0]))

    def format_call(self, node: Node, src: bytes) -> FormatCall | None:
        if node.type == "binary":
            op, left, right = field(node, "operator"), field(node, "left"), field(node, "right")
            if op is None or left is None or right is None or text(src, op) != "%":
                return None
            left = self.unwrap(left)
            if not self.is_string_like(left):
                return None
            right = self.unwrap(right)
            if right.type == "array":
                return FormatCall(left, tuple(self.array_elements(right)), "printf")
            if right.type == "hash":
                return FormatCall(left, (), "printf", self._hash_keywords(src, right))
            return FormatCall(left, (right,), "printf")

        parts = self._call_parts(node, src)
        if parts is None:
            return None
        receiver, method, args = parts
        if method not in ("format", "sprintf") or not args:
            return None
        if receiver is not None and text(src, receiver) != "Kernel":
            return None
        keywords: dict[str, Node] = {}
        positional: list[Node] = []
        for arg in args[1:]:
            if arg.type == "pair":
                keywords.update(self._hash_keywords(src, arg, single=True))
            elif arg.type == "hash":
                keywords.update(self._hash_keywords(src, arg))
            else:
                positional.append(arg)
        return FormatCall(args[0], tuple(positional), "printf", keywords)

    def _hash_keywords(self, src: bytes, node: Node, *, single: bool = False) -> dict[str, Node]:
        pairs = [node] if single else [c for c in node.named_children if c.type == "pair"]
        out: dict[str, Node] = {}
        for pair in pairs:
            key, value = field(pair, "key"), field(pair, "value")
            if key is None or value is None:
                continue
            out[text(src, key).lstrip(":").rstrip(":")] = value
        return out

    def site(self, node: Node, src: bytes) -> Site | None:
        if node.type == "identifier":
            parent = node.parent
            if parent is not None and parent.type in _STATEMENT_PARENTS:
                return Site(node, (Binding(text(src, node), None, declaration=True),))
            return None
        if node.type != "assignment":
            return None
        parent = node.parent
        if parent is not None and parent.type == "assignment":
            return None

        targets: list[Node] = []
        value: Node | None = node
        while value is not None and value.type == "assignment":
            left = field(value, "left")
            if left is not None:
                targets.append(left)
            value = field(value, "right")
        bindings: list[Binding] = []
        for target in targets:
            if target.type == "left_assignment_list":
                names = [c for c in target.named_children if c.type in _TARGETS]
                items: list[Node] = []
                if value is not None:
                    v = self.unwrap(value)
                    if v.type in ("right_assignment_list", "array"):
                        items = [c for c in v.named_children if c.type != "comment"]
                for i, name in enumerate(names):
                    val = items[i] if len(items) == len(names) else None
                    bindings.append(Binding(text(src, name), val))
            elif target.type in _TARGETS:
                bindings.append(Binding(text(src, target), value))
        return Site(node, tuple(bindings)) if bindings else None
