from __future__ import annotations

from tree_sitter import Node

from .. import literals
from ..grammar import field, text
from ..interpolation import scan_php
from ..literals import LiteralShape
from ..model import PromptVar
from .base import Binding, Dialect, FormatCall, JoinCall, Role, Site, positional_args

_TARGETS = {
    "variable_name",
    "member_access_expression",
    "scoped_property_access_expression",
    "subscript_expression",
}
_JOIN_FUNCTIONS = {"implode", "join"}
_FORMAT_FUNCTIONS = {"sprintf", "printf", "vsprintf"}


class PhpDialect(Dialect):
    name = "php"
    grammar = "php"
    concat_operators = frozenset({"."})
    assignment_declares = True
    roles = {
        "string": Role.STRING,
        "encapsed_string": Role.STRING,
        "heredoc": Role.STRING,
        "nowdoc": Role.STRING,
        "binary_expression": Role.CONCAT,
        "function_call_expression": Role.CALL,
        "member_call_expression": Role.CALL,
        "scoped_call_expression": Role.CALL,
        "array_creation_expression": Role.ARRAY,
        "object_creation_expression": Role.COLLECTION,
        "integer": Role.PRIMITIVE,
        "float": Role.PRIMITIVE,
        "boolean": Role.PRIMITIVE,
        "null": Role.PRIMITIVE,
        "parenthesized_expression": Role.PAREN,
        "comment": Role.COMMENT,
        "function_definition": Role.SCOPE,
        "method_declaration": Role.SCOPE,
        "class_declaration": Role.SCOPE,
        "interface_declaration": Role.SCOPE,
        "trait_declaration": Role.SCOPE,
        "anonymous_function": Role.SCOPE,
        "anonymous_function_creation_expression": Role.SCOPE,
        "arrow_function": Role.SCOPE,
    }

    def span_shape(self, node: Node, src: bytes) -> LiteralShape:
        if node.type in ("heredoc", "nowdoc"):
            return literals.heredoc(
                src, node.start_byte, node.end_byte, marker=b"<<<", keep_final_newline=False, indent_dedents=True
            )
        return literals.quoted(src, node.start_byte, node.end_byte)

    def extract_vars(self, node: Node, src: bytes) -> list[PromptVar]:
        if node.type == "heredoc":
            head = src[node.start_byte : node.start_byte + 4]
            if head.endswith(b"'"):
                return []
        elif node.type != "encapsed_string":
            return []
        inner = self.span_shape(node, src).span.inner
        return scan_php(src, inner.start, inner.end)

    def array_elements(self, node: Node) -> list[Node]:
        out: list[Node] = []
        for child in node.named_children:
            if child.type != "array_element_initializer":
                continue
            if any(c.type == "=>" for c in child.children):
                # Keyed entries make this a map, not a list of parts.
                return []
            values = [c for c in child.named_children if c.type != "comment"]
            if len(values) == 1:
                out.append(values[0])
        return out

    def argument_value(self, node: Node) -> Node:
        if node.type != "argument":
            return node
        values = [c for c in node.named_children if c.type != "name"]
        return values[-1] if values else node

    def _function_call(self, node: Node, src: bytes) -> tuple[str, list[Node]] | None:
        if node.type != "function_call_expression":
            return None
        fn = field(node, "function")
        if fn is None:
            return None
        name = text(src, fn).lstrip("\\").lower()
        return name, positional_args(self, field(node, "arguments"))

    def join_call(self, node: Node, src: bytes) -> JoinCall | None:
        call = self._function_call(node, src)
        if call is None or call[0] not in _JOIN_FUNCTIONS or len(call[1]) != 2:
            return None
        a, b = (self.unwrap(x) for x in call[1])
        # implode() accepts both argument orders.
        if self.is_string_like(a) and b.type == "array_creation_expression":
            sep, arr = a, b
        elif self.is_string_like(b) and a.type == "array_creation_expression":
            sep, arr = b, a
        else:
            return None
        elements = self.array_elements(arr)
        return JoinCall(tuple(elements), sep) if elements else None

    def format_call(self, node: Node, src: bytes) -> FormatCall | None:
        call = self._function_call(node, src)
        if call is None or call[0] not in _FORMAT_FUNCTIONS or not call[1]:
            return None
        template, *args = call[1]
        if call[0] == "vsprintf":
            if len(args) != 1 or self.unwrap(args[0]).type != "array_creation_expression":
                return None
            args = self.array_elements(self.unwrap(args[0]))
        return FormatCall(template, tuple(args), "printf")

    def site(self, node: Node, src: bytes) -> Site | None:
        if node.type == "property_declaration":
            typed = field(node, "type") is not None
            bindings: list[Binding] = []
            for el in node.named_children:
                if el.type != "property_element":
                    continue
                name = next((c for c in el.named_children if c.type == "variable_name"), None)
                if name is None:
                    continue
                bindings.append(Binding(text(src, name), _property_value(el), declaration=True, typed=typed))
            return Site(node, tuple(bindings)) if bindings else None

        if node.type != "expression_statement":
            return None
        expr = node.named_children[0] if node.named_children else None
        if expr is None or expr.type != "assignment_expression":
            return None
        targets: list[Node] = []
        value: Node | None = expr
        while value is not None and value.type == "assignment_expression":
            left = field(value, "left")
            if left is not None:
                targets.append(left)
            value = field(value, "right")
        bindings = []
        for target in targets:
            if target.type in ("list_literal", "array_creation_expression"):
                names = [self.argument_value(c) for c in target.named_children]
                names = [
                    c.named_children[0] if c.type == "array_element_initializer" and c.named_children else c
                    for c in names
                ]
                items = self.array_elements(self.unwrap(value)) if value is not None else []
                for i, name in enumerate(names):
                    if name.type in _TARGETS:
                        val = items[i] if len(items) == len(names) else None
                        bindings.append(Binding(text(src, name), val))
            elif target.type in _TARGETS:
                bindings.append(Binding(text(src, target), value))
        return Site(node, tuple(bindings)) if bindings else None


def _property_value(el: Node) -> Node | None:
    value = el.child_by_field_name("default_value")
    if value is not None:
        return value
    for child in el.named_children:
        if child.type == "property_initializer" and child.named_children:
            return child.named_children[-1]
    seen_eq = False
    for child in el.children:
        if child.type == "=":
            seen_eq = True
        elif seen_eq and child.is_named:
            return child
    return None
