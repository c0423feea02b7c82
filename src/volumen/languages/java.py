from __future__ import annotations

from tree_sitter import Node

from ..grammar import field, text
from .base import Binding, Dialect, FormatCall, JoinCall, Role, Site, positional_args

_LIST_FACTORIES = {"List.of", "Arrays.asList", "Stream.of", "Set.of"}


class JavaDialect(Dialect):
    name = "java"
    grammar = "java"
    roles = {
        "string_literal": Role.STRING,
        "text_block": Role.STRING,
        "binary_expression": Role.CONCAT,
        "method_invocation": Role.CALL,
        "array_creation_expression": Role.ARRAY,
        "array_initializer": Role.ARRAY,
        "object_creation_expression": Role.COLLECTION,
        "decimal_integer_literal": Role.PRIMITIVE,
        "hex_integer_literal": Role.PRIMITIVE,
        "octal_integer_literal": Role.PRIMITIVE,
        "binary_integer_literal": Role.PRIMITIVE,
        "decimal_floating_point_literal": Role.PRIMITIVE,
        "hex_floating_point_literal": Role.PRIMITIVE,
        "character_literal": Role.PRIMITIVE,
        "true": Role.PRIMITIVE,
        "false": Role.PRIMITIVE,
        "null_literal": Role.PRIMITIVE,
        "parenthesized_expression": Role.PAREN,
        "line_comment": Role.COMMENT,
        "block_comment": Role.COMMENT,
        "comment": Role.COMMENT,
        "class_declaration": Role.SCOPE,
        "interface_declaration": Role.SCOPE,
        "enum_declaration": Role.SCOPE,
        "record_declaration": Role.SCOPE,
        "method_declaration": Role.SCOPE,
        "constructor_declaration": Role.SCOPE,
        "lambda_expression": Role.SCOPE,
    }

    def array_elements(self, node: Node) -> list[Node]:
        if node.type == "array_creation_expression":
            init = field(node, "value")
            if init is None:
                return []
            node = init
        return super().array_elements(node)

    def _invocation(self, node: Node, src: bytes) -> tuple[Node | None, str, list[Node]] | None:
        if node.type != "method_invocation":
            return None
        name = field(node, "name")
        if name is None:
            return None
        obj = field(node, "object")
        return obj, text(src, name), positional_args(self, field(node, "arguments"))

    def join_call(self, node: Node, src: bytes) -> JoinCall | None:
        call = self._invocation(node, src)
        if call is None:
            return None
        obj, name, args = call
        if name != "join" or obj is None or text(src, obj) != "String" or len(args) < 2:
            return None
        sep, rest = self.unwrap(args[0]), [self.unwrap(a) for a in args[1:]]
        if len(rest) == 1:
            only = rest[0]
            if self.role(only) is Role.ARRAY:
                rest = self.array_elements(only)
            else:
                inner = self._invocation(only, src)
                if inner is not None and inner[0] is not None:
                    if f"{text(src, inner[0])}.{inner[1]}" in _LIST_FACTORIES:
                        rest = inner[2]
        return JoinCall(tuple(rest), sep) if rest else None

    def format_call(self, node: Node, src: bytes) -> FormatCall | None:
        call = self._invocation(node, src)
        if call is None:
            return None
        obj, name, args = call
        owner = text(src, obj) if obj is not None else ""
        if name == "format" and owner == "String" and args:
            return FormatCall(args[0], tuple(args[1:]), "printf")
        if name == "format" and owner == "MessageFormat" and args:
            return FormatCall(args[0], tuple(args[1:]), "brace")
        if name == "formatted" and obj is not None and self.is_string_like(self.unwrap(obj)):
            return FormatCall(self.unwrap(obj), tuple(args), "printf")
        return None

    def site(self, node: Node, src: bytes) -> Site | None:
        if node.type in ("local_variable_declaration", "field_declaration", "constant_declaration"):
            bindings: list[Binding] = []
            for decl in node.children_by_field_name("declarator"):
                name = field(decl, "name")
                if name is not None:
                    bindings.append(Binding(text(src, name), field(decl, "value"), declaration=True, typed=True))
            return Site(node, tuple(bindings)) if bindings else None

        if node.type == "expression_statement":
            expr = node.named_children[0] if node.named_children else None
            if expr is None or expr.type != "assignment_expression":
                return None
            targets: list[Node] = []
            value: Node | None = expr
            while value is not None and value.type == "assignment_expression":
                op = field(value, "operator")
                if op is not None and text(src, op) != "=":
                    return None
                left = field(value, "left")
                if left is not None:
                    targets.append(left)
                value = field(value, "right")
            bindings = [
                Binding(text(src, t), value)
                for t in targets
                if t.type in ("identifier", "field_access", "array_access")
            ]
            return Site(node, tuple(bindings)) if bindings else None
        return None
