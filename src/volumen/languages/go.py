from __future__ import annotations

from tree_sitter import Node

from ..grammar import field, text
from .base import Binding, Dialect, FormatCall, JoinCall, Role, Site, positional_args

_SEQUENCE_TYPES = {"slice_type", "array_type", "implicit_length_array_type"}
# Format functions and the index of their template argument.
_FORMAT_FUNCTIONS = {
    "fmt.Sprintf": 0,
    "fmt.Printf": 0,
    "fmt.Errorf": 0,
    "fmt.Fprintf": 1,
    "log.Printf": 0,
    "log.Fatalf": 0,
    "log.Panicf": 0,
}


class GoDialect(Dialect):
    name = "go"
    grammar = "go"
    roles = {
        "interpreted_string_literal": Role.STRING,
        "raw_string_literal": Role.STRING,
        "binary_expression": Role.CONCAT,
        "call_expression": Role.CALL,
        "composite_literal": Role.COLLECTION,
        "int_literal": Role.PRIMITIVE,
        "float_literal": Role.PRIMITIVE,
        "imaginary_literal": Role.PRIMITIVE,
        "rune_literal": Role.PRIMITIVE,
        "true": Role.PRIMITIVE,
        "false": Role.PRIMITIVE,
        "nil": Role.PRIMITIVE,
        "iota": Role.PRIMITIVE,
        "parenthesized_expression": Role.PAREN,
        "comment": Role.COMMENT,
        "function_declaration": Role.SCOPE,
        "method_declaration": Role.SCOPE,
        "func_literal": Role.SCOPE,
    }

    def role(self, node: Node) -> Role:
        if node.type == "composite_literal":
            typ = node.child_by_field_name("type")
            if typ is not None and typ.type in _SEQUENCE_TYPES:
                return Role.ARRAY
        return super().role(node)

    def array_elements(self, node: Node) -> list[Node]:
        body = node.child_by_field_name("body")
        if body is None:
            return []
        out: list[Node] = []
        for child in body.named_children:
            if child.type == "comment":
                continue
            if child.type == "keyed_element":
                return []
            if child.type == "literal_element" and child.named_children:
                child = child.named_children[0]
            out.append(child)
        return out

    def _callee(self, node: Node, src: bytes) -> str | None:
        if node.type != "call_expression":
            return None
        fn = field(node, "function")
        return text(src, fn) if fn is not None else None

    def join_call(self, node: Node, src: bytes) -> JoinCall | None:
        if self._callee(node, src) != "strings.Join":
            return None
        args = positional_args(self, field(node, "arguments"))
        if len(args) != 2:
            return None
        arr, sep = self.unwrap(args[0]), self.unwrap(args[1])
        if self.role(arr) is not Role.ARRAY:
            return None
        elements = self.array_elements(arr)
        return JoinCall(tuple(elements), sep) if elements else None

    def format_call(self, node: Node, src: bytes) -> FormatCall | None:
        callee = self._callee(node, src)
        if callee not in _FORMAT_FUNCTIONS:
            return None
        at = _FORMAT_FUNCTIONS[callee]
        args = positional_args(self, field(node, "arguments"))
        if len(args) <= at:
            return None
        return FormatCall(args[at], tuple(args[at + 1 :]), "printf")

    def site(self, node: Node, src: bytes) -> Site | None:
        if node.type == "short_var_declaration":
            return self._pairs(node, src, field(node, "left"), field(node, "right"), declaration=True)

        if node.type == "assignment_statement":
            op = field(node, "operator")
            if op is not None and text(src, op) != "=":
                return None
            return self._pairs(node, src, field(node, "left"), field(node, "right"), declaration=False)

        if node.type in ("var_spec", "const_spec"):
            names = list(node.children_by_field_name("name"))
            value = field(node, "value")
            values = [c for c in value.named_children if c.type != "comment"] if value is not None else []
            typed = field(node, "type") is not None
            bindings = tuple(
                Binding(text(src, n), values[i] if len(values) == len(names) else None, declaration=True, typed=typed)
                for i, n in enumerate(names)
            )
            # A lone `var x = ...` anchors comments on the keyword, not the var_spec node.
            stmt = node
            parent = node.parent
            if parent is not None and parent.type in ("var_declaration", "const_declaration"):
                if not any(c.type == "(" for c in parent.children):
                    stmt = parent
            return Site(stmt, bindings) if bindings else None
        return None

    def _pairs(
        self,
        node: Node,
        src: bytes,
        left: Node | None,
        right: Node | None,
        *,
        declaration: bool,
    ) -> Site | None:
        if left is None:
            return None
        names = [c for c in left.named_children if c.type != "comment"]
        values = [c for c in right.named_children if c.type != "comment"] if right is not None else []
        bindings = tuple(
            Binding(text(src, n), values[i] if len(values) == len(names) else None, declaration=declaration)
            for i, n in enumerate(names)
            if n.type in ("identifier", "selector_expression", "index_expression")
        )
        return Site(node, bindings) if bindings else None
