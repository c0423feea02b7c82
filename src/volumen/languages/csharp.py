from __future__ import annotations

from tree_sitter import Node

from .. import literals
from ..grammar import field, text
from ..interpolation import var_from_node
from ..literals import LiteralShape
from ..model import PromptVar
from .base import Binding, Dialect, FormatCall, JoinCall, Role, Site, positional_args

_STRING_OWNERS = {"string", "String", "System.String"}
_INITIALIZED = {"array_creation_expression", "implicit_array_creation_expression"}


class CSharpDialect(Dialect):
    name = "csharp"
    grammar = "csharp"
    roles = {
        "string_literal": Role.STRING,
        "verbatim_string_literal": Role.STRING,
        "raw_string_literal": Role.STRING,
        "interpolated_string_expression": Role.STRING,
        "binary_expression": Role.CONCAT,
        "invocation_expression": Role.CALL,
        "array_creation_expression": Role.ARRAY,
        "implicit_array_creation_expression": Role.ARRAY,
        "initializer_expression": Role.ARRAY,
        "collection_expression": Role.ARRAY,
        "object_creation_expression": Role.COLLECTION,
        "anonymous_object_creation_expression": Role.COLLECTION,
        "integer_literal": Role.PRIMITIVE,
        "real_literal": Role.PRIMITIVE,
        "boolean_literal": Role.PRIMITIVE,
        "character_literal": Role.PRIMITIVE,
        "null_literal": Role.PRIMITIVE,
        "parenthesized_expression": Role.PAREN,
        "comment": Role.COMMENT,
        "class_declaration": Role.SCOPE,
        "struct_declaration": Role.SCOPE,
        "record_declaration": Role.SCOPE,
        "interface_declaration": Role.SCOPE,
        "method_declaration": Role.SCOPE,
        "constructor_declaration": Role.SCOPE,
        "local_function_statement": Role.SCOPE,
        "lambda_expression": Role.SCOPE,
        "anonymous_method_expression": Role.SCOPE,
    }

    def span_shape(self, node: Node, src: bytes) -> LiteralShape:
        # Raw strings close with as many quotes as they open with.
        return literals.quoted(src, node.start_byte, node.end_byte, max_run=None)

    def extract_vars(self, node: Node, src: bytes) -> list[PromptVar]:
        if node.type != "interpolated_string_expression":
            return []
        out: list[PromptVar] = []
        for child in node.children:
            if child.type != "interpolation":
                continue
            # $$"""..{{x}}..""" raw strings open interpolations with repeated braces.
            opening = len(src[child.start_byte : child.end_byte]) - len(
                src[child.start_byte : child.end_byte].lstrip(b"{")
            )
            out.append(
                var_from_node(src, child.start_byte, child.end_byte, open_len=opening, close_len=opening)
            )
        return out

    def array_elements(self, node: Node) -> list[Node]:
        if node.type in _INITIALIZED:
            init = next((c for c in node.named_children if c.type == "initializer_expression"), None)
            if init is None:
                return []
            node = init
        return super().array_elements(node)

    def argument_value(self, node: Node) -> Node:
        if node.type != "argument":
            return node
        values = [c for c in node.named_children if c.type not in ("name_colon", "comment")]
        return values[-1] if values else node

    def _invocation(self, node: Node, src: bytes) -> tuple[str, str, list[Node]] | None:
        if node.type != "invocation_expression":
            return None
        fn = field(node, "function")
        if fn is None or fn.type != "member_access_expression":
            return None
        owner, name = field(fn, "expression"), field(fn, "name")
        if owner is None or name is None:
            return None
        return text(src, owner), text(src, name), positional_args(self, field(node, "arguments"))

    def join_call(self, node: Node, src: bytes) -> JoinCall | None:
        call = self._invocation(node, src)
        if call is None:
            return None
        owner, name, args = call
        if name != "Join" or owner not in _STRING_OWNERS or len(args) < 2:
            return None
        sep, rest = self.unwrap(args[0]), [self.unwrap(a) for a in args[1:]]
        if len(rest) == 1 and self.role(rest[0]) is Role.ARRAY:
            rest = self.array_elements(rest[0])
        return JoinCall(tuple(rest), sep) if rest else None

    def format_call(self, node: Node, src: bytes) -> FormatCall | None:
        call = self._invocation(node, src)
        if call is None:
            return None
        owner, name, args = call
        if name != "Format" or owner not in _STRING_OWNERS or not args:
            return None
        return FormatCall(args[0], tuple(args[1:]), "brace")

    def site(self, node: Node, src: bytes) -> Site | None:
        if node.type in ("local_declaration_statement", "field_declaration"):
            decl = next((c for c in node.named_children if c.type == "variable_declaration"), None)
            if decl is None:
                return None
            typ = field(decl, "type")
            typed = typ is not None and text(src, typ) != "var"
            bindings = [
                Binding(text(src, name), _declarator_value(d), declaration=True, typed=typed)
                for d in decl.named_children
                if d.type == "variable_declarator" and (name := _declarator_name(d)) is not None
            ]
            return Site(node, tuple(bindings)) if bindings else None

        if node.type == "property_declaration":
            name, value = field(node, "name"), field(node, "value")
            if name is None:
                return None
            return Site(node, (Binding(text(src, name), value, declaration=True, typed=True),))

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
                if t.type in ("identifier", "member_access_expression", "element_access_expression")
            ]
            return Site(node, tuple(bindings)) if bindings else None
        return None


def _declarator_name(decl: Node) -> Node | None:
    name = decl.child_by_field_name("name")
    if name is not None:
        return name
    return next((c for c in decl.named_children if c.type == "identifier"), None)


def _declarator_value(decl: Node) -> Node | None:
    # Older grammars wrap the initializer in an equals_value_clause.
    for child in decl.named_children:
        if child.type == "equals_value_clause" and child.named_children:
            return child.named_children[-1]
    seen_eq = False
    for child in decl.children:
        if child.type == "=":
            seen_eq = True
        elif seen_eq and child.is_named and child.type != "comment":
            return child
    return None
