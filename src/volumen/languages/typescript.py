from __future__ import annotations

from tree_sitter import Node

from ..grammar import field, text
from ..interpolation import var_from_node
from ..model import PromptVar
from .base import Binding, Dialect, FormatCall, JoinCall, Role, Site, positional_args


class TypeScriptDialect(Dialect):
    """JavaScript and TypeScript; `grammar` selects the plain or TSX parser."""

    roles = {
        "string": Role.STRING,
        "template_string": Role.STRING,
        "binary_expression": Role.CONCAT,
        "call_expression": Role.CALL,
        "array": Role.ARRAY,
        "object": Role.COLLECTION,
        "number": Role.PRIMITIVE,
        "true": Role.PRIMITIVE,
        "false": Role.PRIMITIVE,
        "null": Role.PRIMITIVE,
        "undefined": Role.PRIMITIVE,
        "parenthesized_expression": Role.PAREN,
        "comment": Role.COMMENT,
        "function_declaration": Role.SCOPE,
        "generator_function_declaration": Role.SCOPE,
        "function": Role.SCOPE,
        "function_expression": Role.SCOPE,
        "generator_function": Role.SCOPE,
        "arrow_function": Role.SCOPE,
        "method_definition": Role.SCOPE,
        "class_declaration": Role.SCOPE,
        "abstract_class_declaration": Role.SCOPE,
        "class": Role.SCOPE,
    }

    def __init__(self, name: str = "typescript", grammar: str = "typescript") -> None:
        self.name = name
        self.grammar = grammar

    def extract_vars(self, node: Node, src: bytes) -> list[PromptVar]:
        if node.type != "template_string":
            return []
        return [
            var_from_node(src, c.start_byte, c.end_byte, open_len=2)
            for c in node.children
            if c.type == "template_substitution"
        ]

    def _member_call(self, node: Node, src: bytes) -> tuple[Node, str] | None:
        if node.type != "call_expression":
            return None
        fn = field(node, "function")
        if fn is None or fn.type != "member_expression":
            return None
        obj, prop = field(fn, "object"), field(fn, "property")
        if obj is None or prop is None:
            return None
        return self.unwrap(obj), text(src, prop)

    def join_call(self, node: Node, src: bytes) -> JoinCall | None:
        member = self._member_call(node, src)
        if member is None or member[1] != "join" or member[0].type != "array":
            return None
        args = positional_args(self, field(node, "arguments"))
        if len(args) != 1:
            return None
        return JoinCall(elements=tuple(self.array_elements(member[0])), separator=self.unwrap(args[0]))

    def format_call(self, node: Node, src: bytes) -> FormatCall | None:
        # util.format("%s", value)
        member = self._member_call(node, src)
        if member is None or member[1] != "format" or text(src, member[0]) != "util":
            return None
        args = positional_args(self, field(node, "arguments"))
        if not args:
            return None
        return FormatCall(template=args[0], args=tuple(args[1:]), style="printf")

    def site(self, node: Node, src: bytes) -> Site | None:
        if node.type in ("lexical_declaration", "variable_declaration"):
            bindings: list[Binding] = []
            for decl in node.named_children:
                if decl.type != "variable_declarator":
                    continue
                name, value = field(decl, "name"), field(decl, "value")
                if name is None:
                    continue
                typed = field(decl, "type") is not None
                self._bind(src, name, value, bindings, declaration=True, typed=typed)
            return Site(node, tuple(bindings)) if bindings else None

        if node.type == "public_field_definition":
            name, value = field(node, "name"), field(node, "value")
            if name is None:
                return None
            typed = field(node, "type") is not None
            return Site(node, (Binding(text(src, name), value, declaration=True, typed=typed),))

        if node.type == "expression_statement":
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
                self._bind(src, target, value, bindings, declaration=False, typed=False)
            return Site(node, tuple(bindings)) if bindings else None
        return None

    def _bind(
        self,
        src: bytes,
        target: Node,
        value: Node | None,
        out: list[Binding],
        *,
        declaration: bool,
        typed: bool,
    ) -> None:
        stack: list[tuple[Node, Node | None]] = [(target, value)]
        while stack:
            tgt, val = stack.pop()
            if val is not None:
                val = self.unwrap(val)
            if tgt.type == "array_pattern":
                names = [c for c in tgt.named_children if c.type != "comment"]
                items = [c for c in val.named_children if c.type != "comment"] if val is not None else []
                vals: list[Node | None] = [None] * len(names)
                if val is not None and val.type == "array" and len(items) >= len(names):
                    vals = list(items[: len(names)])
                stack.extend(reversed(list(zip(names, vals))))
            elif tgt.type == "object_pattern":
                props = self._object_props(src, val) if val is not None and val.type == "object" else {}
                pairs: list[tuple[Node, Node | None]] = []
                for p in tgt.named_children:
                    if p.type == "shorthand_property_identifier_pattern":
                        pairs.append((p, props.get(text(src, p))))
                    elif p.type == "pair_pattern":
                        key, inner = field(p, "key"), field(p, "value")
                        if key is not None and inner is not None:
                            pairs.append((inner, props.get(_key_name(src, key))))
                    elif p.type == "object_assignment_pattern":
                        left = field(p, "left")
                        if left is not None:
                            pairs.append((left, props.get(text(src, left))))
                stack.extend(reversed(pairs))
            elif tgt.type in ("identifier", "member_expression", "shorthand_property_identifier_pattern"):
                out.append(Binding(text(src, tgt), val, declaration=declaration, typed=typed))

    def _object_props(self, src: bytes, obj: Node) -> dict[str, Node]:
        props: dict[str, Node] = {}
        for p in obj.named_children:
            if p.type == "pair":
                key, value = field(p, "key"), field(p, "value")
                if key is not None and value is not None:
                    props[_key_name(src, key)] = value
            elif p.type == "shorthand_property_identifier":
                props[text(src, p)] = p
        return props


def _key_name(src: bytes, key: Node) -> str:
    name = text(src, key)
    if key.type == "string" and len(name) >= 2:
        return name[1:-1]
    return name
