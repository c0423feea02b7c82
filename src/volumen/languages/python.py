from __future__ import annotations

from tree_sitter import Node

from ..grammar import field, text
from ..interpolation import var_from_node
from ..model import PromptVar
from .base import Binding, Dialect, FormatCall, JoinCall, Role, Site, positional_args

_PATTERNS = {"pattern_list", "tuple_pattern", "list_pattern"}
_SEQUENCES = {"expression_list", "tuple", "list"}


class PythonDialect(Dialect):
    name = "python"
    grammar = "python"
    roles = {
        "string": Role.STRING,
        "concatenated_string": Role.CONCAT,
        "binary_operator": Role.CONCAT,
        "call": Role.CALL,
        "list": Role.ARRAY,
        "tuple": Role.ARRAY,
        "dictionary": Role.COLLECTION,
        "set": Role.COLLECTION,
        "list_comprehension": Role.COLLECTION,
        "dictionary_comprehension": Role.COLLECTION,
        "set_comprehension": Role.COLLECTION,
        "generator_expression": Role.COLLECTION,
        "integer": Role.PRIMITIVE,
        "float": Role.PRIMITIVE,
        "true": Role.PRIMITIVE,
        "false": Role.PRIMITIVE,
        "none": Role.PRIMITIVE,
        "parenthesized_expression": Role.PAREN,
        "comment": Role.COMMENT,
        "function_definition": Role.SCOPE,
        "class_definition": Role.SCOPE,
        "lambda": Role.SCOPE,
    }

    def extract_vars(self, node: Node, src: bytes) -> list[PromptVar]:
        out: list[PromptVar] = []
        for child in node.children:
            if child.type != "interpolation":
                continue
            expr = field(child, "expression")
            out.append(
                var_from_node(
                    src,
                    child.start_byte,
                    child.end_byte,
                    open_len=1,
                    expression=(expr.start_byte, expr.end_byte) if expr is not None else None,
                )
            )
        return out

    def concat_operands(self, node: Node, src: bytes) -> list[Node] | None:
        if node.type == "concatenated_string":
            return [c for c in node.named_children if c.type == "string"]
        return super().concat_operands(node, src)

    def _method_on_string(self, node: Node, src: bytes, method: str) -> Node | None:
        if node.type != "call":
            return None
        fn = field(node, "function")
        if fn is None or fn.type != "attribute":
            return None
        obj = field(fn, "object")
        attr = field(fn, "attribute")
        if obj is None or attr is None or text(src, attr) != method:
            return None
        obj = self.unwrap(obj)
        return obj if self.is_string_like(obj) else None

    def join_call(self, node: Node, src: bytes) -> JoinCall | None:
        sep = self._method_on_string(node, src, "join")
        if sep is None:
            return None
        args = positional_args(self, field(node, "arguments"))
        if len(args) != 1:
            return None
        seq = self.unwrap(args[0])
        if seq.type not in ("list", "tuple"):
            return None
        return JoinCall(elements=tuple(self.array_elements(seq)), separator=sep)

    def format_call(self, node: Node, src: bytes) -> FormatCall | None:
        template = self._method_on_string(node, src, "format")
        if template is not None:
            args: list[Node] = []
            keywords: dict[str, Node] = {}
            arg_list = field(node, "arguments")
            for arg in arg_list.named_children if arg_list is not None else []:
                if self.role(arg) is Role.COMMENT:
                    continue
                if arg.type == "keyword_argument":
                    name, value = field(arg, "name"), field(arg, "value")
                    if name is not None and value is not None:
                        keywords[text(src, name)] = value
                elif arg.type in ("list_splat", "dictionary_splat"):
                    return None
                else:
                    args.append(arg)
            return FormatCall(template=template, args=tuple(args), style="brace", keywords=keywords)

        if node.type == "binary_operator":
            op = field(node, "operator")
            left = field(node, "left")
            right = field(node, "right")
            if op is None or text(src, op) != "%" or left is None or right is None:
                return None
            left = self.unwrap(left)
            if not self.is_string_like(left):
                return None
            right = self.unwrap(right)
            if right.type == "tuple":
                return FormatCall(template=left, args=tuple(self.array_elements(right)), style="printf")
            if right.type == "dictionary":
                keywords = {}
                for pair in right.named_children:
                    key, value = field(pair, "key"), field(pair, "value")
                    if pair.type == "pair" and key is not None and value is not None and self.is_string_like(key):
                        inner = self.span_shape(key, src).span.inner
                        keywords[inner.slice(src)] = value
                return FormatCall(template=left, args=(), style="printf", keywords=keywords)
            return FormatCall(template=left, args=(right,), style="printf")
        return None

    def argument_value(self, node: Node) -> Node:
        return field(node, "value") if node.type == "keyword_argument" else node

    def call_arguments(self, node: Node) -> list[tuple[int, Node]]:
        args = field(node, "arguments")
        if args is None or args.type != "argument_list":
            return []
        return super().call_arguments(node)

    def site(self, node: Node, src: bytes) -> Site | None:
        if node.type != "expression_statement":
            return None
        assign = node.named_children[0] if node.named_children else None
        if assign is None or assign.type != "assignment":
            return None

        # a = b = value nests the second assignment as the right-hand side.
        targets: list[Node] = []
        typed = False
        cur = assign
        value: Node | None = None
        while cur is not None and cur.type == "assignment":
            left = field(cur, "left")
            if left is not None:
                targets.append(left)
            typed = typed or field(cur, "type") is not None
            value = field(cur, "right")
            cur = value
        bindings: list[Binding] = []
        for target in targets:
            self._bind(src, target, value, typed, bindings)
        return Site(node=node, bindings=tuple(bindings)) if bindings else None

    def _bind(self, src: bytes, target: Node, value: Node | None, typed: bool, out: list[Binding]) -> None:
        stack: list[tuple[Node, Node | None]] = [(target, value)]
        while stack:
            tgt, val = stack.pop()
            if tgt.type in _PATTERNS:
                names = [c for c in tgt.named_children if c.type != "comment"]
                vals: list[Node | None] = [None] * len(names)
                if val is not None:
                    val = self.unwrap(val)
                    items = [c for c in val.named_children if c.type != "comment"]
                    if val.type in _SEQUENCES and len(items) == len(names):
                        vals = list(items)
                stack.extend(reversed(list(zip(names, vals))))
            elif tgt.type in ("identifier", "attribute", "subscript"):
                out.append(Binding(name=text(src, tgt), value=val, declaration=typed, typed=typed))
