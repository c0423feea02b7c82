from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum

from tree_sitter import Node

from .. import literals
from ..grammar import text
from ..literals import LiteralShape
from ..model import PromptVar


class Role(str, Enum):
    """What a grammar node means to the extraction engine."""

    STRING = "string"
    CONCAT = "concat"  # binary expression or implicit literal concatenation
    CALL = "call"
    ARRAY = "array"
    COLLECTION = "collection"  # hashes, objects, structs: never part of a prompt
    PRIMITIVE = "primitive"  # numbers, booleans, nil
    PAREN = "paren"
    COMMENT = "comment"
    SCOPE = "scope"
    OTHER = "other"


@dataclass(frozen=True, slots=True)
class Binding:
    """One identifier target of a declaration or assignment."""

    name: str
    value: Node | None
    declaration: bool = False
    typed: bool = False


@dataclass(frozen=True, slots=True)
class Site:
    node: Node  # the whole statement; anchors comments and the enclosure
    bindings: tuple[Binding, ...]


@dataclass(frozen=True, slots=True)
class JoinCall:
    elements: tuple[Node, ...]
    separator: Node


@dataclass(frozen=True, slots=True)
class FormatCall:
    template: Node
    args: tuple[Node, ...]
    style: str  # "printf" | "brace"
    keywords: dict[str, Node] = field(default_factory=dict)


class Dialect:
    """Per-language hooks for the generic engine.

    Subclasses fill in `roles` for their grammar and override the hooks whose
    defaults do not fit. Every hook is a pure function of the node and source.
    """

    name: str = ""
    grammar: str = ""
    roles: dict[str, Role] = {}
    concat_operators: frozenset[str] = frozenset({"+"})
    # Languages without declaration syntax treat the first annotated
    # assignment of an identifier as its definition.
    assignment_declares: bool = False

    def role(self, node: Node) -> Role:
        return self.roles.get(node.type, Role.OTHER)

    def comment_types(self) -> frozenset[str]:
        return frozenset(t for t, r in self.roles.items() if r is Role.COMMENT)

    def is_string_like(self, node: Node) -> bool:
        return self.role(node) is Role.STRING

    def span_shape(self, node: Node, src: bytes) -> LiteralShape:
        return literals.quoted(src, node.start_byte, node.end_byte)

    def extract_vars(self, node: Node, src: bytes) -> list[PromptVar]:
        return []

    def unwrap(self, node: Node) -> Node:
        while self.role(node) is Role.PAREN:
            inner = [c for c in node.named_children if self.role(c) is not Role.COMMENT]
            if len(inner) != 1:
                break
            node = inner[0]
        return node

    def concat_operands(self, node: Node, src: bytes) -> list[Node] | None:
        """Flatten a chain of concatenation operators, left to right."""
        if self.role(node) is not Role.CONCAT:
            return None
        out: list[Node] = []
        stack = [node]
        while stack:
            cur = stack.pop()
            if self.role(cur) is Role.CONCAT and cur.child_by_field_name("operator") is not None:
                op = text(src, cur.child_by_field_name("operator"))
                if op not in self.concat_operators:
                    if cur is node:
                        return None
                    out.append(cur)
                    continue
                stack.append(cur.child_by_field_name("right"))
                stack.append(cur.child_by_field_name("left"))
            else:
                out.append(cur)
        return out

    def join_call(self, node: Node, src: bytes) -> JoinCall | None:
        return None

    def format_call(self, node: Node, src: bytes) -> FormatCall | None:
        return None

    def array_elements(self, node: Node) -> list[Node]:
        return [c for c in node.named_children if self.role(c) is not Role.COMMENT]

    def site(self, node: Node, src: bytes) -> Site | None:
        """Bindings made by a statement-level declaration or assignment."""
        return None

    def call_arguments(self, node: Node) -> list[tuple[int, Node]]:
        """(floor, argument) pairs of a call, the floor being the end of the
        preceding `(` or `,` so that comments before it are not considered."""
        args = node.child_by_field_name("arguments")
        if args is None:
            return []
        out: list[tuple[int, Node]] = []
        floor = args.start_byte
        for child in args.children:
            if not child.is_named:
                floor = child.end_byte
                continue
            if self.role(child) is Role.COMMENT:
                continue
            out.append((floor, self.argument_value(child)))
        return out

    def argument_value(self, node: Node) -> Node:
        return node


def positional_args(dialect: Dialect, args: Node | None) -> list[Node]:
    if args is None:
        return []
    return [dialect.argument_value(c) for c in args.named_children if dialect.role(c) is not Role.COMMENT]
