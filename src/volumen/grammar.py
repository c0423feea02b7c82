"""tree-sitter grammar loading and a few node helpers shared by the dialects."""

from __future__ import annotations

import importlib
import logging
from collections.abc import Iterator

import tree_sitter

logger = logging.getLogger(__name__)

# grammar name -> (distribution module, language function)
GRAMMARS: dict[str, tuple[str, str]] = {
    "python": ("tree_sitter_python", "language"),
    "typescript": ("tree_sitter_typescript", "language_typescript"),
    "tsx": ("tree_sitter_typescript", "language_tsx"),
    "ruby": ("tree_sitter_ruby", "language"),
    "php": ("tree_sitter_php", "language_php"),
    "go": ("tree_sitter_go", "language"),
    "java": ("tree_sitter_java", "language"),
    "csharp": ("tree_sitter_c_sharp", "language"),
}

_LANGUAGES: dict[str, tree_sitter.Language] = {}


def get_language(name: str) -> tree_sitter.Language:
    lang = _LANGUAGES.get(name)
    if lang is not None:
        return lang
    try:
        module_name, func = GRAMMARS[name]
    except KeyError:
        raise ValueError(f"unknown grammar: {name!r}") from None
    logger.debug("loading tree-sitter grammar %s from %s.%s", name, module_name, func)
    mod = importlib.import_module(module_name)
    lang = tree_sitter.Language(getattr(mod, func)())
    _LANGUAGES[name] = lang
    return lang


def parse_tree(name: str, src: bytes) -> tree_sitter.Tree:
    # Parsers carry per-parse state, so each call gets its own.
    parser = tree_sitter.Parser(get_language(name))
    return parser.parse(src)


def iter_nodes(root: tree_sitter.Node) -> Iterator[tree_sitter.Node]:
    """Pre-order walk without recursion."""
    stack = [root]
    while stack:
        node = stack.pop()
        yield node
        stack.extend(reversed(node.children))


def first_error(root: tree_sitter.Node) -> tree_sitter.Node | None:
    if not root.has_error:
        return None
    for node in iter_nodes(root):
        if node.is_error or node.is_missing:
            return node
    return root


def field(node: tree_sitter.Node, name: str) -> tree_sitter.Node | None:
    return node.child_by_field_name(name)


def text(src: bytes, node: tree_sitter.Node) -> str:
    return src[node.start_byte : node.end_byte].decode("utf-8", errors="replace")
