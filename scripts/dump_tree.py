from __future__ import annotations

import argparse
from pathlib import Path

from volumen.languages import dialect_for
from volumen.languages.base import Role
from volumen.grammar import parse_tree


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(prog="dump_tree", description="Print a file's syntax tree with dialect roles")
    ap.add_argument("path")
    ap.add_argument("--all", action="store_true", help="Include anonymous nodes")
    args = ap.parse_args(argv)

    path = Path(args.path)
    src = path.read_bytes()
    dialect = dialect_for(path.name)
    tree = parse_tree(dialect.grammar, src)

    stack = [(tree.root_node, 0, None)]
    while stack:
        node, depth, field_name = stack.pop()
        if not node.is_named and not args.all:
            continue
        role = dialect.role(node)
        label = f"{field_name}: " if field_name else ""
        tag = f"  [{role.value}]" if role is not Role.OTHER else ""
        snippet = ""
        if node.child_count == 0:
            snippet = "  " + repr(src[node.start_byte : node.end_byte].decode("utf-8", errors="replace"))
        print(f"{'  ' * depth}{label}{node.type} {node.start_byte}..{node.end_byte}{tag}{snippet}")
        children = [(c, depth + 1, node.field_name_for_child(i)) for i, c in enumerate(node.children)]
        stack.extend(reversed(children))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
