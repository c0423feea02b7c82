from __future__ import annotations

from dataclasses import dataclass, field

from .model import PromptAnnotation


@dataclass(slots=True)
class Scope:
    prompt_idents: set[str] = field(default_factory=set)
    def_annotations: dict[str, tuple[PromptAnnotation, ...]] = field(default_factory=dict)
    typed_idents: set[str] = field(default_factory=set)


class ScopeTracker:
    """Lexical scopes of one parse; the file scope at the bottom is never popped.

    Lookups search from the innermost scope outward, so bindings made in a
    scope stay visible to nested scopes and disappear when it is exited.
    """

    def __init__(self) -> None:
        self._stack: list[Scope] = [Scope()]

    @property
    def depth(self) -> int:
        return len(self._stack)

    def enter(self) -> None:
        self._stack.append(Scope())

    def exit(self) -> None:
        if len(self._stack) > 1:
            self._stack.pop()

    def mark_prompt_ident(self, name: str) -> None:
        self._stack[-1].prompt_idents.add(name)

    def is_prompt_ident(self, name: str) -> bool:
        return any(name in s.prompt_idents for s in reversed(self._stack))

    def store_def_annotation(self, name: str, annotations: tuple[PromptAnnotation, ...]) -> None:
        self._stack[-1].def_annotations[name] = annotations

    def get_def_annotation(self, name: str) -> tuple[PromptAnnotation, ...] | None:
        for s in reversed(self._stack):
            if name in s.def_annotations:
                return s.def_annotations[name]
        return None

    def mark_typed(self, name: str) -> None:
        self._stack[-1].typed_idents.add(name)

    def is_typed(self, name: str) -> bool:
        return any(name in s.typed_idents for s in reversed(self._stack))
