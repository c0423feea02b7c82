from __future__ import annotations

from volumen.model import PromptAnnotation
from volumen.scope import ScopeTracker
from volumen.spans import SpanShape


def test_prompt_idents_are_lexical() -> None:
    s = ScopeTracker()
    s.mark_prompt_ident("outer")
    s.enter()
    assert s.depth == 2
    s.mark_prompt_ident("inner")
    assert s.is_prompt_ident("outer")
    assert s.is_prompt_ident("inner")
    s.exit()
    assert not s.is_prompt_ident("inner")
    assert s.is_prompt_ident("outer")


def test_global_scope_is_never_popped() -> None:
    s = ScopeTracker()
    s.exit()
    s.exit()
    assert s.depth == 1
    s.mark_typed("x")
    assert s.is_typed("x")


def test_def_annotation_shadowing() -> None:
    a = (PromptAnnotation(spans=(SpanShape.of((0, 9)),), exp="# @prompt"),)
    b = (PromptAnnotation(spans=(SpanShape.of((20, 30)),), exp="// @prompt"),)
    s = ScopeTracker()
    s.store_def_annotation("x", a)
    s.enter()
    assert s.get_def_annotation("x") == a
    s.store_def_annotation("x", b)
    assert s.get_def_annotation("x") == b
    s.exit()
    assert s.get_def_annotation("x") == a
    assert s.get_def_annotation("y") is None
