from __future__ import annotations

import pytest

from volumen.annotation import comment_inner_offsets, match_annotation


@pytest.mark.parametrize(
    "text",
    [
        "# @prompt",
        "// @PROMPT",
        "/* @Prompt */",
        "# (@prompt)",
        "# @prompt: system message",
        "-- @prompt!",
        "# @prompting and @prompt",
    ],
)
def test_marker_matches(text: str) -> None:
    assert match_annotation(text) is True


@pytest.mark.parametrize("text", ["# @prompting", "# my@prompt", "# @prompt_var"])
def test_marker_must_be_word_bounded(text: str) -> None:
    assert match_annotation(text) is False


def test_unrelated_text_is_no_match() -> None:
    assert match_annotation("# just a comment") is None


def test_comment_inner_offsets() -> None:
    assert comment_inner_offsets("# hi") == (1, 4)
    assert comment_inner_offsets("// hi") == (2, 5)
    assert comment_inner_offsets("/* hi */") == (2, 6)
    assert comment_inner_offsets("/** hi */") == (3, 7)
