from __future__ import annotations

MARKER = "@prompt"


def _is_word_char(ch: str) -> bool:
    return ch.isalnum() or ch == "_"


def match_annotation(text: str) -> bool | None:
    """Check a comment's text for the `@prompt` marker.

    Returns None when the marker is absent, otherwise whether at least one
    occurrence is word-bounded on both sides (so `@prompting`, `my@prompt`
    and `@prompt_var` do not count).
    """
    lowered = text.lower()
    pos = lowered.find(MARKER)
    if pos < 0:
        return None
    while pos >= 0:
        before = lowered[pos - 1] if pos > 0 else ""
        after_idx = pos + len(MARKER)
        after = lowered[after_idx] if after_idx < len(lowered) else ""
        if not (before and _is_word_char(before)) and not (after and _is_word_char(after)):
            return True
        pos = lowered.find(MARKER, pos + 1)
    return False


def comment_inner_offsets(text: str) -> tuple[int, int]:
    """Offsets of a comment's content within `text`, after its marker."""
    n = len(text)
    if text.startswith("/**") and text.endswith("*/") and n >= 5:
        return 3, n - 2
    if text.startswith("/*") and text.endswith("*/") and n >= 4:
        return 2, n - 2
    if text.startswith("///"):
        return 3, n
    if text.startswith("//"):
        return 2, n
    if text.startswith("#"):
        return 1, n
    if text.startswith(('"""', "'''")) and n >= 6:
        return 3, n - 3
    return 0, n
