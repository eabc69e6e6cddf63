"""Text normalization helpers applied to extracted PDF text."""
from __future__ import annotations

import re

# Only these control characters collapse to a space; every other C0/C1
# control (0x1C-0x1F and 0x85 included) is removed.
_COLLAPSING_CONTROLS = "\t\n\x0b\x0c\r"
_CONTROL_CHARS = "".join(
    chr(code)
    for code in list(range(0x00, 0x20)) + list(range(0x7F, 0xA0))
    if chr(code) not in _COLLAPSING_CONTROLS
)
_CONTROL_RE = re.compile("[" + re.escape(_CONTROL_CHARS) + "]")
_WHITESPACE_RE = re.compile(r"\s+")


def clean_text(text: str | None) -> str:
    """Strip control characters, collapse whitespace runs to one space and trim."""
    if not text:
        return ""
    cleaned = _CONTROL_RE.sub("", text)
    cleaned = _WHITESPACE_RE.sub(" ", cleaned)
    return cleaned.strip()


def count_words(text: str | None) -> int:
    """Count whitespace-separated tokens that contain a letter or a digit."""
    if not text or not text.strip():
        return 0
    return sum(1 for token in text.split() if any(ch.isalnum() for ch in token))
