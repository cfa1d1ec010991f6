"""Text normalization ahead of keyword matching."""

import re

# Colons, runs of 2+ exclamation/question marks, bullet glyphs
_DECORATION_RE = re.compile(r"[:：]|[!！?？]{2,}|[・•●◆■□▶►]")
# "-" / "*" only count as bullets at the start of a token
_DASH_BULLET_RE = re.compile(r"(?:^|(?<=\s))[-*](?=\s)")
_WHITESPACE_RE = re.compile(r"\s+")


def normalize(text: str) -> str:
    """Strip decorative punctuation and collapse whitespace."""
    if not text:
        return ""
    cleaned = _DECORATION_RE.sub(" ", text)
    cleaned = _DASH_BULLET_RE.sub(" ", cleaned)
    return _WHITESPACE_RE.sub(" ", cleaned).strip()
