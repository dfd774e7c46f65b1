"""Heuristics for text-layer extraction that came out letter-spaced or garbled."""

import re

MIN_INSPECTED_LENGTH = 50
REPEATED_LETTER_LIMIT = 5
SINGLE_CHAR_RATIO_LIMIT = 0.3
MIN_TOKENS_FOR_RATIO = 20

_REPEATED_LETTER = re.compile(r"(\w)\s\1\s\1\s\1")
_REPEATED_NOISE = re.compile(r"(\w)(\s\1)+")
_MULTI_SPACE = re.compile(r"\s{2,}")


def is_text_corrupted(text: str) -> bool:
    """Return True when the text looks like broken extraction output."""
    if len(text) < MIN_INSPECTED_LENGTH:
        return False

    if len(_REPEATED_LETTER.findall(text)) > REPEATED_LETTER_LIMIT:
        return True

    tokens = text.split()
    if len(tokens) > MIN_TOKENS_FOR_RATIO:
        single_chars = sum(1 for token in tokens if len(token) == 1)
        if single_chars / len(tokens) > SINGLE_CHAR_RATIO_LIMIT:
            return True

    return False


def clean_corrupted_text(text: str) -> str:
    """Collapse repeated-letter noise and whitespace runs."""
    collapsed = _REPEATED_NOISE.sub(r"\1", text)
    return _MULTI_SPACE.sub(" ", collapsed).strip()
