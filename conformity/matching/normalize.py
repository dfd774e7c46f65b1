import re

_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def normalize_parameter_name(name: str) -> str:
    """Lowercase, turn punctuation into spaces and collapse whitespace."""
    spaced = _PUNCTUATION.sub(" ", name.lower())
    return _WHITESPACE.sub(" ", spaced).strip()
