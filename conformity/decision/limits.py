"""Parsing of free-text limit expressions, measured results and units.

Limits come from laboratory catalogs written by hand, e.g. ``"<10^2 (ufc/g)"``,
``"10≤ x <104 (ufc/g)"``, ``"≥10^3 (ufc/g)"`` or ``"Assente (in 25 g)"``.
Everything here returns None for text it cannot read; nothing raises.
"""

import re
from dataclasses import dataclass

_NUMBER = r"\d+(?:[.,]\d+)?"
_POWER = r"10\^\s*-?\d+"
_VALUE = rf"(?:{_POWER}|{_NUMBER})"

_BARE_POWER = re.compile(r"\b10([1-9])\b")
_UPPER_BOUND = re.compile(rf"(<=|<|≤)\s*({_VALUE})")
_LOWER_BOUND = re.compile(rf"(>=|≥|>)\s*({_VALUE})")
_RANGE = re.compile(rf"({_VALUE})\s*(?:≤|<=)\s*x\s*(?:<|≤|<=)\s*({_VALUE})", re.IGNORECASE)
_PAREN_UNIT = re.compile(r"\(([^)]+)\)")

_LEADING_LESS_THAN = re.compile(rf"^\s*(?:<|≤|<=)\s*({_VALUE})")
_SCIENTIFIC = re.compile(rf"({_NUMBER})\s*[x×*·]\s*10\^\s*(-?\d+)", re.IGNORECASE)
_E_NOTATION = re.compile(rf"({_NUMBER})[eE]([+-]?\d+)")
_FIRST_VALUE = re.compile(_VALUE)
_UNIT_AFTER_VALUE = re.compile(rf"{_VALUE}\s*(?:[x×*·]\s*{_POWER})?\s*([^\d\s].*)$")

_SURFACE_UNIT = re.compile(r"cm2|/cm")
_MASS_VOLUME_UNIT = re.compile(r"/g\b|/ml\b")

SURFACE_FAMILY = "surface-area"
MASS_VOLUME_FAMILY = "mass/volume"

_EMPTY_UNIT_MARKERS = frozenset({"", "_", "-", "—", "n/a", "na"})


@dataclass(frozen=True)
class Measurement:
    """A measured value; below_value is True for results written as "< v"."""

    value: float
    below_value: bool = False


@dataclass(frozen=True)
class LowerBound:
    value: float
    inclusive: bool = True

    def reached_by(self, measured: float) -> bool:
        return measured >= self.value if self.inclusive else measured > self.value


@dataclass(frozen=True)
class Range:
    minimum: float
    maximum: float

    def contains(self, measured: float) -> bool:
        return self.minimum <= measured < self.maximum


def normalize_limit(text: str) -> str:
    """Rewrite caret-less powers of ten ("102" -> "10^2")."""
    return _BARE_POWER.sub(r"10^\1", text)


def parse_number(token: str) -> float | None:
    """Parse "10^n" as a power of ten, otherwise a decimal with "." or ","."""
    cleaned = token.replace(" ", "")
    if cleaned.startswith("10^"):
        try:
            return float(10 ** int(cleaned[3:]))
        except ValueError:
            return None
    try:
        return float(cleaned.replace(",", "."))
    except ValueError:
        return None


def parse_upper_bound(limit: str | None) -> float | None:
    if not limit:
        return None
    match = _UPPER_BOUND.search(normalize_limit(limit))
    return parse_number(match.group(2)) if match else None


def parse_lower_bound(limit: str | None) -> LowerBound | None:
    if not limit:
        return None
    match = _LOWER_BOUND.search(normalize_limit(limit))
    if not match:
        return None
    value = parse_number(match.group(2))
    if value is None:
        return None
    return LowerBound(value=value, inclusive=match.group(1) != ">")


def parse_range(limit: str | None) -> Range | None:
    if not limit:
        return None
    match = _RANGE.search(normalize_limit(limit))
    if not match:
        return None
    minimum = parse_number(match.group(1))
    maximum = parse_number(match.group(2))
    if minimum is None or maximum is None:
        return None
    return Range(minimum=minimum, maximum=maximum)


def parse_measurement(result: str) -> Measurement | None:
    """Read the measured value: the number after a leading "<", else the first number."""
    text = result.strip()
    if not text:
        return None

    leading = _LEADING_LESS_THAN.match(text)
    if leading:
        scientific = _SCIENTIFIC.match(text[leading.start(1):])
        if scientific:
            value = _scientific_value(scientific)
        else:
            value = parse_number(leading.group(1))
        return Measurement(value=value, below_value=True) if value is not None else None

    scientific = _SCIENTIFIC.search(text)
    if scientific:
        value = _scientific_value(scientific)
        return Measurement(value=value) if value is not None else None

    e_notation = _E_NOTATION.search(text)
    if e_notation:
        mantissa = parse_number(e_notation.group(1))
        if mantissa is not None:
            return Measurement(value=mantissa * 10 ** int(e_notation.group(2)))

    first = _FIRST_VALUE.search(text)
    if first:
        value = parse_number(first.group(0))
        return Measurement(value=value) if value is not None else None
    return None


def _scientific_value(match: re.Match[str]) -> float | None:
    mantissa = parse_number(match.group(1))
    if mantissa is None:
        return None
    return mantissa * 10 ** int(match.group(2))


def extract_limit_unit(limit: str | None) -> str | None:
    """Unit token written inside the first parentheses of a limit."""
    if not limit:
        return None
    match = _PAREN_UNIT.search(limit)
    if not match:
        return None
    unit = match.group(1).strip()
    return unit or None


def extract_result_unit(result: str, unit: str | None) -> str | None:
    """Measured unit: the explicit unit column, else the text after the number."""
    if unit is not None and unit.strip().lower() not in _EMPTY_UNIT_MARKERS:
        return unit.strip()
    match = _UNIT_AFTER_VALUE.search(result.strip())
    if not match:
        return None
    trailing = match.group(1).strip()
    return trailing if any(ch.isalpha() for ch in trailing) else None


def normalize_unit(unit: str) -> str:
    """Lowercase, drop spaces and dots, and fold spelling variants."""
    normalized = re.sub(r"[\s.]", "", unit.lower())
    return normalized.replace("cm²", "cm2").replace("cfu", "ufc")


def unit_family(unit: str) -> str | None:
    normalized = normalize_unit(unit)
    if _SURFACE_UNIT.search(normalized):
        return SURFACE_FAMILY
    if _MASS_VOLUME_UNIT.search(normalized):
        return MASS_VOLUME_FAMILY
    return None
