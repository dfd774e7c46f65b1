"""Deterministic threshold decision for a single measured result."""

import re

from conformity.catalog.models import LimitSet
from conformity.decision.limits import (
    extract_limit_unit,
    extract_result_unit,
    normalize_unit,
    parse_lower_bound,
    parse_measurement,
    parse_range,
    parse_upper_bound,
    unit_family,
)
from conformity.decision.models import (
    REASON_BANDED,
    REASON_EMPTY_RESULT,
    REASON_LIMITS_UNPARSEABLE,
    REASON_NO_LIMITS,
    REASON_NON_NUMERIC_RESULT,
    REASON_OUT_OF_BANDS,
    REASON_QUALITATIVE,
    REASON_UNIT_MISMATCH,
    Band,
    Decision,
)

_ABSENCE_LIMIT = re.compile(r"assen[tz]|absen[ct]", re.IGNORECASE)
_ABSENCE_PHRASES = (
    "non rilevato",
    "non rilevata",
    "non rilevabile",
    "non presente",
    "not detected",
    "not present",
    "not found",
    "assente",
    "assenza",
    "absent",
    "absence",
    "negativo",
    "negative",
)
_ABSENCE_EXACT = frozenset({"nd", "n.d.", "nr", "n.r."})
_DETECTION_PHRASES = (
    "rilevato",
    "rilevata",
    "presente",
    "detected",
    "present",
    "positivo",
    "positive",
)
_DETECTION_EXACT = frozenset({"r"})
_NEGATION = re.compile(r"\b(?:not|non|no)\b", re.IGNORECASE)


def indicates_absence(result: str) -> bool:
    text = result.strip().lower()
    return text in _ABSENCE_EXACT or any(phrase in text for phrase in _ABSENCE_PHRASES)


def indicates_detection(result: str) -> bool:
    """True for detection wording; negated forms such as "non rilevato" never count."""
    if indicates_absence(result) or _NEGATION.search(result):
        return False
    text = result.strip().lower()
    return text in _DETECTION_EXACT or any(phrase in text for phrase in _DETECTION_PHRASES)


def decide(result_text: str, result_unit: str | None, limits: LimitSet) -> Decision:
    """Band a measured result against a limit set.

    Steps run in a fixed order: empty result, qualitative absence check,
    unit compatibility guard, numeric parsing, then banding. Anything that
    cannot be reduced to a band is UNDETERMINED, never an error.
    """
    result = (result_text or "").strip()
    satisfactory = (limits.satisfactory or "").strip()
    acceptable = (limits.acceptable or "").strip()
    unsatisfactory = (limits.unsatisfactory or "").strip()
    reference_limit = satisfactory or acceptable or unsatisfactory

    if not result:
        return Decision(Band.UNDETERMINED, reference_limit, "No result reported.", REASON_EMPTY_RESULT)

    qualitative = _decide_qualitative(result, satisfactory)
    if qualitative is not None:
        return qualitative

    mismatch = _check_units(result, result_unit, limits)
    if mismatch is not None:
        return Decision(Band.UNDETERMINED, reference_limit, mismatch, REASON_UNIT_MISMATCH)

    if limits.is_empty():
        return Decision(Band.UNDETERMINED, "", "No limits defined for this parameter.", REASON_NO_LIMITS)

    upper = parse_upper_bound(satisfactory)
    lower = parse_lower_bound(unsatisfactory)
    acceptable_range = parse_range(acceptable)
    if upper is None and lower is None and acceptable_range is None:
        return Decision(
            Band.UNDETERMINED,
            reference_limit,
            "Limits could not be parsed into numeric thresholds.",
            REASON_LIMITS_UNPARSEABLE,
        )

    measurement = parse_measurement(result)
    if measurement is None:
        return Decision(
            Band.UNDETERMINED,
            reference_limit,
            f"Result '{result}' is not numeric and cannot be compared with the limits.",
            REASON_NON_NUMERIC_RESULT,
        )
    value = measurement.value
    shown = f"<{_format(value)}" if measurement.below_value else _format(value)

    if upper is not None and value < upper:
        return Decision(
            Band.SATISFACTORY,
            satisfactory,
            f"Value {shown} is below the satisfactory threshold {_format(upper)}.",
            REASON_BANDED,
        )
    if lower is not None and lower.reached_by(value):
        operator = "≥" if lower.inclusive else ">"
        return Decision(
            Band.UNSATISFACTORY,
            unsatisfactory,
            f"Value {shown} {operator} unsatisfactory threshold {_format(lower.value)}.",
            REASON_BANDED,
        )
    if acceptable_range is not None and acceptable_range.contains(value):
        return Decision(
            Band.ACCEPTABLE,
            acceptable,
            f"Value {shown} lies in the acceptable range "
            f"{_format(acceptable_range.minimum)} ≤ x < {_format(acceptable_range.maximum)}; "
            "compliant but needs attention.",
            REASON_BANDED,
        )
    return Decision(
        Band.UNDETERMINED,
        reference_limit,
        f"Value {shown} does not fall in any declared band.",
        REASON_OUT_OF_BANDS,
    )


def _decide_qualitative(result: str, satisfactory: str) -> Decision | None:
    if not _ABSENCE_LIMIT.search(satisfactory):
        return None
    if indicates_detection(result):
        return Decision(
            Band.UNSATISFACTORY,
            satisfactory,
            f"Limit requires absence but the result is '{result}'.",
            REASON_QUALITATIVE,
        )
    if indicates_absence(result):
        return Decision(
            Band.SATISFACTORY,
            satisfactory,
            f"Limit requires absence and the result is '{result}'.",
            REASON_QUALITATIVE,
        )
    return None


def _check_units(result: str, result_unit: str | None, limits: LimitSet) -> str | None:
    """Return a rationale when the measured and limit units cannot be compared."""
    limit_unit = (
        extract_limit_unit(limits.satisfactory)
        or extract_limit_unit(limits.acceptable)
        or extract_limit_unit(limits.unsatisfactory)
    )
    measured_unit = extract_result_unit(result, result_unit)
    if not limit_unit or not measured_unit:
        return None

    measured_family = unit_family(measured_unit)
    limit_family = unit_family(limit_unit)
    if measured_family and limit_family and measured_family != limit_family:
        return (
            f"Result unit '{measured_unit}' is a {measured_family} unit while the limit unit "
            f"'{limit_unit}' is a {limit_family} unit; the two unit families are not convertible."
        )
    if normalize_unit(measured_unit) != normalize_unit(limit_unit):
        return (
            f"Result unit '{measured_unit}' differs from limit unit '{limit_unit}'; "
            "no conversion is attempted."
        )
    return None


def _format(value: float) -> str:
    return f"{value:g}"
