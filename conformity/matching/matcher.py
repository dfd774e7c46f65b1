from collections.abc import Sequence

from conformity.catalog.models import RuleCategory, RuleEntry
from conformity.logging.logger import Log
from conformity.matching.equivalence import SemanticEquivalence
from conformity.matching.normalize import normalize_parameter_name

REGULATORY_MIN_SUBSTRING = 10
CUSTOM_MIN_SUBSTRING = 5


def names_match(first: str, second: str, min_substring_length: int) -> bool:
    """Deterministic comparison of two already normalized names."""
    if not first or not second:
        return False
    if first == second:
        return True
    shorter, longer = sorted((first, second), key=len)
    return len(shorter) >= min_substring_length and shorter in longer


class ParameterMatcher:
    """Finds the catalog entry a measured parameter refers to.

    Every entry is tried deterministically before any semantic call is made;
    the first hit in catalog order wins.
    """

    def __init__(self, equivalence: SemanticEquivalence | None = None) -> None:
        self._equivalence = equivalence

    def match(self, parameter_name: str, category: RuleCategory) -> RuleEntry | None:
        threshold = (
            REGULATORY_MIN_SUBSTRING if category.is_regulatory else CUSTOM_MIN_SUBSTRING
        )
        return self.match_entries(parameter_name, category.entries, threshold)

    def match_entries(
        self,
        parameter_name: str,
        entries: Sequence[RuleEntry],
        min_substring_length: int,
    ) -> RuleEntry | None:
        wanted = normalize_parameter_name(parameter_name)
        if not wanted:
            return None

        normalized = [(entry, normalize_parameter_name(entry.parameter_name)) for entry in entries]
        for entry, candidate in normalized:
            if names_match(wanted, candidate, min_substring_length):
                return entry

        if self._equivalence is None:
            return None
        for entry, candidate in normalized:
            if candidate and self._equivalence.are_equivalent(wanted, candidate):
                Log.info(f"Semantic match: '{parameter_name}' -> '{entry.parameter_name}'")
                return entry
        return None
