"""Ordered category resolution strategies.

Each strategy looks at the inferred sample and a candidate list and either
returns a category or None; resolve_category tries them in order.
"""

import re
from abc import ABC, abstractmethod
from collections.abc import Sequence

from conformity.catalog.models import RuleCategory
from conformity.classification.models import InferredSample
from conformity.llm.classifier import SemanticClassifier
from conformity.llm.exceptions import LlmError
from conformity.llm.prompt_loader import load_prompt_template
from conformity.logging.logger import Log

MIN_TERM_LENGTH = 4
_NONE_REPLIES = frozenset({"", "none", "null", "nessuna", "nessuno", "n/a"})
_LEADING_INDEX = re.compile(r"^\s*(\d+)\b")


class CategoryStrategy(ABC):
    """One way of picking a category for an inferred sample."""

    name: str = "strategy"

    @abstractmethod
    def resolve(
        self,
        sample: InferredSample,
        candidates: Sequence[RuleCategory],
    ) -> RuleCategory | None:
        """Return the chosen category or None to defer to the next strategy."""


class SuggestedNameStrategy(CategoryStrategy):
    """Accepts the category the extraction call already named, if it exists."""

    name = "suggested"

    def resolve(
        self,
        sample: InferredSample,
        candidates: Sequence[RuleCategory],
    ) -> RuleCategory | None:
        suggested = (sample.suggested_category or "").strip().lower()
        if not suggested or suggested in _NONE_REPLIES:
            return None
        for category in candidates:
            if suggested in (category.name.strip().lower(), category.id.lower()):
                return category
        return None


class SubstringStrategy(CategoryStrategy):
    """Case-insensitive containment between sample terms and category names."""

    name = "substring"

    def resolve(
        self,
        sample: InferredSample,
        candidates: Sequence[RuleCategory],
    ) -> RuleCategory | None:
        for term in sample.terms():
            needle = term.strip().lower()
            if len(needle) < MIN_TERM_LENGTH:
                continue
            for category in candidates:
                name = category.name.strip().lower()
                if len(name) >= MIN_TERM_LENGTH and (needle in name or name in needle):
                    return category
        return None


class SemanticChoiceStrategy(CategoryStrategy):
    """Single classification call choosing among numbered candidate names."""

    name = "semantic"

    def __init__(self, classifier: SemanticClassifier) -> None:
        self._classifier = classifier
        self._template = load_prompt_template("category_selection_prompt.txt")

    def resolve(
        self,
        sample: InferredSample,
        candidates: Sequence[RuleCategory],
    ) -> RuleCategory | None:
        if not candidates or not sample.terms():
            return None
        prompt = self._template.format(
            product=sample.product or "unknown",
            matrix=sample.matrix or "unknown",
            description=sample.description or "unknown",
            candidates=numbered_names(candidates),
        )
        try:
            reply = self._classifier.classify(prompt)
        except LlmError as exc:
            Log.warning(f"Category selection call failed: {exc}")
            return None
        return pick_candidate(reply, candidates)


def numbered_names(candidates: Sequence[RuleCategory]) -> str:
    return "\n".join(f"{index}. {category.name}" for index, category in enumerate(candidates, 1))


def pick_candidate(reply: str, candidates: Sequence[RuleCategory]) -> RuleCategory | None:
    """Read a 1-based index or a literal name from a classification reply."""
    answer = reply.strip().strip("\"'.`").strip()
    if answer.lower() in _NONE_REPLIES:
        return None

    index_match = _LEADING_INDEX.match(answer)
    if index_match:
        index = int(index_match.group(1))
        if 1 <= index <= len(candidates):
            return candidates[index - 1]
        Log.warning(f"Category index {index} out of range 1..{len(candidates)}")
        return None

    lowered = answer.lower()
    for category in candidates:
        if category.name.strip().lower() == lowered:
            return category
    Log.warning(f"Category reply '{answer}' matches no candidate")
    return None


def resolve_category(
    strategies: Sequence[CategoryStrategy],
    sample: InferredSample,
    candidates: Sequence[RuleCategory],
) -> RuleCategory | None:
    """Try each strategy in order; the first non-None answer wins."""
    for strategy in strategies:
        category = strategy.resolve(sample, candidates)
        if category is not None:
            Log.info(f"Category '{category.name}' resolved by {strategy.name} strategy")
            return category
    return None
