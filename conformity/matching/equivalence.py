from conformity.llm.classifier import SemanticClassifier
from conformity.llm.exceptions import LlmError
from conformity.llm.prompt_loader import load_prompt_template
from conformity.logging.logger import Log
from conformity.matching.cache import SemanticMatchCache

_AFFIRMATIVE = frozenset({"yes", "si", "sì", "true", "same"})


class SemanticEquivalence:
    """Asks the classifier whether two normalized names denote the same analyte."""

    def __init__(self, classifier: SemanticClassifier, cache: SemanticMatchCache) -> None:
        self._classifier = classifier
        self._cache = cache
        self._template = load_prompt_template("parameter_equivalence_prompt.txt")

    def are_equivalent(self, first: str, second: str) -> bool:
        cached = self._cache.get(first, second)
        if cached is not None:
            return cached

        prompt = self._template.format(first=first, second=second)
        try:
            reply = self._classifier.classify(prompt)
        except LlmError as exc:
            Log.warning(f"Equivalence check '{first}' vs '{second}' failed: {exc}")
            return False

        words = reply.strip().lower().split()
        equivalent = bool(words) and words[0].strip(".,;:!\"'") in _AFFIRMATIVE
        self._cache.put(first, second, equivalent)
        return equivalent
