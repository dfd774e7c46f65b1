"""Infers sample kind, product and regulatory category from a report corpus."""

import re
from collections.abc import Sequence
from typing import Any

from conformity.catalog.exceptions import CatalogLoadError
from conformity.catalog.models import RuleCategory
from conformity.catalog.regulatory_catalog import RegulatoryCatalog
from conformity.classification.models import InferredSample, SampleKind, SampleProfile
from conformity.classification.strategies import (
    CategoryStrategy,
    numbered_names,
    resolve_category,
)
from conformity.llm.classifier import SemanticClassifier
from conformity.llm.exceptions import LlmError
from conformity.llm.prompt_loader import load_json_schema, load_prompt_template
from conformity.logging.logger import Log

CORPUS_MAX_CHARS = 12000


def _keywords(*words: str) -> re.Pattern[str]:
    return re.compile(r"\b(?:" + "|".join(re.escape(w) for w in words) + r")\b", re.IGNORECASE)


_PERSONNEL = _keywords(
    "personale", "operatore", "operatori", "mani", "personnel", "operator", "operators", "hands"
)
_SURFACE = _keywords(
    "tampone", "tamponi", "superficie", "superfici", "ambientale", "surface", "surfaces",
    "swab", "swabs", "utensil", "utensils", "utensile", "utensili", "attrezzatura",
    "attrezzature", "paletta", "coltello", "banco", "piano di lavoro",
)
_WATER = _keywords("acqua", "acque", "water")
_FOOD_CATEGORIES = frozenset({"food", "beverage"})


def infer_sample_kind(sample: InferredSample) -> SampleKind:
    """Keyword-driven sample kind; swab wording always wins over category hints."""
    haystack = " ".join(
        t for t in (sample.matrix, sample.description, *sample.special_features) if t
    )
    if _PERSONNEL.search(haystack):
        return SampleKind.PERSONNEL_SWAB
    if _SURFACE.search(haystack):
        return SampleKind.SURFACE_SWAB
    if _WATER.search(haystack) or _WATER.search(sample.product or ""):
        return SampleKind.WATER
    if (sample.category or "").strip().lower() in _FOOD_CATEGORIES:
        return SampleKind.FOOD_ITEM
    return SampleKind.OTHER


def parse_inferred_sample(raw: Any) -> InferredSample | None:
    if isinstance(raw, list) and len(raw) == 1:
        raw = raw[0]
    if not isinstance(raw, dict):
        return None

    def text(*keys: str) -> str | None:
        for key in keys:
            value = raw.get(key)
            if isinstance(value, str) and value.strip():
                return value.strip()
        return None

    features = raw.get("special_features", raw.get("specialFeatures")) or []
    if isinstance(features, str):
        features = [features]
    return InferredSample(
        matrix=text("matrix"),
        description=text("description"),
        product=text("product"),
        category=text("category"),
        suggested_category=text("suggested_category", "ceirsa_category", "regulatory_category"),
        special_features=tuple(str(f).strip() for f in features if str(f).strip()),
    )


class SampleClassifier:
    """Builds a SampleProfile for a corpus. Never raises on capability failures."""

    def __init__(
        self,
        *,
        classifier: SemanticClassifier,
        catalog: RegulatoryCatalog,
        strategies: Sequence[CategoryStrategy],
    ) -> None:
        self._classifier = classifier
        self._catalog = catalog
        self._strategies = list(strategies)
        self._template = load_prompt_template("sample_profile_prompt.txt")
        self._fallback_template = load_prompt_template("sample_profile_fallback_prompt.txt")
        self._schema = load_json_schema("sample_profile_schema.json")

    def classify(self, corpus: str) -> SampleProfile:
        """Infer the profile; falls back to the conservative default on failure."""
        if not corpus.strip():
            Log.warning("Empty corpus, using default sample profile")
            return SampleProfile.default()

        categories = self._load_categories()
        sample = self._infer(corpus, categories)
        if sample is None:
            Log.warning("Sample inference failed, using default sample profile")
            return SampleProfile.default()

        kind = infer_sample_kind(sample)
        category: RuleCategory | None = None
        if kind.is_swab:
            Log.info(f"Sample kind {kind.value}: no regulatory category applies")
        else:
            category = resolve_category(self._strategies, sample, categories)

        profile = SampleProfile(
            sample_kind=kind,
            product_label=sample.product,
            regulatory_category_id=category.id if category else None,
            regulatory_category_name=category.name if category else None,
            freeform_description=sample.description,
            matrix_label=sample.matrix,
            special_tags=sample.special_features,
            product_category=(sample.category or "").strip().lower() or None,
        )
        Log.info(
            f"Sample classified as {kind.value}, "
            f"category={profile.regulatory_category_name or 'none'}"
        )
        return profile

    def _load_categories(self) -> list[RuleCategory]:
        try:
            return self._catalog.categories()
        except CatalogLoadError as exc:
            Log.warning(f"Regulatory catalog unavailable: {exc}")
            return []

    def _infer(self, corpus: str, categories: list[RuleCategory]) -> InferredSample | None:
        excerpt = corpus[:CORPUS_MAX_CHARS]
        prompts = (
            self._template.format(
                categories=numbered_names(categories) or "(none available)",
                corpus=excerpt,
            ),
            self._fallback_template.format(corpus=excerpt),
        )
        for attempt, prompt in enumerate(prompts, start=1):
            try:
                raw = self._classifier.classify_json(prompt, json_schema=self._schema)
            except LlmError as exc:
                Log.warning(f"Sample inference attempt {attempt} failed: {exc}")
                continue
            sample = parse_inferred_sample(raw)
            if sample is not None:
                return sample
            Log.warning(f"Sample inference attempt {attempt} returned no object")
        return None
