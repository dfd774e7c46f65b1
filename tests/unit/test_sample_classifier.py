from unittest.mock import MagicMock

import pytest

from conformity.catalog.exceptions import CatalogLoadError
from conformity.catalog.models import REGULATORY, RuleCategory
from conformity.catalog.regulatory_catalog import RegulatoryCatalog
from conformity.classification.classifier import (
    CORPUS_MAX_CHARS,
    SampleClassifier,
    infer_sample_kind,
    parse_inferred_sample,
)
from conformity.classification.models import InferredSample, SampleKind, SampleProfile
from conformity.classification.strategies import SubstringStrategy, SuggestedNameStrategy
from conformity.llm.classifier import SemanticClassifier
from conformity.llm.exceptions import LlmNetworkError, LlmResponseError

CATEGORIES = [
    RuleCategory(id="1", name="Gelati e dessert a base di latte", source=REGULATORY),
    RuleCategory(id="2", name="Prodotti di gastronomia cotti", source=REGULATORY),
]


def _make_classifier(
    replies: list[object],
    catalog_error: Exception | None = None,
) -> tuple[SampleClassifier, MagicMock, MagicMock]:
    semantic = MagicMock(spec=SemanticClassifier)
    semantic.classify_json.side_effect = replies
    catalog = MagicMock(spec=RegulatoryCatalog)
    if catalog_error is not None:
        catalog.categories.side_effect = catalog_error
    else:
        catalog.categories.return_value = CATEGORIES
    classifier = SampleClassifier(
        classifier=semantic,
        catalog=catalog,
        strategies=[SuggestedNameStrategy(), SubstringStrategy()],
    )
    return classifier, semantic, catalog


class TestInferSampleKind:
    def test_personnel_wins_over_surface(self) -> None:
        sample = InferredSample(matrix="Tampone mani operatore")
        assert infer_sample_kind(sample) is SampleKind.PERSONNEL_SWAB

    def test_surface_swab(self) -> None:
        sample = InferredSample(matrix="Tampone ambientale", category="food")
        assert infer_sample_kind(sample) is SampleKind.SURFACE_SWAB

    def test_surface_from_special_features(self) -> None:
        sample = InferredSample(matrix="Campione", special_features=("piano di lavoro",))
        assert infer_sample_kind(sample) is SampleKind.SURFACE_SWAB

    def test_water(self) -> None:
        sample = InferredSample(matrix="Acqua destinata al consumo umano")
        assert infer_sample_kind(sample) is SampleKind.WATER

    def test_food_from_category(self) -> None:
        sample = InferredSample(matrix="Alimento", product="Gelato", category="food")
        assert infer_sample_kind(sample) is SampleKind.FOOD_ITEM

    def test_beverage_is_food_item(self) -> None:
        sample = InferredSample(matrix="Bevanda", product="Succo di mela", category="beverage")
        assert infer_sample_kind(sample) is SampleKind.FOOD_ITEM

    def test_other(self) -> None:
        assert infer_sample_kind(InferredSample(matrix="Campione")) is SampleKind.OTHER


class TestParseInferredSample:
    def test_reads_aliases(self) -> None:
        sample = parse_inferred_sample(
            {
                "matrix": "Alimento",
                "product": " Gelato ",
                "ceirsa_category": "Gelati e dessert a base di latte",
                "specialFeatures": "artigianale",
            }
        )
        assert sample == InferredSample(
            matrix="Alimento",
            product="Gelato",
            suggested_category="Gelati e dessert a base di latte",
            special_features=("artigianale",),
        )

    def test_unwraps_single_item_list(self) -> None:
        sample = parse_inferred_sample([{"matrix": "Alimento"}])
        assert sample is not None
        assert sample.matrix == "Alimento"

    def test_rejects_non_object(self) -> None:
        assert parse_inferred_sample("Alimento") is None
        assert parse_inferred_sample([{}, {}]) is None


class TestSampleClassifier:
    def test_food_sample_binds_category(self) -> None:
        classifier, semantic, _catalog = _make_classifier(
            [
                {
                    "matrix": "Alimento",
                    "product": "Gelato al pistacchio",
                    "category": "food",
                    "suggested_category": "Gelati e dessert a base di latte",
                }
            ]
        )

        profile = classifier.classify("Campione: gelato al pistacchio")

        assert profile.sample_kind is SampleKind.FOOD_ITEM
        assert profile.regulatory_category_id == "1"
        assert profile.regulatory_category_name == "Gelati e dessert a base di latte"
        assert profile.product_label == "Gelato al pistacchio"
        prompt = semantic.classify_json.call_args.args[0]
        assert "1. Gelati e dessert a base di latte" in prompt
        assert semantic.classify_json.call_args.kwargs["json_schema"]["title"] == (
            "sample_profile"
        )

    def test_swab_never_binds_category(self) -> None:
        classifier, _semantic, _catalog = _make_classifier(
            [
                {
                    "matrix": "Tampone superficie",
                    "category": "food",
                    "suggested_category": "Gelati e dessert a base di latte",
                }
            ]
        )

        profile = classifier.classify("Tampone superficie banco gelati")

        assert profile.sample_kind is SampleKind.SURFACE_SWAB
        assert profile.regulatory_category_id is None

    def test_uses_fallback_prompt_after_failure(self) -> None:
        classifier, semantic, _catalog = _make_classifier(
            [LlmNetworkError("timeout"), {"matrix": "Acqua potabile"}]
        )

        profile = classifier.classify("Acqua potabile")

        assert semantic.classify_json.call_count == 2
        assert profile.sample_kind is SampleKind.WATER

    def test_default_profile_when_both_attempts_fail(self) -> None:
        classifier, _semantic, _catalog = _make_classifier(
            [LlmNetworkError("timeout"), LlmResponseError("Invalid JSON")]
        )

        assert classifier.classify("text") == SampleProfile.default()

    def test_default_profile_for_empty_corpus(self) -> None:
        classifier, semantic, _catalog = _make_classifier([])

        assert classifier.classify("  ") == SampleProfile.default()
        semantic.classify_json.assert_not_called()

    def test_missing_catalog_still_classifies(self) -> None:
        classifier, _semantic, _catalog = _make_classifier(
            [{"matrix": "Alimento", "product": "Gelato", "category": "food"}],
            catalog_error=CatalogLoadError("missing"),
        )

        profile = classifier.classify("Gelato")

        assert profile.sample_kind is SampleKind.FOOD_ITEM
        assert profile.regulatory_category_id is None

    def test_beverage_without_category_is_marked(self) -> None:
        classifier, _semantic, _catalog = _make_classifier(
            [{"matrix": "Bevanda", "product": "Succo di mela", "category": " Beverage "}]
        )

        profile = classifier.classify("Succo di mela 100%")

        assert profile.sample_kind is SampleKind.FOOD_ITEM
        assert profile.regulatory_category_id is None
        assert profile.product_category == "beverage"
        assert profile.is_beverage is True

    def test_corpus_is_truncated(self) -> None:
        classifier, semantic, _catalog = _make_classifier([{"matrix": "Campione"}])

        classifier.classify("x" * (CORPUS_MAX_CHARS + 10))

        prompt = semantic.classify_json.call_args.args[0]
        assert "x" * CORPUS_MAX_CHARS in prompt
        assert "x" * (CORPUS_MAX_CHARS + 1) not in prompt


@pytest.mark.parametrize(
    "matrix",
    ["Tampone ambientale", "Tampone mani operatore", "Superficie di lavoro", "Swab"],
)
def test_swab_profiles_have_no_category(matrix: str) -> None:
    classifier, _semantic, _catalog = _make_classifier(
        [{"matrix": matrix, "product": "Gelati", "category": "food", "suggested_category": "1"}]
    )

    profile = classifier.classify("report")

    assert profile.sample_kind.is_swab
    assert profile.regulatory_category_id is None
