from collections.abc import Sequence

from conformity.catalog.exceptions import CatalogLoadError
from conformity.catalog.models import RuleCategory
from conformity.catalog.regulatory_catalog import RegulatoryCatalog
from conformity.classification.models import InferredSample, SampleProfile
from conformity.classification.strategies import CategoryStrategy, resolve_category
from conformity.database.repositories.custom_category_repository import (
    CustomCategoryRepository,
)
from conformity.logging.logger import Log


class RuleSetSelector:
    """Chooses the rule category a document is evaluated against.

    The regulatory category bound in the profile wins; otherwise a custom
    category compatible with the sample kind is looked up.
    """

    def __init__(
        self,
        *,
        catalog: RegulatoryCatalog,
        custom_repo: CustomCategoryRepository | None,
        strategies: Sequence[CategoryStrategy],
    ) -> None:
        self._catalog = catalog
        self._custom_repo = custom_repo
        self._strategies = list(strategies)

    def select(self, profile: SampleProfile) -> RuleCategory | None:
        if profile.regulatory_category_id is not None:
            category = self._find_regulatory(profile.regulatory_category_id)
            if category is not None:
                return category

        if self._custom_repo is None:
            return None

        compatible = [
            category
            for category in self._custom_repo.list_categories()
            if category.entries
            and (category.sample_kind is None or category.sample_kind == profile.sample_kind)
        ]
        if not compatible:
            Log.info(f"No custom category compatible with {profile.sample_kind.value}")
            return None
        if len(compatible) == 1:
            Log.info(f"Using the only compatible custom category '{compatible[0].name}'")
            return compatible[0]

        sample = InferredSample(
            matrix=profile.matrix_label,
            description=profile.freeform_description,
            product=profile.product_label,
        )
        return resolve_category(self._strategies, sample, compatible)

    def _find_regulatory(self, category_id: str) -> RuleCategory | None:
        try:
            return self._catalog.find_by_id(category_id)
        except CatalogLoadError as exc:
            Log.warning(f"Regulatory catalog unavailable: {exc}")
            return None
