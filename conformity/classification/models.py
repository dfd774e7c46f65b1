from dataclasses import dataclass, field
from enum import Enum


class SampleKind(str, Enum):
    """Physical nature of the tested sample."""

    SURFACE_SWAB = "surface-swab"
    FOOD_ITEM = "food-item"
    PERSONNEL_SWAB = "personnel-swab"
    WATER = "water"
    OTHER = "other"

    @property
    def is_swab(self) -> bool:
        return self in (SampleKind.SURFACE_SWAB, SampleKind.PERSONNEL_SWAB)


DEFAULT_MATRIX_LABEL = "Tampone ambientale"
BEVERAGE_CATEGORY = "beverage"


@dataclass(frozen=True)
class SampleProfile:
    """What a document's sample is and which regulatory category it binds to.

    Swab kinds are measured per surface area and can never bind to a
    mass/volume regulatory category.
    """

    sample_kind: SampleKind
    product_label: str | None = None
    regulatory_category_id: str | None = None
    regulatory_category_name: str | None = None
    freeform_description: str | None = None
    matrix_label: str | None = None
    special_tags: tuple[str, ...] = field(default_factory=tuple)
    product_category: str | None = None

    def __post_init__(self) -> None:
        if self.sample_kind.is_swab and self.regulatory_category_id is not None:
            raise ValueError(
                f"Sample kind '{self.sample_kind.value}' cannot bind to a regulatory category"
            )

    @property
    def is_beverage(self) -> bool:
        return not self.sample_kind.is_swab and self.product_category == BEVERAGE_CATEGORY

    @classmethod
    def default(cls) -> "SampleProfile":
        """Conservative profile used when nothing could be inferred."""
        return cls(
            sample_kind=SampleKind.SURFACE_SWAB,
            matrix_label=DEFAULT_MATRIX_LABEL,
        )

    def to_dict(self) -> dict[str, object]:
        return {
            "sample_kind": self.sample_kind.value,
            "product_label": self.product_label,
            "regulatory_category_id": self.regulatory_category_id,
            "regulatory_category_name": self.regulatory_category_name,
            "freeform_description": self.freeform_description,
            "matrix_label": self.matrix_label,
            "special_tags": list(self.special_tags),
            "product_category": self.product_category,
        }


@dataclass(frozen=True)
class InferredSample:
    """Raw profile fields returned by the structured-extraction call."""

    matrix: str | None = None
    description: str | None = None
    product: str | None = None
    category: str | None = None
    suggested_category: str | None = None
    special_features: tuple[str, ...] = field(default_factory=tuple)

    def terms(self) -> list[str]:
        """Non-empty product/matrix/description terms, most specific first."""
        return [t for t in (self.product, self.matrix, self.description) if t and t.strip()]
