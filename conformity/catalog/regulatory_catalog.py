"""Regulatory rule catalog backed by a bundled JSON dataset.

The dataset is a list of categories shaped like::

    [{"id": "1", "name": "Gelati", "data": [
        {"parameter": "Enterobatteriacee", "satisfactoryValue": "<10 (ufc/g)", ...}
    ]}]
"""

import threading
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from conformity.catalog.exceptions import CatalogLoadError
from conformity.catalog.models import REGULATORY, LimitSet, RuleCategory, RuleEntry
from conformity.logging.logger import Log


class _ParameterRow(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    parameter: str | None = None
    satisfactory_value: str | None = Field(default=None, alias="satisfactoryValue")
    acceptable_value: str | None = Field(default=None, alias="acceptableValue")
    unsatisfactory_value: str | None = Field(default=None, alias="unsatisfactoryValue")
    analysis_method: str | None = Field(default=None, alias="analysisMethod")
    microbiological_criterion: str | None = Field(
        default=None, alias="microbiologicalCriterion"
    )
    bibliographic_references: str | None = Field(
        default=None, alias="bibliographicReferences"
    )
    notes: str | None = None


class _CategoryRow(BaseModel):
    model_config = ConfigDict(extra="ignore")

    id: str | int
    name: str
    data: list[_ParameterRow] = Field(default_factory=list)


_CATALOG_ADAPTER = TypeAdapter(list[_CategoryRow])


class RegulatoryCatalog:
    """Loads the regulatory categories once and serves them from memory."""

    def __init__(self, path: Path) -> None:
        self._path = path
        self._categories: list[RuleCategory] | None = None
        self._lock = threading.Lock()

    def categories(self) -> list[RuleCategory]:
        """Return all categories, loading the dataset on first use.

        Raises:
            CatalogLoadError: if the dataset cannot be read or is malformed.
        """
        if self._categories is None:
            with self._lock:
                if self._categories is None:
                    self._categories = self._load()
        return self._categories

    def find_by_id(self, category_id: str) -> RuleCategory | None:
        for category in self.categories():
            if category.id == category_id:
                return category
        return None

    def _load(self) -> list[RuleCategory]:
        try:
            raw = self._path.read_bytes()
        except OSError as exc:
            raise CatalogLoadError(f"Failed to read regulatory catalog: {exc}") from exc
        try:
            rows = _CATALOG_ADAPTER.validate_json(raw)
        except ValidationError as exc:
            raise CatalogLoadError(f"Malformed regulatory catalog: {exc}") from exc

        categories = [self._build_category(row) for row in rows]
        Log.info(f"Loaded {len(categories)} regulatory categories from {self._path}")
        return categories

    @staticmethod
    def _build_category(row: _CategoryRow) -> RuleCategory:
        entries = tuple(
            RuleEntry(
                parameter_name=param.parameter.strip(),
                limits=LimitSet(
                    satisfactory=param.satisfactory_value,
                    acceptable=param.acceptable_value,
                    unsatisfactory=param.unsatisfactory_value,
                ),
                method=param.analysis_method,
                notes=param.notes,
                criterion=param.microbiological_criterion,
                bibliographic_references=param.bibliographic_references,
            )
            for param in row.data
            if param.parameter and param.parameter.strip()
        )
        return RuleCategory(
            id=str(row.id),
            name=row.name.strip(),
            source=REGULATORY,
            entries=entries,
        )
