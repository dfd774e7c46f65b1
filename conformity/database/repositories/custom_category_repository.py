from collections import OrderedDict
from typing import Any

from psycopg.rows import dict_row

from conformity.catalog.models import CUSTOM, LimitSet, RuleCategory, RuleEntry
from conformity.classification.models import SampleKind
from conformity.database.connection import get_connection

SAMPLE_TYPE_KINDS: dict[str, SampleKind] = {
    "FOOD_PRODUCT": SampleKind.FOOD_ITEM,
    "BEVERAGE": SampleKind.FOOD_ITEM,
    "ENVIRONMENTAL_SWAB": SampleKind.SURFACE_SWAB,
    "PERSONNEL_SWAB": SampleKind.PERSONNEL_SWAB,
    "WATER": SampleKind.WATER,
    "OTHER": SampleKind.OTHER,
}


class CustomCategoryRepository:
    """Read-only access to user-managed custom categories and their parameters."""

    def list_categories(self) -> list[RuleCategory]:
        """Return every custom category with its parameters in display order."""
        with get_connection() as conn:
            with conn.cursor(row_factory=dict_row) as cur:
                cur.execute(
                    """
                    SELECT c.id AS category_id, c.name, c.description, c.sample_type,
                           p.parameter, p.analysis_method, p.criterion_type,
                           p.satisfactory_value, p.acceptable_value,
                           p.unsatisfactory_value, p.bibliographic_references,
                           p.notes
                    FROM custom_categories c
                    LEFT JOIN custom_category_parameters p ON p.category_id = c.id
                    ORDER BY c.name, p.position, p.created_at
                    """
                )
                rows = cur.fetchall()

        return self._group_rows(rows)

    @staticmethod
    def _group_rows(rows: list[dict[str, Any]]) -> list[RuleCategory]:
        grouped: OrderedDict[str, tuple[dict[str, Any], list[RuleEntry]]] = OrderedDict()
        for row in rows:
            category_id = str(row["category_id"])
            if category_id not in grouped:
                grouped[category_id] = (row, [])
            if row.get("parameter"):
                grouped[category_id][1].append(
                    RuleEntry(
                        parameter_name=row["parameter"],
                        limits=LimitSet(
                            satisfactory=row["satisfactory_value"],
                            acceptable=row["acceptable_value"],
                            unsatisfactory=row["unsatisfactory_value"],
                        ),
                        method=row["analysis_method"],
                        notes=row["notes"],
                        criterion=row["criterion_type"],
                        bibliographic_references=row["bibliographic_references"],
                    )
                )

        return [
            RuleCategory(
                id=category_id,
                name=head["name"],
                source=CUSTOM,
                entries=tuple(entries),
                sample_kind=SAMPLE_TYPE_KINDS.get((head.get("sample_type") or "").upper()),
                description=head.get("description"),
            )
            for category_id, (head, entries) in grouped.items()
        ]
