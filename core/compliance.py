from typing import Optional

from core.ingredients import IngredientRecord


class ComplianceEngine:
    """
    Advisory IFRA check on dosed percentages.

    The check only reports: a dose over the ceiling is flagged, never clamped.
    Formulation caps live in the conflict passes.
    """

    def check_limit(self, record: IngredientRecord, percent: float) -> Optional[str]:
        limit = record.regulatory_limit
        if limit is None or percent <= limit:
            return None
        return f"{record.name} dosed at {percent:.2f}% exceeds the IFRA limit of {limit:g}% (review before production)"
