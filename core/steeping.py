from dataclasses import asdict, dataclass
from typing import Iterable, Optional

from core.context import STRONGEST_CONCENTRATION
from core.ingredients import IngredientRecord
from core.presets import SLOW_MATERIALS, STEEPING_CATEGORIES


@dataclass(frozen=True)
class SteepingEstimate:
    category: str
    min_days: int
    max_days: int
    label: str
    notes: str

    def to_dict(self):
        return asdict(self)


def maturation_score(ingredients: Iterable[IngredientRecord], concentration: Optional[str] = None) -> float:
    score = 0.0
    for ing in ingredients:
        name = ing.name.lower()
        if any(s in name for s in SLOW_MATERIALS):
            score += 3
        if ing.persistence >= 8:
            score += 1
        if ing.cost >= 4:
            score += 1

    if concentration == STRONGEST_CONCENTRATION:
        score *= 1.5
    return score


def estimate_steeping(ingredients: Iterable[IngredientRecord], concentration: Optional[str] = None) -> SteepingEstimate:
    """Classify how long a finished blend should rest before evaluation."""
    score = maturation_score(ingredients, concentration)

    if score < 6:
        category = "fast-stable"
    elif score < 14:
        category = "medium-settle"
    else:
        category = "slow-evolving"

    return SteepingEstimate(category=category, **STEEPING_CATEGORIES[category])
