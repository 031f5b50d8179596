from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import List, Optional

from core.compliance import ComplianceEngine
from core.conflicts import CONFLICT_PASSES, resolve_conflicts
from core.context import ContextModifiers, compute_context
from core.ingredients import IngredientDatabase, get_default_database
from core.selection import Formula, SelectionRun
from core.steeping import SteepingEstimate, estimate_steeping


@dataclass(frozen=True)
class GenerationMetadata:
    steeping: SteepingEstimate
    ingredient_count: int
    ifra_warnings: List[str] = field(default_factory=list)
    perfumer_notes: List[str] = field(default_factory=list)

    def to_dict(self):
        return {
            "steeping": self.steeping.to_dict(),
            "ingredient_count": self.ingredient_count,
            "ifra_warnings": list(self.ifra_warnings),
            "perfumer_notes": list(self.perfumer_notes),
        }


@dataclass
class FormulaResult:
    formula: Formula
    steeping: SteepingEstimate
    ingredient_count: int
    ifra_warnings: List[str]
    perfumer_notes: List[str]
    hero: Optional[str] = None
    context: ContextModifiers = field(default_factory=ContextModifiers)

    @property
    def metadata(self) -> GenerationMetadata:
        return GenerationMetadata(
            steeping=self.steeping,
            ingredient_count=self.ingredient_count,
            ifra_warnings=list(self.ifra_warnings),
            perfumer_notes=list(self.perfumer_notes),
        )

    def entries(self):
        """Flat list of (family, layer, ingredient) in formula order."""
        return [
            (family, layer, item)
            for family, layers in self.formula.items()
            for layer, items in layers.items()
            for item in items
        ]

    def formula_dict(self):
        return {
            family: {layer: [item.to_dict() for item in items] for layer, items in layers.items()}
            for family, layers in self.formula.items()
        }

    def to_dict(self):
        out = {"formula": self.formula_dict(), "hero": self.hero}
        out.update(self.metadata.to_dict())
        out["context"] = self.context.to_dict()
        return out


_LAST_METADATA: ContextVar[Optional[GenerationMetadata]] = ContextVar("formula_metadata", default=None)


def get_formula_metadata() -> Optional[GenerationMetadata]:
    """Metadata of the last generation made in the current execution context."""
    return _LAST_METADATA.get()


# ======================================================================
# ENGINE
# ======================================================================

class FormulaEngine:
    def __init__(self, database: Optional[IngredientDatabase] = None, compliance: Optional[ComplianceEngine] = None,
                 passes=CONFLICT_PASSES):
        self.db = database or get_default_database()
        self.compliance = compliance or ComplianceEngine()
        self.passes = passes

    def generate(self, dominant: str, secondary: str, accent: str, identifier: str,
                 concentration: Optional[str] = None, occasion: Optional[str] = None,
                 intensity: Optional[str] = None) -> FormulaResult:
        ctx = compute_context(concentration, occasion, intensity)
        run = SelectionRun(
            self.db, dominant, secondary, accent, identifier,
            concentration=concentration, context=ctx, compliance=self.compliance,
        )
        formula = run.run()
        formula, conflict_notes = resolve_conflicts(formula, run.hero_name, self.passes)

        result = FormulaResult(
            formula=formula,
            steeping=estimate_steeping(run.picked, concentration),
            ingredient_count=len(run.picked),
            ifra_warnings=list(run.ifra_warnings),
            perfumer_notes=run.perfumer_notes + conflict_notes,
            hero=run.hero_name,
            context=ctx,
        )
        _LAST_METADATA.set(result.metadata)
        return result


def generate_formula(dominant: str, secondary: str, accent: str, identifier: str,
                     concentration: Optional[str] = None, occasion: Optional[str] = None,
                     intensity: Optional[str] = None,
                     database: Optional[IngredientDatabase] = None) -> FormulaResult:
    return FormulaEngine(database).generate(
        dominant, secondary, accent, identifier,
        concentration=concentration, occasion=occasion, intensity=intensity,
    )
