from dataclasses import dataclass, replace
from typing import Dict, Iterable, Iterator, List, Optional, Sequence, Tuple

from core.compliance import ComplianceEngine
from core.context import ContextModifiers, compute_context
from core.ingredients import LAYERS, IngredientDatabase, IngredientRecord, PercentRange
from core.presets import (
    DIFFUSER_PREFERENCE, HEAVY_FAMILIES, HEAVY_FLOOR, HIGH_DOMINANCE,
    MAX_STRUCTURAL_INJECTIONS, STRUCTURAL_SOURCES, STRUCTURE_TARGET,
    STRUCTURE_THRESHOLD,
)
from core.rng import SeededRng
from core.steeping import estimate_steeping

MAX_HERO_SCALE = 1.3


@dataclass(frozen=True)
class FormulaIngredient:
    name: str
    band: PercentRange
    supplier: str
    normalized_pct: Optional[float] = None
    persistence: int = 5
    dominance: int = 0

    @property
    def percent(self) -> str:
        return self.band.render()

    def with_band(self, band: PercentRange) -> "FormulaIngredient":
        return replace(self, band=band)

    def to_dict(self):
        out = {"name": self.name, "percent": self.percent, "supplier": self.supplier}
        if self.normalized_pct is not None:
            out["normalized_pct"] = round(self.normalized_pct, 3)
        return out


Formula = Dict[str, Dict[str, List[FormulaIngredient]]]


def empty_layers() -> Dict[str, List[FormulaIngredient]]:
    return {layer: [] for layer in LAYERS}


def iter_entries(formula: Formula, layers: Sequence[str] = LAYERS) -> Iterator[Tuple[str, str, FormulaIngredient]]:
    for family, fam_layers in formula.items():
        for layer in layers:
            for item in fam_layers.get(layer, []):
                yield family, layer, item


def count_entries(formula: Formula) -> int:
    return sum(1 for _ in iter_entries(formula))


def _entry(record: IngredientRecord, band: PercentRange, mid: Optional[float] = None) -> FormulaIngredient:
    return FormulaIngredient(
        name=record.name,
        band=band,
        supplier=record.supplier,
        normalized_pct=mid,
        persistence=record.persistence,
        dominance=record.dominance,
    )


def _diffuser_rank(name: str) -> int:
    for rank, marker in enumerate(DIFFUSER_PREFERENCE):
        if marker in name:
            return rank
    return len(DIFFUSER_PREFERENCE)


# ======================================================================
# SELECTION RUN
# ======================================================================

class SelectionRun:
    """
    One pass of ingredient selection for a single request.

    All mutable state (used names, picked records, warnings, the formula
    under construction) lives on the run, never on the database.
    """

    def __init__(
        self,
        database: IngredientDatabase,
        dominant: str,
        secondary: str,
        accent: str,
        identifier: str,
        concentration: Optional[str] = None,
        context: Optional[ContextModifiers] = None,
        compliance: Optional[ComplianceEngine] = None,
    ):
        self.db = database
        self.dominant = dominant
        self.secondary = secondary
        self.accent = accent
        self.requested = (dominant, secondary, accent)
        self.concentration = concentration
        self.ctx = context or compute_context(concentration)
        self.compliance = compliance or ComplianceEngine()
        self.rng = SeededRng(identifier)

        self.used = set()
        self.picked: List[IngredientRecord] = []
        self.ifra_warnings: List[str] = []
        self.perfumer_notes: List[str] = []
        self.formula: Formula = {}
        self.hero: Optional[IngredientRecord] = None

    def run(self) -> Formula:
        self.hero = self.select_hero()
        self.fill_dominant()
        self.fill_secondary()
        self.fill_accent()
        self.top_up_floor()
        self.inject_structure()
        return self.formula

    @property
    def hero_name(self) -> Optional[str]:
        return self.hero.name if self.hero else None

    # ------------------------------------------------------------------
    # HERO & SCORING
    # ------------------------------------------------------------------

    def select_hero(self) -> Optional[IngredientRecord]:
        structural = self.db.layer(self.dominant, "base") + self.db.layer(self.dominant, "heart")
        pool = [r for r in structural if r.role == "hero"]
        if not pool:
            # no explicit hero: promote the most persistent material
            pool = sorted(structural, key=lambda r: r.persistence, reverse=True)
        if not pool:
            return None
        return pool[int(self.rng() * min(3, len(pool)))]

    def score(self, candidate: IngredientRecord, offset: int, jitter: float = 3.0) -> float:
        score = 2.0 * sum(1 for family in self.requested if family in candidate.blends_with)
        score += self.rng(offset) * jitter
        if (self.hero and candidate.dominance >= HIGH_DOMINANCE
                and self.hero.dominance >= HIGH_DOMINANCE):
            score -= 4
        return score

    def _available(self, pool: Iterable[IngredientRecord]) -> List[IngredientRecord]:
        hero_name = self.hero_name
        return [r for r in pool if r.name not in self.used and r.name != hero_name]

    def _mark(self, record: IngredientRecord):
        self.used.add(record.name)
        self.picked.append(record)

    def _take(self, record: IngredientRecord, multiplier: float) -> FormulaIngredient:
        self._mark(record)
        return self._scaled_entry(record, multiplier)

    def _scaled_entry(self, record: IngredientRecord, multiplier: float) -> FormulaIngredient:
        mid = record.band.midpoint * multiplier
        warning = self.compliance.check_limit(record, mid)
        if warning:
            self.ifra_warnings.append(warning)
        return _entry(record, PercentRange.around(mid), mid)

    def pick(self, pool: Sequence[IngredientRecord], role: str, count: int, multiplier: float) -> List[FormulaIngredient]:
        candidates = [r for r in self._available(pool) if r.role == role]
        if not candidates:
            candidates = self._available(pool)

        scored = [(self.score(c, idx * 3), c) for idx, c in enumerate(candidates)]
        scored.sort(key=lambda s: s[0], reverse=True)
        return [self._take(c, multiplier) for _, c in scored[:count]]

    def _merge(self, family: str, layers: Dict[str, List[FormulaIngredient]]):
        target = self.formula.setdefault(family, empty_layers())
        for layer, items in layers.items():
            target[layer].extend(items)

    # ------------------------------------------------------------------
    # FAMILY FILLS
    # ------------------------------------------------------------------

    def fill_dominant(self):
        dom = self.dominant
        if dom not in self.db:
            return

        hero = self.hero
        if hero:
            self._mark(hero)
        hero_scale = min(self.ctx.hero_scale, MAX_HERO_SCALE)

        top_pool = sorted(
            [r for r in self.db.layer(dom, "top") if r.name not in self.used],
            key=lambda r: r.persistence, reverse=True,
        )
        dom_top = []
        if top_pool:
            opener = top_pool[int(self.rng(10) * min(2, len(top_pool)))]
            self._mark(opener)
            dom_top.append(_entry(opener, opener.band))
            # keep the opening alive until the heart develops
            if opener.persistence < 5 and len(top_pool) > 1:
                booster = next((r for r in top_pool if r.name not in self.used and r.persistence >= 5), None)
                if booster:
                    self._mark(booster)
                    dom_top.append(_entry(booster, booster.band))

        hero_in_heart = hero is not None and hero.layer == "heart"
        hero_in_base = hero is not None and hero.layer == "base"

        dom_heart = []
        if hero_in_heart:
            dom_heart.append(self._scaled_entry(hero, hero_scale))
        heart_count = 1 if (hero_in_heart or hero_in_base) else 2
        heart_mult = 0.75 if hero_in_base else 1.0
        dom_heart.extend(self.pick(self.db.layer(dom, "heart"), "backbone", heart_count, heart_mult))

        dom_base = []
        if hero_in_base:
            dom_base.append(self._scaled_entry(hero, hero_scale))
        base_mult = self.ctx.musk_boost * 0.7 if hero_in_base else self.ctx.musk_boost
        dom_base.extend(self.pick(self.db.layer(dom, "base"), "backbone", 1, base_mult))

        self._merge(dom, {"top": dom_top, "heart": dom_heart, "base": dom_base})

    def fill_secondary(self):
        sec = self.secondary
        if sec not in self.db:
            return
        self._merge(sec, {
            "top": self.pick(self.db.layer(sec, "top"), "lift", 1, 0.8),
            "heart": self.pick(self.db.layer(sec, "heart"), "backbone", 1, 0.7),
            "base": self.pick(self.db.layer(sec, "base"), "backbone", 1, 0.6),
        })

    def fill_accent(self):
        acc = self.accent
        if acc not in self.db:
            return
        heart_names = {r.name for r in self.db.layer(acc, "heart")}
        picks = self.pick(self.db.heart_and_base(acc), "character", 1, 0.5)
        self._merge(acc, {
            "top": [],
            "heart": [p for p in picks if p.name in heart_names],
            "base": [p for p in picks if p.name not in heart_names],
        })

    # ------------------------------------------------------------------
    # FLOOR & STRUCTURE
    # ------------------------------------------------------------------

    def top_up_floor(self):
        if self.dominant not in HEAVY_FAMILIES:
            return
        current = count_entries(self.formula)
        if current >= HEAVY_FLOOR:
            return

        sources = (
            self.db.layer(self.secondary, "heart") + self.db.layer(self.accent, "heart")
            + self.db.layer(self.secondary, "base") + self.db.layer(self.accent, "base")
        )
        seen = set()
        fills = []
        for r in self._available(sources):
            if r.role == "character" and r.name not in seen:
                seen.add(r.name)
                fills.append(r)

        scored = [(self.score(c, idx * 7 + 99, jitter=2.0), c) for idx, c in enumerate(fills)]
        scored.sort(key=lambda s: s[0], reverse=True)

        for _, record in scored[:HEAVY_FLOOR - current]:
            entry = self._take(record, 0.4)
            target = self.secondary if record.family == self.secondary else self.accent
            self._merge(target, {record.layer: [entry]})

    def inject_structure(self):
        dom = self.dominant
        if dom not in HEAVY_FAMILIES:
            return
        current = count_entries(self.formula)
        if current >= STRUCTURE_THRESHOLD:
            return
        if estimate_steeping(self.picked, self.concentration).category == "fast-stable":
            return

        seen = set()
        candidates = []
        for family, layer in STRUCTURAL_SOURCES:
            for r in self._available(self.db.layer(family, layer)):
                if r.role == "backbone" and dom in r.blends_with and r.name not in seen:
                    seen.add(r.name)
                    candidates.append(r)
        candidates.sort(key=lambda r: (_diffuser_rank(r.name), r.persistence))

        for record in candidates[:min(MAX_STRUCTURAL_INJECTIONS, STRUCTURE_TARGET - current)]:
            self._merge(dom, {"base": [self._take(record, 0.4)]})
            self.perfumer_notes.append(
                f"{record.name} added at low dose as structural backbone, improves diffusion and polish")
