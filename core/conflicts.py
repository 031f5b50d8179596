from typing import Callable, Dict, List, Optional, Tuple

from core.ingredients import LAYERS
from core.presets import (
    DOMINANCE_CLASH_FACTOR, DUPLICATE_FACTOR, FUNCTIONAL_GROUPS, HARD_CAP_HIGH,
    HARD_CAP_LOW, HEAVY_PERCENT, HIGH_DOMINANCE, MAX_HEAVY_ENTRIES,
    SUPPORT_ROLE_FACTOR,
)
from core.selection import Formula, FormulaIngredient, iter_entries

STRUCTURAL_LAYERS = ("heart", "base")

PassResult = Tuple[Formula, List[str]]


def _rebuild(formula: Formula,
             fn: Callable[[str, str, int, FormulaIngredient], FormulaIngredient],
             layers=STRUCTURAL_LAYERS) -> Formula:
    """Copy the formula, passing every entry of `layers` through `fn`."""
    out = {}
    for family, fam_layers in formula.items():
        out[family] = {}
        for layer in LAYERS:
            items = fam_layers.get(layer, [])
            if layer in layers:
                out[family][layer] = [fn(family, layer, idx, item) for idx, item in enumerate(items)]
            else:
                out[family][layer] = list(items)
    return out


# ======================================================================
# PASS A: DOMINANCE CLASH
# ======================================================================

def correct_dominance_clash(formula: Formula, hero_name: Optional[str]) -> PassResult:
    loud = [item for _, _, item in iter_entries(formula, STRUCTURAL_LAYERS)
            if item.dominance >= HIGH_DOMINANCE]
    if len(loud) <= 1:
        return formula, []

    def soften(family, layer, idx, item):
        if item.name != hero_name and item.dominance >= HIGH_DOMINANCE:
            return item.with_band(item.band.scaled(DOMINANCE_CLASH_FACTOR))
        return item

    return _rebuild(formula, soften), []


# ======================================================================
# PASS B: HARD CAP
# ======================================================================

def apply_hard_cap(formula: Formula, hero_name: Optional[str]) -> PassResult:
    def cap(family, layer, idx, item):
        if item.name == hero_name or item.band.high <= HARD_CAP_HIGH:
            return item
        return item.with_band(item.band.capped(HARD_CAP_LOW, HARD_CAP_HIGH))

    return _rebuild(formula, cap), []


# ======================================================================
# PASS C: HEAVY ENTRIES
# ======================================================================

def reduce_heavy_entries(formula: Formula, hero_name: Optional[str]) -> PassResult:
    heavy = [
        (family, layer, idx, item)
        for family, fam_layers in formula.items()
        for layer in STRUCTURAL_LAYERS
        for idx, item in enumerate(fam_layers.get(layer, []))
        if item.band.high > HEAVY_PERCENT
    ]
    if len(heavy) <= MAX_HEAVY_ENTRIES:
        return formula, []

    # hero first, then weakest persistence
    heavy.sort(key=lambda h: (h[3].name != hero_name, h[3].persistence))

    replacements: Dict[Tuple[str, str, int], FormulaIngredient] = {}
    notes = []
    for family, layer, idx, item in heavy:
        if item.name == hero_name:
            continue
        if len(heavy) - len(replacements) <= MAX_HEAVY_ENTRIES:
            break
        band = item.band.scaled(SUPPORT_ROLE_FACTOR)
        replacements[(family, layer, idx)] = item.with_band(band)
        notes.append(f"{item.name} reduced to support role ({band.render()}), yields headroom to hero")

    reduced = _rebuild(formula, lambda family, layer, idx, item: replacements.get((family, layer, idx), item))
    return reduced, notes


# ======================================================================
# PASS D: FUNCTIONAL DUPLICATES
# ======================================================================

def dampen_functional_duplicates(formula: Formula, hero_name: Optional[str]) -> PassResult:
    found: Dict[str, List[str]] = {}
    for _, _, item in iter_entries(formula):
        for group, members in FUNCTIONAL_GROUPS.items():
            if item.name in members:
                found.setdefault(group, []).append(item.name)

    notes = []
    for group, members in found.items():
        if len(members) < 2:
            continue
        notes.append(
            f"Functional overlap: {' + '.join(members)} (both serve {group} role). "
            "Consider replacing one for complexity.")
        weaker = members[1]
        formula = _rebuild(
            formula,
            lambda family, layer, idx, item: (
                item.with_band(item.band.scaled(DUPLICATE_FACTOR)) if item.name == weaker else item),
        )
    return formula, notes


CONFLICT_PASSES = (
    correct_dominance_clash,
    apply_hard_cap,
    reduce_heavy_entries,
    dampen_functional_duplicates,
)


def resolve_conflicts(formula: Formula, hero_name: Optional[str], passes=CONFLICT_PASSES) -> PassResult:
    """Run the correction passes in order; returns the new formula and perfumer notes."""
    notes = []
    for correction in passes:
        formula, pass_notes = correction(formula, hero_name)
        notes.extend(pass_notes)
    return formula, notes
