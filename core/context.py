from dataclasses import dataclass, field
from typing import Dict, Optional

CONCENTRATIONS = ("Eau de Cologne", "Eau de Toilette", "Eau de Parfum", "Parfum Extrait")
STRONGEST_CONCENTRATION = "Parfum Extrait"
DEFAULT_CONCENTRATION = "Eau de Parfum"

OCCASIONS = (
    "Everyday signature", "Special occasion", "Date night",
    "Work / professional", "Night out", "Outdoor / active",
)
DEFAULT_OCCASION = "Everyday signature"

INTENSITIES = ("Subtle aura", "Moderate", "Leave a trail")
DEFAULT_INTENSITY = "Moderate"


@dataclass
class ContextModifiers:
    hero_scale: float = 1.0
    projection_cap: float = 12.0
    musk_boost: float = 1.0
    top_persist_min: int = 4
    note_balance: Dict[str, int] = field(
        default_factory=lambda: {"top": 15, "heart": 45, "base": 40})

    def to_dict(self):
        return {
            "hero_scale": round(self.hero_scale, 3),
            "projection_cap": round(self.projection_cap, 2),
            "musk_boost": round(self.musk_boost, 3),
            "top_persist_min": self.top_persist_min,
            "note_balance": dict(self.note_balance),
        }


# ==============================================================================
# MODIFIER TABLES
# ==============================================================================
CONCENTRATION_MODIFIERS = {
    "Eau de Cologne": {
        "hero_scale": 0.8, "musk_boost": 0.8, "projection_factor": 0.75,
        "top_persist_min": 3, "note_balance": {"top": 25, "heart": 45, "base": 30},
    },
    "Eau de Toilette": {
        "hero_scale": 0.9, "note_balance": {"top": 20, "heart": 45, "base": 35},
    },
    "Eau de Parfum": {},
    "Parfum Extrait": {
        "hero_scale": 1.3, "musk_boost": 1.3,
        "top_persist_min": 6, "note_balance": {"top": 10, "heart": 40, "base": 50},
    },
}

INTENSITY_MODIFIERS = {
    "Subtle aura": {"hero_factor": 0.85, "projection_factor": 0.7},
    "Moderate": {},
    "Leave a trail": {"hero_factor": 1.2, "musk_factor": 1.2},
}

OCCASION_PROJECTION = {
    "Everyday signature": 0.8,
    "Work / professional": 0.8,
}


def compute_context(concentration: Optional[str] = None,
                    occasion: Optional[str] = None,
                    intensity: Optional[str] = None) -> ContextModifiers:
    """Unrecognized values leave the defaults in place."""
    ctx = ContextModifiers()

    conc = CONCENTRATION_MODIFIERS.get(concentration, {})
    ctx.hero_scale = conc.get("hero_scale", ctx.hero_scale)
    ctx.musk_boost = conc.get("musk_boost", ctx.musk_boost)
    ctx.projection_cap *= conc.get("projection_factor", 1.0)
    ctx.top_persist_min = conc.get("top_persist_min", ctx.top_persist_min)
    if "note_balance" in conc:
        ctx.note_balance = dict(conc["note_balance"])

    inten = INTENSITY_MODIFIERS.get(intensity, {})
    ctx.hero_scale *= inten.get("hero_factor", 1.0)
    ctx.musk_boost *= inten.get("musk_factor", 1.0)
    ctx.projection_cap *= inten.get("projection_factor", 1.0)

    ctx.projection_cap *= OCCASION_PROJECTION.get(occasion, 1.0)
    return ctx
