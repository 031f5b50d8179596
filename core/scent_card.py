from dataclasses import asdict, dataclass
from typing import Dict, List, Optional

from core.context import DEFAULT_CONCENTRATION, DEFAULT_INTENSITY, DEFAULT_OCCASION

# ==============================================================================
# FAMILY VOCABULARY
# ==============================================================================
FAMILY_VOCAB = {
    "floral": {"adjective": "floral", "texture": "silky", "opening": "a burst of fresh petals", "heart": "lush blooming florals", "base": "soft musky warmth", "seasons": ["spring", "summer"], "mood": "romantic and graceful"},
    "woody": {"adjective": "woody", "texture": "velvety", "opening": "crisp aromatic freshness", "heart": "rich textured woods", "base": "deep creamy sandalwood", "seasons": ["autumn", "winter"], "mood": "confident and grounded"},
    "oriental": {"adjective": "oriental", "texture": "opulent", "opening": "warm spiced brightness", "heart": "rich resinous depth", "base": "lingering amber warmth", "seasons": ["autumn", "winter"], "mood": "mysterious and magnetic"},
    "fresh": {"adjective": "fresh", "texture": "airy", "opening": "sparkling citrus and green notes", "heart": "clean transparent florals", "base": "light musky skin scent", "seasons": ["spring", "summer"], "mood": "effortless and uplifting"},
    "citrus": {"adjective": "citrus", "texture": "bright", "opening": "zesty citrus burst", "heart": "aromatic herbal crispness", "base": "soft woody undertone", "seasons": ["spring", "summer"], "mood": "energizing and joyful"},
    "gourmand": {"adjective": "gourmand", "texture": "enveloping", "opening": "sweet spiced warmth", "heart": "rich cocoa and tonka", "base": "deep vanilla comfort", "seasons": ["autumn", "winter"], "mood": "indulgent and cozy"},
    "aromatic": {"adjective": "aromatic", "texture": "herbal", "opening": "fresh lavender and herbs", "heart": "sage and aromatic greens", "base": "earthy vetiver base", "seasons": ["spring", "autumn"], "mood": "refined and composed"},
    "smoky": {"adjective": "smoky", "texture": "raw", "opening": "sharp pepper and spark", "heart": "smoldering wood and tar", "base": "campfire embers fading", "seasons": ["autumn", "winter"], "mood": "bold and untamed"},
    "spicy": {"adjective": "spicy", "texture": "radiant", "opening": "warm cardamom and pepper", "heart": "saffron-laced richness", "base": "amber and resinous glow", "seasons": ["autumn", "winter"], "mood": "seductive and daring"},
    "powdery": {"adjective": "powdery", "texture": "soft", "opening": "gentle aldehydic shimmer", "heart": "iris and heliotrope haze", "base": "cashmere musk embrace", "seasons": ["spring", "year-round"], "mood": "elegant and nostalgic"},
    "green": {"adjective": "green", "texture": "crisp", "opening": "crushed leaves and stems", "heart": "dewy fig and tea", "base": "mossy earth finish", "seasons": ["spring", "summer"], "mood": "natural and invigorating"},
    "aquatic": {"adjective": "aquatic", "texture": "cool", "opening": "ocean breeze and salt", "heart": "marine accord and ozone", "base": "driftwood and ambergris", "seasons": ["summer"], "mood": "free-spirited and clean"},
    "leather": {"adjective": "leather", "texture": "structured", "opening": "sharp birch and juniper", "heart": "supple suede warmth", "base": "dark castoreum and smoke", "seasons": ["autumn", "winter"], "mood": "powerful and distinguished"},
    "clean": {"adjective": "clean", "texture": "transparent", "opening": "crisp aldehydic sparkle", "heart": "white floral clarity", "base": "skin-close musk glow", "seasons": ["year-round"], "mood": "pure and modern"},
    "incense": {"adjective": "incense", "texture": "sacred", "opening": "bright resinous lift", "heart": "frankincense and myrrh smoke", "base": "deep benzoin meditation", "seasons": ["autumn", "winter"], "mood": "spiritual and contemplative"},
    "niche": {"adjective": "avant-garde", "texture": "complex", "opening": "unexpected green accord", "heart": "layered abstract textures", "base": "ambergris and innovation", "seasons": ["year-round"], "mood": "artistic and individual"},
}

# Fallback vocabulary per role when a family has no entry
ROLE_FALLBACK = {"dominant": "woody", "secondary": "floral", "accent": "fresh"}

CONCENTRATION_WEAR = {
    "Eau de Cologne": {
        "longevity": "2-3 hours",
        "application_tip": "Spray generously on pulse points and clothing. Ideal for refreshing throughout the day.",
        "reapply": "Reapply every 2-3 hours for continuous presence.",
    },
    "Eau de Toilette": {
        "longevity": "4-6 hours",
        "application_tip": "Apply to pulse points: wrists, neck, behind ears. A light spray on clothing extends the trail.",
        "reapply": "One midday refresh keeps the scent alive into evening.",
    },
    "Eau de Parfum": {
        "longevity": "6-10 hours",
        "application_tip": "Two sprays on pulse points is all you need. The warmth of your skin will do the rest.",
        "reapply": "Lasts from morning to evening without reapplication.",
    },
    "Parfum Extrait": {
        "longevity": "10-14+ hours",
        "application_tip": "Dab sparingly on inner wrists and behind ears. This concentration is potent, less is more.",
        "reapply": "A single application carries through a full day and into the night.",
    },
}

OCCASION_TEXT = {
    "Everyday signature": ["Daily wear", "Office", "Casual outings"],
    "Special occasion": ["Evening events", "Date night", "Celebrations"],
    "Date night": ["Intimate evenings", "Dinner dates", "Romantic occasions"],
    "Work / professional": ["Business meetings", "Office", "Networking events"],
    "Night out": ["Clubs", "Parties", "Late evenings"],
    "Outdoor / active": ["Weekends", "Outdoor activities", "Travel"],
}

INTENSITY_TIME = {
    "Subtle aura": "Day, a quiet personal signature",
    "Moderate": "Day to evening, versatile and balanced",
    "Leave a trail": "Evening, designed to make an entrance",
}

INTENSITY_PROJECTION = {
    "Leave a trail": "Strong projection with noticeable sillage",
    "Subtle aura": "Soft, close-to-skin aura",
}

CRAFT_NOTE = ("Composed using a structured perfumery system focused on balance, "
              "wearability, and material hierarchy.")


@dataclass
class ScentCard:
    headline: str
    story: str
    scent_journey: Dict[str, str]
    how_to_wear: Dict[str, object]
    perfumer_signature: str
    scent_name: Optional[str] = None

    def to_dict(self):
        return asdict(self)


@dataclass
class ScentExperience:
    character: str
    projection: str
    evolution: str
    craft_note: str = CRAFT_NOTE

    def to_dict(self):
        return asdict(self)


def _article(word: str) -> str:
    return "an" if word[:1].lower() in ("a", "e", "i", "o", "u") else "a"


def _vocab(family: str, role: str) -> dict:
    return FAMILY_VOCAB.get(family) or FAMILY_VOCAB[ROLE_FALLBACK[role]]


def generate_scent_card(dominant: str, secondary: str, accent: str,
                        concentration: Optional[str] = None,
                        occasion: Optional[str] = None,
                        intensity: Optional[str] = None,
                        scent_name: Optional[str] = None,
                        formula=None) -> ScentCard:
    """
    Customer-facing text for a formula: headline, story, the three-stage
    journey and a wear guide. `formula` is an optional FormulaResult used for
    the material count and steeping label.
    """
    dom = _vocab(dominant, "dominant")
    sec = _vocab(secondary, "secondary")
    acc = _vocab(accent, "accent")

    conc = concentration or DEFAULT_CONCENTRATION
    wear = CONCENTRATION_WEAR.get(conc, CONCENTRATION_WEAR[DEFAULT_CONCENTRATION])
    occasion = occasion or DEFAULT_OCCASION
    intensity = intensity or DEFAULT_INTENSITY

    texture = dom["texture"].capitalize()
    headline = (f"{_article(texture).capitalize()} {texture} {dom['adjective'].capitalize()} "
                f"with {sec['adjective'].capitalize()} Depth")

    story = (
        f"This is {_article(dom['mood'])} {dom['mood']} fragrance built on {dom['adjective']} foundations, "
        f"enriched with {sec['adjective']} complexity and touched by {acc['adjective']} intrigue. "
        f"Crafted as {conc}, it unfolds in waves, from {_article(dom['texture'])} {dom['texture']} opening "
        f"to a lasting signature that is unmistakably yours."
    )

    scent_journey = {
        "opening": f"{dom['opening'].capitalize()}, brightened by {acc['adjective']} accents: "
                   f"the first impression that draws people in.",
        "heart": f"The fragrance settles into {dom['heart']}, woven with {sec['heart']}. "
                 f"This is the true character of your scent.",
        "drydown": f"Hours later, {dom['base']} emerges, blending with {sec['base']} "
                   f"for a lasting, intimate finish.",
    }

    seasons: List[str] = list(dict.fromkeys(dom["seasons"] + sec["seasons"]))
    how_to_wear = {
        "occasions": list(OCCASION_TEXT.get(occasion, ["Any occasion"])),
        "seasons": seasons,
        "time_of_day": INTENSITY_TIME.get(intensity, INTENSITY_TIME[DEFAULT_INTENSITY]),
        "application_tip": wear["application_tip"],
        "longevity_note": f"Expect {wear['longevity']} of wear. {wear['reapply']}",
    }

    ingredient_count = formula.ingredient_count if formula is not None else 8
    steeping_label = formula.steeping.label if formula is not None else "1–2 weeks"
    signature = (f"Composed from {ingredient_count} carefully selected materials. "
                 f"Allow {steeping_label} for full maturation. "
                 f"Each bottle is individually batched and quality-checked.")

    return ScentCard(
        headline=headline,
        story=story,
        scent_journey=scent_journey,
        how_to_wear=how_to_wear,
        perfumer_signature=signature,
        scent_name=scent_name,
    )


def build_scent_experience(dominant: str, secondary: str, accent: str,
                           intensity: Optional[str] = None,
                           occasion: Optional[str] = None) -> ScentExperience:
    if occasion == "Special occasion":
        evolution = "Opens confidently, deepens with warmth and character over time"
    else:
        evolution = "Smooth opening with a controlled, wearable evolution"

    return ScentExperience(
        character=f"{dominant} structure with {accent} nuances",
        projection=INTENSITY_PROJECTION.get(intensity, "Balanced projection"),
        evolution=evolution,
    )
