
# ==============================================================================
# FAMILY CLASSES
# ==============================================================================
# Families whose formulas need a fuller structure (ingredient floor and
# structural backbone injection).
HEAVY_FAMILIES = ("oriental", "woody", "smoky", "leather", "incense", "gourmand", "spicy")

HEAVY_FLOOR = 9
STRUCTURE_THRESHOLD = 7
STRUCTURE_TARGET = 8
MAX_STRUCTURAL_INJECTIONS = 2

# ==============================================================================
# MATURATION
# ==============================================================================
SLOW_MATERIALS = ("oud", "labdanum", "patchouli", "myrrh", "benzoin", "styrax", "amber", "oakmoss")

STEEPING_CATEGORIES = {
    "fast-stable": {
        "min_days": 1, "max_days": 3, "label": "24–72 hours",
        "notes": "Mostly synthetic backbone. Stabilizes quickly. Evaluate after 48 hours.",
    },
    "medium-settle": {
        "min_days": 7, "max_days": 14, "label": "1–2 weeks",
        "notes": "Contains naturals/resins. Early sharpness softens within first week.",
    },
    "slow-evolving": {
        "min_days": 14, "max_days": 42, "label": "2–6 weeks",
        "notes": "Heavy naturals and resins. Do not judge before two weeks.",
    },
}

# ==============================================================================
# STRUCTURAL BACKBONES (cross-family pool)
# ==============================================================================
STRUCTURAL_SOURCES = (("clean", "base"), ("woody", "heart"), ("woody", "base"))

# Diffusive materials preferred over plain musks, in this order
DIFFUSER_PREFERENCE = ("Ambroxan", "Iso E")

# ==============================================================================
# FUNCTIONAL DUPLICATES
# ==============================================================================
FUNCTIONAL_GROUPS = {
    "white-musk": ["White Musk (Galaxolide)", "Musk Accord (white)", "Musk Ketone", "Musk (Ethylene Brassylate)"],
    "ambergris": ["Ambroxan", "Ambergris Accord (Ambroxan + Labdanum)"],
    "sandalwood": ["Sandalwood (Australian)", "Mysore Sandalwood Accord"],
    "vetiver": ["Vetiver EO (Java)", "Vetiver EO (Haiti)", "Vetiver EO"],
    "cedar": ["Cedarwood Atlas EO", "Cedarwood Virginia"],
    "labdanum-amber": ["Labdanum Absolute", "Amber Accord (in-house blend)"],
    "pepper": ["Pink Pepper CO2", "Pink Pepper EO", "Black Pepper CO2"],
    "hedione": ["Hedione", "Hedione HC"],
    "bergamot": ["Bergamot EO", "Bergamot EO (Italian)", "Bergamot EO (Calabrian type)"],
}

# ==============================================================================
# CONFLICT THRESHOLDS
# ==============================================================================
HIGH_DOMINANCE = 7
DOMINANCE_CLASH_FACTOR = 0.4
HARD_CAP_LOW = 3.5
HARD_CAP_HIGH = 6.5
HEAVY_PERCENT = 5.0
MAX_HEAVY_ENTRIES = 2
SUPPORT_ROLE_FACTOR = 0.7
DUPLICATE_FACTOR = 0.6
