from core.ingredients import IngredientDatabase
from core.steeping import estimate_steeping, maturation_score


def _records(row_factory, *rows):
    db = IngredientDatabase.from_records([row_factory("oriental", "base", name, **kw) for name, kw in rows])
    return list(db.layer("oriental", "base"))


def test_slow_materials_weigh_three(row_factory):
    records = _records(row_factory, ("Labdanum Absolute", {"persistence": 5, "cost": 2}))
    assert maturation_score(records) == 3


def test_slow_match_is_case_insensitive(row_factory):
    records = _records(row_factory, ("Dark OUD Accord", {"persistence": 5, "cost": 2}))
    assert maturation_score(records) == 3


def test_persistence_and_cost_bonuses(row_factory):
    records = _records(row_factory, ("Iso E Super", {"persistence": 9, "cost": 4}))
    assert maturation_score(records) == 2


def test_extrait_multiplier(row_factory):
    records = _records(row_factory, ("Benzoin", {"persistence": 8, "cost": 1}))
    assert maturation_score(records, "Parfum Extrait") == 6
    assert maturation_score(records, "Eau de Parfum") == 4


def test_categories(row_factory):
    fast = _records(row_factory, ("Hedione", {"persistence": 5, "cost": 1}))
    assert estimate_steeping(fast).category == "fast-stable"

    medium = _records(
        row_factory,
        ("Patchouli", {"persistence": 9, "cost": 2}),
        ("Myrrh", {"persistence": 5, "cost": 2}),
    )
    estimate = estimate_steeping(medium)
    assert estimate.category == "medium-settle"
    assert (estimate.min_days, estimate.max_days) == (7, 14)
    assert estimate.label == "1–2 weeks"

    slow = _records(
        row_factory,
        ("Oud", {"persistence": 10, "cost": 5}),
        ("Amber", {"persistence": 9, "cost": 4}),
        ("Styrax", {"persistence": 8, "cost": 2}),
    )
    estimate = estimate_steeping(slow)
    assert estimate.category == "slow-evolving"
    assert estimate.to_dict()["max_days"] == 42


def test_empty_blend_is_fast_stable():
    estimate = estimate_steeping([], "Parfum Extrait")
    assert estimate.category == "fast-stable"
    assert estimate.label == "24–72 hours"
