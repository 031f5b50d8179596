import pandas as pd
import pytest

from core.ingredients import (
    LAYERS, IngredientDatabase, IngredientDatabaseError, PercentRange, round1,
)


def test_round1_rounds_half_up():
    assert round1(0.25) == 0.3
    assert round1(2.45) == 2.5
    assert round1(1.04) == 1.0


def test_percent_range_render():
    assert PercentRange(3, 5).render() == "3–5%"
    assert PercentRange(0.5, 1.0).render() == "0.5–1%"
    assert str(PercentRange(2.1, 3.9)) == "2.1–3.9%"


def test_percent_range_around_midpoint():
    band = PercentRange.around(3.0)
    assert band == PercentRange(2.1, 3.9)


def test_percent_range_around_has_floor():
    assert PercentRange.around(0.1).low == 0.1


def test_percent_range_scaled_and_capped():
    assert PercentRange(4, 8).scaled(0.4) == PercentRange(1.6, 3.2)
    assert PercentRange(5, 9).capped(3.5, 6.5) == PercentRange(3.5, 6.5)
    assert PercentRange(2, 9).capped(3.5, 6.5) == PercentRange(2, 6.5)


def test_default_database_loads(ingredient_db):
    assert "oriental" in ingredient_db
    assert "woody" in ingredient_db
    assert len(ingredient_db.df) > 100
    for family in ingredient_db.families:
        for layer in LAYERS:
            for record in ingredient_db.layer(family, layer):
                assert record.family == family
                assert record.layer == layer


def test_database_keeps_csv_order(ingredient_db):
    names = [r.name for r in ingredient_db.layer("oriental", "base")]
    assert names[0] == "Amber Accord (in-house blend)"


def test_record_fields(ingredient_db):
    oud = ingredient_db.find("oriental", "Oud Oil (Hindi type)")
    assert oud is not None
    assert oud.role == "hero"
    assert oud.dominance == 9
    assert oud.band == PercentRange(1, 3)
    assert oud.percent == "1–3%"
    assert "woody" in oud.blends_with
    assert oud.regulatory_limit is None


def test_unknown_family_lookups_are_empty(ingredient_db):
    assert "martian" not in ingredient_db
    assert ingredient_db.layer("martian", "top") == ()
    assert ingredient_db.heart_and_base("martian") == ()
    assert ingredient_db.find("martian", "Anything") is None


def test_from_records(row_factory):
    db = IngredientDatabase.from_records([
        row_factory("floral", "heart", "Rose", blends="woody"),
        row_factory("woody", "base", "Cedar", ifra=2.0),
    ])
    assert db.families == ("floral", "woody")
    assert db.find("woody", "Cedar").regulatory_limit == 2.0
    assert db.find("floral", "Rose").blends_with == frozenset({"woody"})


def test_missing_columns_rejected():
    with pytest.raises(IngredientDatabaseError, match="Missing columns"):
        IngredientDatabase(pd.DataFrame([{"family": "floral", "name": "Rose"}]))


def test_unknown_role_rejected(row_factory):
    with pytest.raises(IngredientDatabaseError, match="unknown role"):
        IngredientDatabase.from_records([row_factory("floral", "heart", "Rose", role="soloist")])


def test_unknown_layer_rejected(row_factory):
    with pytest.raises(IngredientDatabaseError, match="unknown layer"):
        IngredientDatabase.from_records([row_factory("floral", "middle", "Rose")])


def test_unknown_blend_family_rejected(row_factory):
    with pytest.raises(IngredientDatabaseError, match="unknown family 'martian'"):
        IngredientDatabase.from_records([row_factory("floral", "heart", "Rose", blends="martian")])


def test_out_of_range_scalar_rejected(row_factory):
    with pytest.raises(IngredientDatabaseError, match="dominance must be within 1-10"):
        IngredientDatabase.from_records([row_factory("floral", "heart", "Rose", dominance=11)])


def test_duplicate_in_bucket_rejected(row_factory):
    with pytest.raises(IngredientDatabaseError, match="duplicate ingredient 'Rose'"):
        IngredientDatabase.from_records([
            row_factory("floral", "heart", "Rose"),
            row_factory("floral", "heart", "Rose"),
        ])


def test_same_name_in_two_families_allowed(row_factory):
    db = IngredientDatabase.from_records([
        row_factory("oriental", "top", "Cardamom"),
        row_factory("spicy", "top", "Cardamom"),
    ])
    assert db.find("spicy", "Cardamom") is not None


def test_missing_csv_raises(tmp_path):
    with pytest.raises(IngredientDatabaseError, match="not found"):
        IngredientDatabase.from_csv(str(tmp_path / "nope.csv"))


def test_csv_path_from_environment(tmp_path, monkeypatch, row_factory):
    path = tmp_path / "mini.csv"
    pd.DataFrame([row_factory("floral", "heart", "Rose")]).to_csv(path, index=False)
    monkeypatch.setenv("INGREDIENTS_CSV", str(path))

    db = IngredientDatabase.from_csv()
    assert db.families == ("floral",)


def test_blank_and_non_numeric_scalars_reported_together(row_factory):
    with pytest.raises(IngredientDatabaseError) as exc:
        IngredientDatabase.from_records([
            row_factory("floral", "heart", "Rose", strength=None),
            row_factory("floral", "heart", "Jasmine", cost="cheap"),
        ])
    message = str(exc.value)
    assert "(floral/heart/Rose): strength must be within 1-10" in message
    assert "(floral/heart/Jasmine): cost must be within 1-10" in message


def test_fractional_scalar_rejected(row_factory):
    with pytest.raises(IngredientDatabaseError, match="persistence must be a whole number"):
        IngredientDatabase.from_records([row_factory("floral", "heart", "Rose", persistence=7.5)])
