from core.formula import generate_formula
from core.scent_card import (
    CRAFT_NOTE, FAMILY_VOCAB, build_scent_experience, generate_scent_card,
)


def test_headline_uses_texture_and_families():
    card = generate_scent_card("oriental", "woody", "spicy")
    assert card.headline == "An Opulent Oriental with Woody Depth"


def test_headline_article_for_consonant():
    card = generate_scent_card("woody", "floral", "fresh")
    assert card.headline == "A Velvety Woody with Floral Depth"


def test_unknown_families_use_role_fallbacks():
    card = generate_scent_card("martian", "lunar", "solar")
    expected = generate_scent_card("woody", "floral", "fresh")
    assert card.headline == expected.headline
    assert card.scent_journey == expected.scent_journey


def test_story_mentions_concentration_and_mood():
    card = generate_scent_card("oriental", "woody", "spicy", concentration="Parfum Extrait")
    assert "Crafted as Parfum Extrait" in card.story
    assert FAMILY_VOCAB["oriental"]["mood"] in card.story
    assert "spicy intrigue" in card.story


def test_how_to_wear_defaults():
    card = generate_scent_card("floral", "woody", "fresh")
    wear = card.how_to_wear
    assert wear["occasions"] == ["Daily wear", "Office", "Casual outings"]
    assert wear["time_of_day"].startswith("Day to evening")
    assert wear["longevity_note"].startswith("Expect 6-10 hours of wear.")
    assert wear["seasons"] == ["spring", "summer", "autumn", "winter"]


def test_unknown_occasion_and_concentration():
    card = generate_scent_card("floral", "woody", "fresh", concentration="Eau de Martian", occasion="Moonwalk")
    assert card.how_to_wear["occasions"] == ["Any occasion"]
    assert "6-10 hours" in card.how_to_wear["longevity_note"]


def test_signature_uses_formula(smoky_db):
    result = generate_formula("smoky", "citrus", "green", "SCG-001", database=smoky_db)
    card = generate_scent_card("smoky", "citrus", "green", formula=result, scent_name="Ember")

    assert card.perfumer_signature.startswith(f"Composed from {result.ingredient_count} carefully selected materials.")
    assert result.steeping.label in card.perfumer_signature
    assert card.to_dict()["scent_name"] == "Ember"


def test_signature_without_formula():
    card = generate_scent_card("floral", "woody", "fresh")
    assert card.perfumer_signature.startswith("Composed from 8 carefully selected materials.")


def test_experience():
    exp = build_scent_experience("oriental", "woody", "spicy", intensity="Leave a trail", occasion="Special occasion")
    assert exp.character == "oriental structure with spicy nuances"
    assert exp.projection == "Strong projection with noticeable sillage"
    assert exp.evolution.startswith("Opens confidently")
    assert exp.craft_note == CRAFT_NOTE


def test_experience_defaults():
    exp = build_scent_experience("fresh", "citrus", "aquatic", intensity="Subtle aura")
    assert exp.projection == "Soft, close-to-skin aura"
    assert build_scent_experience("a", "b", "c").projection == "Balanced projection"
    assert build_scent_experience("a", "b", "c").evolution.startswith("Smooth opening")
