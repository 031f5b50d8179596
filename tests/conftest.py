import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from core.ingredients import DEFAULT_CSV_PATH, IngredientDatabase
from infra.models import Base


def make_row(family, layer, name, low=1.0, high=3.0, role="backbone", persistence=5,
             dominance=3, cost=2, strength=5, blends="", ifra=None, supplier="Test Supplier"):
    return {
        "family": family,
        "layer": layer,
        "name": name,
        "percent_low": low,
        "percent_high": high,
        "supplier": supplier,
        "ifra_limit": ifra,
        "strength": strength,
        "cost": cost,
        "persistence": persistence,
        "dominance": dominance,
        "role": role,
        "blends_with": blends,
    }


@pytest.fixture
def mock_session():
    # Use SQLite in-memory for testing DB interactions
    engine = create_engine(
        "sqlite://", connect_args={"check_same_thread": False}, poolclass=StaticPool)
    Base.metadata.create_all(engine)
    Session = sessionmaker(bind=engine, expire_on_commit=False)
    session = Session()
    yield session
    session.close()


@pytest.fixture(scope="session")
def ingredient_db():
    return IngredientDatabase.from_csv(DEFAULT_CSV_PATH)


@pytest.fixture
def smoky_rows():
    """Heavy dominant whose regular fill stops one short of the floor."""
    return [
        make_row("smoky", "top", "Pink Pepper", role="lift", persistence=6, blends="citrus"),
        make_row("smoky", "heart", "Birch Tar", 2.0, 4.0, role="hero", persistence=9, blends="green"),
        make_row("smoky", "heart", "Cade Oil", persistence=7),
        make_row("smoky", "base", "Guaiac Wood", persistence=8),
        make_row("citrus", "top", "Lemon", role="lift", persistence=3),
        make_row("citrus", "heart", "Petitgrain", persistence=5, blends="smoky"),
        make_row("citrus", "heart", "Neroli", role="character", persistence=5, blends="green"),
        make_row("citrus", "base", "Citrus Musk", persistence=7),
        make_row("citrus", "base", "Orange Wood", role="character", persistence=6),
        make_row("green", "heart", "Galbanum", role="character", persistence=6, blends="citrus"),
        make_row("green", "heart", "Violet Leaf", role="character", persistence=5),
        make_row("green", "base", "Oakmoss", role="character", persistence=9, blends="smoky"),
    ]


@pytest.fixture
def smoky_db(smoky_rows):
    return IngredientDatabase.from_records(smoky_rows)


def structural_rows(resin_name="Myrrh Resin", resin_cost=4, resin_persistence=9, hero_ifra=None):
    return [
        make_row("incense", "heart", "Frankincense", 2.0, 4.0, role="hero", persistence=9, cost=4,
                 ifra=hero_ifra),
        make_row("incense", "base", resin_name, cost=resin_cost, persistence=resin_persistence),
        make_row("floral", "heart", "Rose Absolute", cost=5),
        make_row("aquatic", "heart", "Calone", role="character", persistence=4, dominance=6),
        make_row("clean", "base", "White Musk", persistence=8, cost=1, blends="incense"),
        make_row("clean", "base", "Ambroxan", persistence=9, blends="incense"),
        make_row("clean", "base", "Iso E Super", persistence=7, blends="incense"),
        make_row("clean", "base", "Clean Musk", persistence=6, blends="floral"),
        make_row("woody", "base", "Cedar", persistence=6, blends="incense"),
    ]


@pytest.fixture
def structural_db():
    return IngredientDatabase.from_records(structural_rows())


@pytest.fixture
def build_structural_db():
    def build(**kwargs):
        return IngredientDatabase.from_records(structural_rows(**kwargs))
    return build


@pytest.fixture
def row_factory():
    return make_row
