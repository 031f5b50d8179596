import math
import os
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, FrozenSet, List, Mapping, Optional, Tuple

import pandas as pd

LAYERS = ("top", "heart", "base")
ROLES = ("hero", "backbone", "character", "lift")

REQUIRED_COLUMNS = [
    "family", "layer", "name", "percent_low", "percent_high", "supplier",
    "ifra_limit", "strength", "cost", "persistence", "dominance", "role",
    "blends_with",
]
SCALAR_COLUMNS = ("strength", "cost", "persistence", "dominance")

DEFAULT_CSV_PATH = os.path.join(
    os.path.dirname(os.path.abspath(__file__)), "data", "ingredients.csv")


class IngredientDatabaseError(ValueError):
    pass


def round1(value: float) -> float:
    """Round half up to one decimal."""
    return math.floor(value * 10 + 0.5) / 10


# ======================================================================
# PERCENT RANGE
# ======================================================================

@dataclass(frozen=True)
class PercentRange:
    low: float
    high: float

    @property
    def midpoint(self) -> float:
        return (self.low + self.high) / 2

    @classmethod
    def around(cls, mid: float) -> "PercentRange":
        # +/-30% band around the midpoint actually dosed
        return cls(max(0.1, round1(mid * 0.7)), round1(mid * 1.3))

    def scaled(self, factor: float) -> "PercentRange":
        return PercentRange(round1(self.low * factor), round1(self.high * factor))

    def capped(self, low_cap: float, high_cap: float) -> "PercentRange":
        return PercentRange(round1(min(self.low, low_cap)), round1(min(self.high, high_cap)))

    def render(self) -> str:
        return f"{self.low:g}–{self.high:g}%"

    def __str__(self):
        return self.render()


# ======================================================================
# INGREDIENT RECORD
# ======================================================================

@dataclass(frozen=True)
class IngredientRecord:
    family: str
    layer: str
    name: str
    band: PercentRange
    supplier: str
    regulatory_limit: Optional[float]
    strength: int
    cost: int
    persistence: int
    dominance: int
    role: str
    blends_with: FrozenSet[str]

    @property
    def percent(self) -> str:
        return self.band.render()


# ======================================================================
# DATABASE
# ======================================================================

class IngredientDatabase:
    """
    Read-only catalog of ingredients partitioned by family and layer.

    Rows keep their CSV order inside each bucket; selection relies on that
    order for tie-breaking.
    """

    def __init__(self, df: pd.DataFrame):
        self.df = self._prepare(df)
        self._validate(self.df)

        catalog: Dict[str, Dict[str, List[IngredientRecord]]] = {}
        for _, row in self.df.iterrows():
            record = self._row_to_record(row)
            layers = catalog.setdefault(record.family, {layer: [] for layer in LAYERS})
            layers[record.layer].append(record)

        self._catalog: Mapping[str, Mapping[str, Tuple[IngredientRecord, ...]]] = MappingProxyType({
            family: MappingProxyType({layer: tuple(items) for layer, items in layers.items()})
            for family, layers in catalog.items()
        })

    @classmethod
    def from_csv(cls, path: Optional[str] = None) -> "IngredientDatabase":
        path = path or os.getenv("INGREDIENTS_CSV") or DEFAULT_CSV_PATH
        if not os.path.exists(path):
            raise IngredientDatabaseError(f"Ingredient database not found at {path}")

        db = cls(pd.read_csv(path, encoding="utf-8"))
        print(f"[INIT] {len(db.df)} ingredients loaded from {path} ({len(db.families)} families).")
        return db

    @classmethod
    def from_records(cls, rows: List[dict]) -> "IngredientDatabase":
        return cls(pd.DataFrame(rows, columns=REQUIRED_COLUMNS))

    # ------------------------------------------------------------------
    # LOOKUPS
    # ------------------------------------------------------------------

    @property
    def families(self) -> Tuple[str, ...]:
        return tuple(self._catalog.keys())

    def __contains__(self, family) -> bool:
        return family in self._catalog

    def layer(self, family: str, layer: str) -> Tuple[IngredientRecord, ...]:
        layers = self._catalog.get(family)
        if layers is None:
            return ()
        return layers[layer]

    def heart_and_base(self, family: str) -> Tuple[IngredientRecord, ...]:
        return self.layer(family, "heart") + self.layer(family, "base")

    def find(self, family: str, name: str, layers=LAYERS) -> Optional[IngredientRecord]:
        for layer in layers:
            for record in self.layer(family, layer):
                if record.name == name:
                    return record
        return None

    # ------------------------------------------------------------------
    # LOADING
    # ------------------------------------------------------------------

    def _prepare(self, df: pd.DataFrame) -> pd.DataFrame:
        df = df.copy()
        df.columns = df.columns.str.strip()

        missing = [c for c in REQUIRED_COLUMNS if c not in df.columns]
        if missing:
            raise IngredientDatabaseError(f"Missing columns: {', '.join(missing)}")

        for col in ("family", "layer", "name", "supplier", "role"):
            df[col] = df[col].astype(str).str.strip()
        df["family"] = df["family"].str.lower()
        df["layer"] = df["layer"].str.lower()
        df["blends_with"] = df["blends_with"].fillna("").astype(str)
        return df

    def _validate(self, df: pd.DataFrame):
        problems = []
        families = set(df["family"])

        for idx, row in df.iterrows():
            label = f"row {idx} ({row['family']}/{row['layer']}/{row['name']})"

            if row["layer"] not in LAYERS:
                problems.append(f"{label}: unknown layer '{row['layer']}'")
            if row["role"] not in ROLES:
                problems.append(f"{label}: unknown role '{row['role']}'")

            for scalar in SCALAR_COLUMNS:
                value = pd.to_numeric(row[scalar], errors="coerce")
                if pd.isna(value) or not 1 <= value <= 10:
                    problems.append(f"{label}: {scalar} must be within 1-10")
                elif value != int(value):
                    problems.append(f"{label}: {scalar} must be a whole number")

            low = pd.to_numeric(row["percent_low"], errors="coerce")
            high = pd.to_numeric(row["percent_high"], errors="coerce")
            if pd.isna(low) or pd.isna(high) or low > high:
                problems.append(f"{label}: invalid percent range")

            for family in _split_families(row["blends_with"]):
                if family not in families:
                    problems.append(f"{label}: blends_with names unknown family '{family}'")

        dupes = df[df.duplicated(subset=["family", "layer", "name"], keep=False)]
        for _, row in dupes.drop_duplicates(subset=["family", "layer", "name"]).iterrows():
            problems.append(f"duplicate ingredient '{row['name']}' in {row['family']}/{row['layer']}")

        if problems:
            raise IngredientDatabaseError("Invalid ingredient database:\n  " + "\n  ".join(problems))

    def _row_to_record(self, row) -> IngredientRecord:
        limit = pd.to_numeric(row["ifra_limit"], errors="coerce")
        return IngredientRecord(
            family=row["family"],
            layer=row["layer"],
            name=row["name"],
            band=PercentRange(float(row["percent_low"]), float(row["percent_high"])),
            supplier=row["supplier"],
            regulatory_limit=None if pd.isna(limit) else float(limit),
            strength=int(row["strength"]),
            cost=int(row["cost"]),
            persistence=int(row["persistence"]),
            dominance=int(row["dominance"]),
            role=row["role"],
            blends_with=frozenset(_split_families(row["blends_with"])),
        )


def _split_families(value: str) -> List[str]:
    return [f.strip().lower() for f in str(value).split(";") if f.strip()]


_DEFAULT_DB: Optional[IngredientDatabase] = None


def get_default_database() -> IngredientDatabase:
    global _DEFAULT_DB
    if _DEFAULT_DB is None:
        _DEFAULT_DB = IngredientDatabase.from_csv()
    return _DEFAULT_DB
