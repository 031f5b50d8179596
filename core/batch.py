from dataclasses import asdict, dataclass, field, replace
from datetime import datetime, timezone
from typing import Dict, List

import numpy as np
import pandas as pd

from core.context import DEFAULT_CONCENTRATION
from core.ingredients import round1

# ==============================================================================
# PRODUCTION CONSTANTS
# ==============================================================================
CONCENTRATION_RATIO = {
    "Eau de Cologne": {"oil_percent": 5, "alcohol_percent": 90, "diluent": "5% distilled water"},
    "Eau de Toilette": {"oil_percent": 10, "alcohol_percent": 85, "diluent": "5% distilled water"},
    "Eau de Parfum": {"oil_percent": 18, "alcohol_percent": 78, "diluent": "4% distilled water"},
    "Parfum Extrait": {"oil_percent": 25, "alcohol_percent": 72, "diluent": "3% distilled water"},
}

BATCH_SIZES = {
    "sample": 10,       # discovery vial
    "travel": 30,
    "standard": 50,
    "full": 100,
    "workshop": 500,    # several bottles
}

ALCOHOL_DENSITY = 0.79  # g/ml
OIL_DENSITY = 0.95      # g/ml, average for perfume oils

# Weighing order: foundation first, volatile notes last
MIXING_LAYER_ORDER = {"base": 0, "heart": 1, "top": 2}

BATCH_SIZE_PREFIX = "Batch size:"


@dataclass
class BatchLine:
    name: str
    family: str
    layer: str
    percent_low: float
    percent_high: float
    grams_low: float
    grams_high: float
    supplier: str


@dataclass
class BatchSheet:
    scent_code: str
    concentration: str
    batch_size_ml: float
    alcohol_grams: float
    total_oil_percent: Dict[str, float]
    lines: List[BatchLine]
    production_notes: List[str]
    mixing_order: List[str]
    quality_checks: List[str]
    version: int = 1
    created_at: str = field(default_factory=lambda: datetime.now(timezone.utc).isoformat())

    def lines_frame(self) -> pd.DataFrame:
        return pd.DataFrame([asdict(line) for line in self.lines],
                            columns=list(BatchLine.__dataclass_fields__))

    def to_dict(self):
        return asdict(self)


def _to_grams(percents, oil_total_grams: float) -> np.ndarray:
    return np.round(np.asarray(percents, dtype=float) / 100 * oil_total_grams, 2)


def generate_batch_sheet(formula, scent_code: str, concentration: str = DEFAULT_CONCENTRATION,
                         batch_size_ml: float = BATCH_SIZES["standard"], version: int = 1) -> BatchSheet:
    """
    Convert a FormulaResult into gram weights for one production batch.

    Percentages are read from each ingredient's band, as a share of the oil
    phase.
    """
    if batch_size_ml <= 0:
        raise ValueError(f"Batch size must be positive, got {batch_size_ml}")

    ratio = CONCENTRATION_RATIO.get(concentration, CONCENTRATION_RATIO[DEFAULT_CONCENTRATION])

    oil_volume = batch_size_ml * ratio["oil_percent"] / 100
    alcohol_volume = batch_size_ml * ratio["alcohol_percent"] / 100
    alcohol_grams = round(alcohol_volume * ALCOHOL_DENSITY, 2)
    oil_total_grams = oil_volume * OIL_DENSITY

    entries = formula.entries()
    lows = [item.band.low for _, _, item in entries]
    highs = [item.band.high for _, _, item in entries]
    grams_low = _to_grams(lows, oil_total_grams)
    grams_high = _to_grams(highs, oil_total_grams)

    lines = [
        BatchLine(
            name=item.name,
            family=family,
            layer=layer,
            percent_low=item.band.low,
            percent_high=item.band.high,
            grams_low=float(g_low),
            grams_high=float(g_high),
            supplier=item.supplier,
        )
        for (family, layer, item), g_low, g_high in zip(entries, grams_low, grams_high)
    ]
    lines.sort(key=lambda line: MIXING_LAYER_ORDER[line.layer])

    total_low = round1(float(np.sum(lows)))
    total_high = round1(float(np.sum(highs)))
    steeping = formula.steeping

    notes = [
        f"{BATCH_SIZE_PREFIX} {batch_size_ml:g}ml {concentration}",
        f"Oil concentration: {ratio['oil_percent']}% ({round1(oil_total_grams):g}g oil in {round(alcohol_grams)}g alcohol)",
        f"Diluent: {ratio['diluent']}",
        f"Total formula oil range: {total_low:g}–{total_high:g}%",
        f"Steeping: {steeping.label}. {steeping.notes}",
    ]
    if formula.ifra_warnings:
        notes.append(f"IFRA alerts: {'; '.join(formula.ifra_warnings)}")
    notes.extend(f"Perfumer note: {note}" for note in formula.perfumer_notes)

    mixing_order = [
        "1. Weigh base notes into a clean beaker, these are the foundation",
        "2. Add heart notes one at a time, swirling gently between additions",
        "3. Add top notes last; they are volatile and should not be over-mixed",
        "4. Let the concentrate rest for 24 hours before adding alcohol",
        f"5. Add {round(alcohol_grams)}g perfumer's alcohol (>=96% ethanol)",
        "6. Shake vigorously for 60 seconds, then rest",
        f"7. Cold-filter if cloudy. Steep for {steeping.label} before evaluation",
        "8. Adjust with alcohol if projection feels too heavy",
    ]

    quality_checks = [
        "Visual clarity: transparent, no sediment",
        "Scent check at 48 hours: opening is balanced, not too sharp",
        f"Scent check at {steeping.min_days} days: heart should be cohesive",
        f"Final evaluation at {steeping.max_days} days: base should be smooth",
        "Skin test: 2 sprays on inner wrist, evaluate at 15min, 1hr, 4hr marks",
        "Sillage check: ask someone to stand 1 meter away and confirm projection",
    ]

    return BatchSheet(
        scent_code=scent_code,
        concentration=concentration,
        batch_size_ml=batch_size_ml,
        alcohol_grams=alcohol_grams,
        total_oil_percent={"low": total_low, "high": total_high},
        lines=lines,
        production_notes=notes,
        mixing_order=mixing_order,
        quality_checks=quality_checks,
        version=version,
    )


def scale_batch(sheet: BatchSheet, new_size_ml: float) -> BatchSheet:
    if new_size_ml <= 0:
        raise ValueError(f"Batch size must be positive, got {new_size_ml}")

    ratio = new_size_ml / sheet.batch_size_ml
    grams_low = np.round(np.array([line.grams_low for line in sheet.lines], dtype=float) * ratio, 2)
    grams_high = np.round(np.array([line.grams_high for line in sheet.lines], dtype=float) * ratio, 2)

    lines = [
        replace(line, grams_low=float(g_low), grams_high=float(g_high))
        for line, g_low, g_high in zip(sheet.lines, grams_low, grams_high)
    ]
    notes = [
        f"{BATCH_SIZE_PREFIX} {new_size_ml:g}ml {sheet.concentration} (scaled from {sheet.batch_size_ml:g}ml)"
        if note.startswith(BATCH_SIZE_PREFIX) else note
        for note in sheet.production_notes
    ]
    return replace(
        sheet,
        batch_size_ml=new_size_ml,
        alcohol_grams=round(sheet.alcohol_grams * ratio, 2),
        lines=lines,
        production_notes=notes,
    )
