import argparse
import json
import os
import sys

from dotenv import load_dotenv

from core.batch import BATCH_SIZES
from core.context import CONCENTRATIONS, INTENSITIES, OCCASIONS
from core.formula import FormulaEngine
from core.ingredients import IngredientDatabaseError, get_default_database
from core.workflow import FormulaInputError, create_custom_scent
from infra.database import get_session
from infra.store import FormulaStore

load_dotenv()

# =========================================================
# GLOBAL CONFIG
# =========================================================

BATCH_SIZE_ML = float(os.getenv("BATCH_SIZE_ML", BATCH_SIZES["standard"]))


def print_result(outcome, show_batch: bool):
    result = outcome.result

    print(f"\n🧪 [FORMULA] {outcome.batch_sheet.scent_code}  hero: {result.hero or '-'}")
    print(f"   {outcome.scent_card.headline}")
    for family, layers in result.formula.items():
        print(f"\n  {family.upper()}")
        for layer, items in layers.items():
            for item in items:
                print(f"    {layer:<6} {item.name:<45} {item.percent:>12}  {item.supplier}")

    steeping = result.steeping
    print(f"\n  Ingredients: {result.ingredient_count}")
    print(f"  Steeping: {steeping.label} ({steeping.category}). {steeping.notes}")
    for warning in result.ifra_warnings:
        print(f"  ⚠️ IFRA: {warning}")
    for note in result.perfumer_notes:
        print(f"  📝 {note}")

    if show_batch:
        sheet = outcome.batch_sheet
        print(f"\n📦 [BATCH] {sheet.batch_size_ml:g}ml {sheet.concentration}")
        print(sheet.lines_frame()[["layer", "name", "percent_low", "percent_high", "grams_low", "grams_high"]]
              .to_string(index=False))
        for note in sheet.production_notes:
            print(f"  - {note}")

    if outcome.saved_version is not None:
        print(f"\n💾 [STORE] Saved as {outcome.saved_version.id}")


def main() -> int:
    ap = argparse.ArgumentParser(description="Generate a perfume formula from three olfactive families")
    ap.add_argument("dominant", help="Dominant family (e.g. oriental)")
    ap.add_argument("secondary", help="Secondary family")
    ap.add_argument("accent", help="Accent family")
    ap.add_argument("--code", required=True, help="Scent code, seeds the selection and keys the saved formula")
    ap.add_argument("--concentration", default=None, choices=CONCENTRATIONS)
    ap.add_argument("--occasion", default=None, choices=OCCASIONS)
    ap.add_argument("--intensity", default=None, choices=INTENSITIES)
    ap.add_argument("--name", default=None, help="Optional scent name")
    ap.add_argument("--batch-size", type=float, default=BATCH_SIZE_ML, help="Batch size in ml")
    ap.add_argument("--batch", action="store_true", help="Print the production batch sheet")
    ap.add_argument("--save", action="store_true", help="Save the formula version to the configured database")
    ap.add_argument("--json", action="store_true", help="Print the full result as JSON")
    args = ap.parse_args()

    try:
        engine = FormulaEngine(get_default_database())
    except IngredientDatabaseError as e:
        print(f"❌ [INIT] {e}")
        return 1

    store = None
    if args.save:
        store = FormulaStore(get_session())

    try:
        outcome = create_custom_scent(
            args.dominant, args.secondary, args.accent, args.code,
            scent_name=args.name,
            concentration=args.concentration,
            occasion=args.occasion,
            intensity=args.intensity,
            batch_size_ml=args.batch_size,
            save=args.save,
            store=store,
            engine=engine,
        )
    except FormulaInputError as e:
        print(f"❌ [WORKFLOW] {e}")
        return 2

    if args.json:
        print(json.dumps(outcome.to_dict(), indent=2, ensure_ascii=False))
    else:
        print_result(outcome, args.batch)
    return 0


if __name__ == "__main__":
    sys.exit(main())
