from dataclasses import dataclass
from typing import Optional

from sqlalchemy.exc import SQLAlchemyError

from core.batch import BATCH_SIZES, BatchSheet, generate_batch_sheet
from core.context import DEFAULT_CONCENTRATION
from core.formula import FormulaEngine, FormulaResult, GenerationMetadata
from core.scent_card import ScentCard, ScentExperience, build_scent_experience, generate_scent_card

REQUIRED_FIELDS = ("dominant", "secondary", "accent", "scent_code")


class FormulaInputError(ValueError):
    pass


@dataclass
class CustomScentResult:
    result: FormulaResult
    experience: ScentExperience
    scent_card: ScentCard
    batch_sheet: BatchSheet
    meta: GenerationMetadata
    saved_version: Optional[object] = None

    @property
    def formula(self):
        return self.result.formula

    def to_dict(self):
        return {
            "formula": self.result.formula_dict(),
            "experience": self.experience.to_dict(),
            "scent_card": self.scent_card.to_dict(),
            "batch_sheet": self.batch_sheet.to_dict(),
            "meta": self.meta.to_dict(),
            "saved_version": self.saved_version.to_dict() if self.saved_version is not None else None,
        }


def create_custom_scent(dominant: str, secondary: str, accent: str, scent_code: str,
                        scent_name: Optional[str] = None,
                        customer_name: Optional[str] = None,
                        customer_email: Optional[str] = None,
                        concentration: Optional[str] = None,
                        occasion: Optional[str] = None,
                        intensity: Optional[str] = None,
                        batch_size_ml: float = BATCH_SIZES["standard"],
                        save: bool = True,
                        store=None,
                        engine: Optional[FormulaEngine] = None) -> CustomScentResult:
    """
    Formula -> experience -> scent card -> batch sheet -> saved version.

    `store` is a FormulaStore; saving is skipped when it is None. A storage
    failure is reported and leaves `saved_version` empty, the generated
    formula is still returned.
    """
    values = {"dominant": dominant, "secondary": secondary, "accent": accent, "scent_code": scent_code}
    missing = [name for name in REQUIRED_FIELDS if not (values[name] or "").strip()]
    if missing:
        raise FormulaInputError(f"Missing required fields: {', '.join(missing)}")

    engine = engine or FormulaEngine()
    print(f"[WORKFLOW] Generating {scent_code} ({dominant}/{secondary}/{accent})")

    # 1. formula
    result = engine.generate(
        dominant, secondary, accent, scent_code,
        concentration=concentration, occasion=occasion, intensity=intensity,
    )

    # 2. experience & scent card
    experience = build_scent_experience(dominant, secondary, accent, intensity=intensity, occasion=occasion)
    scent_card = generate_scent_card(
        dominant, secondary, accent,
        concentration=concentration, occasion=occasion, intensity=intensity,
        scent_name=scent_name, formula=result,
    )

    # 3. batch sheet
    batch_sheet = generate_batch_sheet(
        result, scent_code,
        concentration=concentration or DEFAULT_CONCENTRATION,
        batch_size_ml=batch_size_ml,
    )

    # 4. save
    saved_version = None
    if save and store is not None:
        try:
            saved_version = store.save_formula(
                scent_code,
                formula=result,
                scent_card=scent_card,
                batch_sheet=batch_sheet,
                input={
                    "dominant": dominant,
                    "secondary": secondary,
                    "accent": accent,
                    "concentration": concentration,
                    "occasion": occasion,
                    "intensity": intensity,
                },
                scent_name=scent_name,
                customer_name=customer_name,
                customer_email=customer_email,
            )
        except SQLAlchemyError as e:
            print(f"⚠️ [WORKFLOW] Failed to save formula version for {scent_code}: {repr(e)}")
    elif save:
        print("[WORKFLOW] No store configured, formula not saved.")

    return CustomScentResult(
        result=result,
        experience=experience,
        scent_card=scent_card,
        batch_sheet=batch_sheet,
        meta=result.metadata,
        saved_version=saved_version,
    )
