from datetime import datetime, timezone
from typing import List, Optional

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from infra.models import VERSION_STATUSES, FormulaRecord, FormulaVersion


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


def _payload(obj):
    if obj is None or isinstance(obj, dict):
        return obj
    return obj.to_dict()


class FormulaStore:
    """
    Versioned formula storage keyed by scent code.

    Every save appends a new draft version; record metadata (name, customer)
    is only overwritten when a new value is given.
    """

    def __init__(self, session: Session, clock=_utcnow):
        self.session = session
        self.clock = clock

    def _commit(self, action: str):
        try:
            self.session.commit()
        except SQLAlchemyError as e:
            self.session.rollback()
            print(f"❌ [STORE] Failed to {action}: {repr(e)}")
            raise

    # ------------------------------------------------------------------
    # WRITES
    # ------------------------------------------------------------------

    def save_formula(self, scent_code: str, formula, scent_card=None, batch_sheet=None,
                     input: Optional[dict] = None, scent_name: Optional[str] = None,
                     customer_name: Optional[str] = None, customer_email: Optional[str] = None,
                     notes: str = "") -> FormulaVersion:
        now = self.clock()
        record = self.session.get(FormulaRecord, scent_code)
        if record is None:
            record = FormulaRecord(scent_code=scent_code, current_version=0, created_at=now, updated_at=now)
            self.session.add(record)

        version = record.current_version + 1
        formula_version = FormulaVersion(
            id=f"{scent_code}-v{version}",
            scent_code=scent_code,
            version=version,
            formula=_payload(formula),
            scent_card=_payload(scent_card),
            batch_sheet=_payload(batch_sheet),
            input=dict(input or {}),
            status="draft",
            notes=notes or "",
            created_at=now,
            updated_at=now,
        )
        record.versions.append(formula_version)
        record.current_version = version
        record.updated_at = now
        if scent_name is not None:
            record.scent_name = scent_name
        if customer_name is not None:
            record.customer_name = customer_name
        if customer_email is not None:
            record.customer_email = customer_email

        self._commit(f"save {scent_code}")
        print(f"[STORE] Saved {formula_version.id}")
        return formula_version

    def update_formula_status(self, scent_code: str, version: int, status: str) -> bool:
        if status not in VERSION_STATUSES:
            raise ValueError(f"Unknown status '{status}'. Expected one of: {', '.join(VERSION_STATUSES)}")

        formula_version = self.get_formula_version(scent_code, version)
        if formula_version is None:
            return False

        now = self.clock()
        formula_version.status = status
        formula_version.updated_at = now
        formula_version.record.updated_at = now
        self._commit(f"update status of {formula_version.id}")
        return True

    def delete_formula(self, scent_code: str) -> bool:
        record = self.get_formula(scent_code)
        if record is None:
            return False
        self.session.delete(record)
        self._commit(f"delete {scent_code}")
        print(f"[STORE] Deleted {scent_code}")
        return True

    # ------------------------------------------------------------------
    # READS
    # ------------------------------------------------------------------

    def get_formula(self, scent_code: str) -> Optional[FormulaRecord]:
        return self.session.get(FormulaRecord, scent_code)

    def get_formula_version(self, scent_code: str, version: Optional[int] = None) -> Optional[FormulaVersion]:
        """Latest version when `version` is None."""
        record = self.get_formula(scent_code)
        if record is None or not record.versions:
            return None
        if version is None:
            return record.versions[-1]
        return next((v for v in record.versions if v.version == version), None)

    def list_formulas(self, limit: int = 50, offset: int = 0) -> List[FormulaRecord]:
        stmt = (
            select(FormulaRecord)
            .order_by(FormulaRecord.updated_at.desc(), FormulaRecord.scent_code)
            .offset(offset)
            .limit(limit)
        )
        return list(self.session.scalars(stmt))
