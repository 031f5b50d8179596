from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.engine import Engine
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column, relationship

VERSION_STATUSES = ("draft", "approved", "in-production", "archived")


class Base(DeclarativeBase):
    pass


class FormulaRecord(Base):
    __tablename__ = 'formulas'

    scent_code: Mapped[str] = mapped_column(String, primary_key=True)
    scent_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    customer_name: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    customer_email: Mapped[Optional[str]] = mapped_column(String, nullable=True)
    current_version: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False, index=True)

    versions: Mapped[List["FormulaVersion"]] = relationship(
        back_populates="record", cascade="all, delete-orphan",
        order_by="FormulaVersion.version")

    def to_dict(self):
        return {
            "scent_code": self.scent_code,
            "scent_name": self.scent_name,
            "customer_name": self.customer_name,
            "customer_email": self.customer_email,
            "current_version": self.current_version,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
            "versions": [v.to_dict() for v in self.versions],
        }


class FormulaVersion(Base):
    __tablename__ = 'formula_versions'

    id: Mapped[str] = mapped_column(String, primary_key=True)
    scent_code: Mapped[str] = mapped_column(
        ForeignKey('formulas.scent_code'), nullable=False, index=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False)
    formula: Mapped[dict] = mapped_column(JSON, nullable=False)
    scent_card: Mapped[dict] = mapped_column(JSON, nullable=True)
    batch_sheet: Mapped[dict] = mapped_column(JSON, nullable=True)
    input: Mapped[dict] = mapped_column(JSON, nullable=True)
    status: Mapped[str] = mapped_column(String, default="draft", nullable=False)
    notes: Mapped[str] = mapped_column(Text, default="")
    created_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)
    updated_at: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    record = relationship("FormulaRecord", back_populates="versions")

    def to_dict(self):
        return {
            "id": self.id,
            "scent_code": self.scent_code,
            "version": self.version,
            "formula": self.formula,
            "scent_card": self.scent_card,
            "batch_sheet": self.batch_sheet,
            "input": self.input,
            "status": self.status,
            "notes": self.notes,
            "created_at": self.created_at.isoformat(),
            "updated_at": self.updated_at.isoformat(),
        }


def create_all_tables(engine: Engine):
    print("[DB] Creating tables...")
    Base.metadata.create_all(engine)
    print("[DB] Tables ready.")
