"""
CatHealth Backend — InsurancePolicy SQLAlchemy Model
======================================================

What:  ORM model for the `insurance_policies` table.
Who:   Used by InsuranceService. Same transitive ownership as health
       records: policy → cat → owner.
"""

from datetime import date
from typing import Optional

from sqlalchemy import Date, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from cathealth.database import Base
from cathealth.models.mixins import TimestampMixin


class InsurancePolicy(TimestampMixin, Base):
    """An insurance policy covering one cat for a date range."""

    __tablename__ = "insurance_policies"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    cat_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("cats.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    provider: Mapped[str] = mapped_column(String(200), nullable=False)
    policy_number: Mapped[str] = mapped_column(String(100), nullable=False)

    # Coverage period; schemas reject end_date < start_date
    start_date: Mapped[date] = mapped_column(Date, nullable=False)
    end_date: Mapped[date] = mapped_column(Date, nullable=False)

    premium: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    coverage: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    def __repr__(self) -> str:
        return (
            f"<InsurancePolicy(id={self.id}, cat_id={self.cat_id}, "
            f"provider='{self.provider}')>"
        )
