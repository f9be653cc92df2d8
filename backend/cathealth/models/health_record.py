"""
CatHealth Backend — HealthRecord SQLAlchemy Model
===================================================

What:  ORM model for the `health_records` table.
Who:   Used by HealthRecordService and by the calendar feed.

Ownership is transitive: the row carries no owner column, so authorization
resolves record → cat → owner with a join on cats.

Index on (cat_id, date):
    Serves the most common query, "records for this cat, newest first".
"""

import enum
import datetime as dt
from typing import Optional

from sqlalchemy import Date, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from cathealth.database import Base
from cathealth.models.mixins import TimestampMixin


class RecordType(str, enum.Enum):
    """Kinds of health events; also used for to-do reminders."""

    VACCINATION = "vaccination"
    CHECKUP = "checkup"
    MEDICATION = "medication"
    OTHER = "other"


class HealthRecord(TimestampMixin, Base):
    """A dated health event (vaccination, checkup, ...) for one cat."""

    __tablename__ = "health_records"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    cat_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("cats.id", ondelete="CASCADE"),
        nullable=False,
    )

    # Stored as the enum value string ("vaccination", ...)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    date: Mapped[dt.date] = mapped_column(Date, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    file_path: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    __table_args__ = (
        Index("idx_health_records_cat_date", "cat_id", "date"),
    )

    def __repr__(self) -> str:
        return (
            f"<HealthRecord(id={self.id}, cat_id={self.cat_id}, "
            f"type='{self.type}', date='{self.date}')>"
        )
