"""
CatHealth Backend — Cat SQLAlchemy Model
==========================================

What:  ORM model for the `cats` table, the pet profile.
Who:   Used by CatService for CRUD and as the ownership anchor for
       health records, insurance policies and to-dos.

Table Design:
    - owner_id: FK to users with ON DELETE CASCADE; indexed because every
      list query filters on it
    - age / weight: nullable; the API stores null for absent or falsy input
    - image_path: relative path under STORAGE_ROOT (see FileService)
"""

from datetime import date
from typing import Optional

from sqlalchemy import Date, Float, ForeignKey, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from cathealth.database import Base
from cathealth.models.mixins import TimestampMixin


class Cat(TimestampMixin, Base):
    """
    A cat profile owned by exactly one user.

    Invariant:
        Every read or write checks `cat.owner_id == caller.id`.
        Deleting a cat deletes its health records and insurance policies.
    """

    __tablename__ = "cats"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    owner_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    breed: Mapped[str] = mapped_column(String(100), nullable=False)
    age: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    birthdate: Mapped[Optional[date]] = mapped_column(Date, nullable=True)
    weight: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    image_path: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)

    def __repr__(self) -> str:
        return f"<Cat(id={self.id}, name='{self.name}', owner_id={self.owner_id})>"
