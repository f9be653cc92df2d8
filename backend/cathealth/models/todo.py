"""
CatHealth Backend — HealthTodo SQLAlchemy Model
=================================================

What:  ORM model for the `health_todos` table (reminder list).
Who:   Used by TodoService.

Ownership is direct (owner_id). The optional cat link must point at one of
the owner's cats; deleting that cat deletes the to-do as well.
"""

from datetime import date
from typing import Optional

from sqlalchemy import Boolean, Date, ForeignKey, Integer, String, false
from sqlalchemy.orm import Mapped, mapped_column

from cathealth.database import Base
from cathealth.models.mixins import TimestampMixin


class HealthTodo(TimestampMixin, Base):
    """A reminder such as "Annual vaccination for Milo"."""

    __tablename__ = "health_todos"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    owner_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    cat_id: Mapped[Optional[int]] = mapped_column(
        Integer,
        ForeignKey("cats.id", ondelete="CASCADE"),
        nullable=True,
    )

    title: Mapped[str] = mapped_column(String(200), nullable=False)
    type: Mapped[str] = mapped_column(String(20), nullable=False)
    due_date: Mapped[Optional[date]] = mapped_column(Date, nullable=True)

    completed: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        server_default=false(),
    )

    def __repr__(self) -> str:
        return f"<HealthTodo(id={self.id}, title='{self.title}', completed={self.completed})>"
