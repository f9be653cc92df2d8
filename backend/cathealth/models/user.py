"""
CatHealth Backend — User SQLAlchemy Model
===========================================

What:  ORM model for the `users` table (the credential store).
Why:   Holds identity and the bcrypt hash; every other table hangs off it.
Who:   Written by AuthService.register, read by AuthService.login / get_user.

Table Design:
    - Integer primary key: embedded in tokens as the `userId` claim
    - email: unique index, stored lower-cased so lookups are case-insensitive
    - password_hash: full passlib/bcrypt string (algorithm, cost and salt included)
"""

from sqlalchemy import Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from cathealth.database import Base
from cathealth.models.mixins import TimestampMixin


class User(TimestampMixin, Base):
    """
    A registered account.

    Lifecycle:
        Created on registration; no edit or delete path exists.
        Owns zero or more cats and health to-dos.
    """

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)

    name: Mapped[str] = mapped_column(String(100), nullable=False)

    email: Mapped[str] = mapped_column(
        String(255),
        nullable=False,
        unique=True,
        index=True,
    )

    # Never serialized; schemas expose only id, name and email
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<User(id={self.id}, email='{self.email}')>"
