"""
CatHealth Backend — Ownership Checks
======================================

What:  Id parsing and the owner checks shared by every resource service.
Why:   One place enforces the ordering rule used across the API:
       authentication first (done by the gate), then existence (404),
       then ownership (403).

Ownership resolution:
    Cat, HealthTodo          → owner_id column on the row
    HealthRecord, Insurance  → one joined query on cats (row → cat → owner)
"""

import logging
from typing import Type, TypeVar

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cathealth.exceptions import NotFoundError, PermissionDeniedError
from cathealth.models import Cat
from cathealth.schemas.auth import TokenClaims
from cathealth.schemas.common import INT4_MAX

logger = logging.getLogger(__name__)

MAX_ID = INT4_MAX

T = TypeVar("T")


def parse_id(raw: str, resource: str) -> int:
    """
    Strictly parses a path id.

    "12" → 12. Anything that isn't a plain positive integer ("abc", "1.5",
    "-3", "") can't match a row, so it is reported as NotFound rather than
    as a validation failure.
    """
    value = (raw or "").strip()
    if not (value.isascii() and value.isdigit()):
        raise NotFoundError(resource=resource, resource_id=raw)
    parsed = int(value)
    if parsed < 1 or parsed > MAX_ID:
        raise NotFoundError(resource=resource, resource_id=raw)
    return parsed


def ensure_owner(owner_id: int, current_user: TokenClaims, resource: str, resource_id: int) -> None:
    """Raises PermissionDeniedError unless the caller owns the resource."""
    if owner_id != current_user.user_id:
        logger.warning(
            "User %s denied access to %s %s (owner %s)",
            current_user.user_id,
            resource,
            resource_id,
            owner_id,
        )
        raise PermissionDeniedError(
            message=f"You do not have permission to access this {resource}",
            context={"resource": resource, "resource_id": resource_id},
        )


async def get_owned_cat(db: AsyncSession, cat_id: int, current_user: TokenClaims) -> Cat:
    """Loads a cat by primary key: 404 if missing, 403 if someone else's."""
    cat = await db.get(Cat, cat_id)
    if cat is None:
        raise NotFoundError(resource="cat", resource_id=str(cat_id))
    ensure_owner(cat.owner_id, current_user, "cat", cat_id)
    return cat


async def get_owned_child(
    db: AsyncSession,
    model: Type[T],
    child_id: int,
    current_user: TokenClaims,
    resource: str,
) -> T:
    """
    Loads a row that belongs to a cat (health record, insurance policy).

    Single query:
        SELECT child.*, cats.owner_id FROM child JOIN cats ON cats.id = child.cat_id
        WHERE child.id = :id
    """
    result = await db.execute(
        select(model, Cat.owner_id)
        .join(Cat, Cat.id == model.cat_id)
        .where(model.id == child_id)
    )
    row = result.one_or_none()
    if row is None:
        raise NotFoundError(resource=resource, resource_id=str(child_id))

    child, owner_id = row
    ensure_owner(owner_id, current_user, resource, child_id)
    return child
