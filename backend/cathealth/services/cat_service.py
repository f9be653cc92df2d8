"""
CatHealth Backend — Cat Service
=================================

What:  Cat CRUD scoped to the authenticated owner, photo upload, and the
       cascade delete of everything hanging off a cat.
Who:   Called by routes/cats.py.

Delete cascade:
    DELETE /api/cats/{id} removes, in one transaction:
        health_records, insurance_policies, health_todos (cat_id = id), the cat
    The FKs also carry ON DELETE CASCADE, but SQLite only enforces them
    with PRAGMA foreign_keys=ON. Stored files of the deleted rows are
    returned so the route can remove them after the response.
"""

import logging
from typing import List, NamedTuple, Optional, Tuple

from sqlalchemy import delete, desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cathealth.exceptions import CatHealthError, DatabaseError
from cathealth.models import Cat, HealthRecord, HealthTodo, InsurancePolicy
from cathealth.schemas.auth import TokenClaims
from cathealth.schemas.cat import CatDetailResponse, CatResponse, CatWrite
from cathealth.schemas.health_record import HealthRecordResponse
from cathealth.services.file_service import IMAGE_TYPES, FileService
from cathealth.services.ownership import get_owned_cat

logger = logging.getLogger(__name__)


class ImageUpload(NamedTuple):
    """A photo received with the create form."""

    filename: Optional[str]
    content: bytes
    content_type: Optional[str] = None
    content_length: Optional[int] = None


def _apply(cat: Cat, payload: CatWrite) -> None:
    cat.name = payload.name
    cat.breed = payload.breed
    cat.age = payload.age
    cat.birthdate = payload.birthdate
    cat.weight = payload.weight
    cat.description = payload.description


class CatService:
    async def list_cats(self, db: AsyncSession, current_user: TokenClaims) -> List[CatResponse]:
        """The caller's cats, newest first. Never includes other users' cats."""
        try:
            result = await db.execute(
                select(Cat)
                .where(Cat.owner_id == current_user.user_id)
                .order_by(desc(Cat.created_at), desc(Cat.id))
            )
        except SQLAlchemyError as e:
            logger.error("Failed to list cats for user %s: %s", current_user.user_id, str(e))
            raise DatabaseError(message="Failed to retrieve cats. Please try again.")
        return [CatResponse.from_model(cat) for cat in result.scalars().all()]

    async def get_cat(self, db: AsyncSession, cat_id: int, current_user: TokenClaims) -> CatDetailResponse:
        """One cat with its health records (date descending)."""
        try:
            cat = await get_owned_cat(db, cat_id, current_user)
            result = await db.execute(
                select(HealthRecord)
                .where(HealthRecord.cat_id == cat.id)
                .order_by(desc(HealthRecord.date), desc(HealthRecord.id))
            )
            records = result.scalars().all()
        except SQLAlchemyError as e:
            logger.error("Failed to load cat %s: %s", cat_id, str(e))
            raise DatabaseError(message="Failed to retrieve cat. Please try again.")

        base = CatResponse.from_model(cat)
        return CatDetailResponse(
            **base.model_dump(),
            health_records=[HealthRecordResponse.from_model(r) for r in records],
        )

    async def create_cat(
        self,
        db: AsyncSession,
        payload: CatWrite,
        current_user: TokenClaims,
        image: Optional[ImageUpload] = None,
        file_service: Optional[FileService] = None,
    ) -> CatResponse:
        """
        Adds a cat, optionally with its photo from the same form submission.

        The photo is validated and written before the row is inserted; if
        the insert fails, the written file is removed again.
        """
        cat = Cat(owner_id=current_user.user_id)
        _apply(cat, payload)

        absolute_path = None
        if image is not None:
            absolute_path, cat.image_path = await file_service.validate_and_store(
                filename=image.filename,
                content=image.content,
                allowed=IMAGE_TYPES,
                content_type=image.content_type,
                content_length=image.content_length,
            )

        try:
            db.add(cat)
            await db.flush()
            await db.commit()
        except SQLAlchemyError as e:
            if absolute_path:
                await file_service.cleanup_file(absolute_path)
            logger.error("Failed to create cat for user %s: %s", current_user.user_id, str(e))
            raise DatabaseError(message="Failed to create cat. Please try again.")

        logger.info("Cat %s created by user %s", cat.id, current_user.user_id)
        return CatResponse.from_model(cat)

    async def update_cat(
        self,
        db: AsyncSession,
        cat_id: int,
        payload: CatWrite,
        current_user: TokenClaims,
    ) -> CatResponse:
        """Full replacement of the editable fields; the photo is kept."""
        try:
            cat = await get_owned_cat(db, cat_id, current_user)
            _apply(cat, payload)
            cat.touch()
            await db.flush()
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to update cat %s: %s", cat_id, str(e))
            raise DatabaseError(message="Failed to update cat. Please try again.")

        logger.info("Cat %s updated by user %s", cat.id, current_user.user_id)
        return CatResponse.from_model(cat)

    async def delete_cat(self, db: AsyncSession, cat_id: int, current_user: TokenClaims) -> List[str]:
        """
        Deletes the cat and its dependents.

        Returns:
            Relative paths of stored files that are now orphaned
        """
        try:
            cat = await get_owned_cat(db, cat_id, current_user)

            result = await db.execute(
                select(HealthRecord.file_path).where(
                    HealthRecord.cat_id == cat.id,
                    HealthRecord.file_path.is_not(None),
                )
            )
            orphaned = [path for path in result.scalars().all()]
            if cat.image_path:
                orphaned.append(cat.image_path)

            await db.execute(delete(HealthRecord).where(HealthRecord.cat_id == cat.id))
            await db.execute(delete(InsurancePolicy).where(InsurancePolicy.cat_id == cat.id))
            await db.execute(delete(HealthTodo).where(HealthTodo.cat_id == cat.id))
            await db.delete(cat)
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to delete cat %s: %s", cat_id, str(e))
            raise DatabaseError(message="Failed to delete cat. Please try again.")

        logger.info("Cat %s deleted by user %s", cat_id, current_user.user_id)
        return orphaned

    async def set_image(
        self,
        db: AsyncSession,
        cat_id: int,
        current_user: TokenClaims,
        file_service: FileService,
        filename: Optional[str],
        content: bytes,
        content_type: Optional[str] = None,
        content_length: Optional[int] = None,
    ) -> Tuple[CatResponse, Optional[str]]:
        """
        Stores a new photo for the cat.

        Ownership is checked before anything touches the disk. If saving
        the new path fails, the freshly written file is removed again.

        Returns:
            (updated cat, relative path of the replaced photo or None)
        """
        cat = await get_owned_cat(db, cat_id, current_user)
        absolute_path, relative_path = await file_service.validate_and_store(
            filename=filename,
            content=content,
            allowed=IMAGE_TYPES,
            content_type=content_type,
            content_length=content_length,
        )

        previous = cat.image_path
        try:
            cat.image_path = relative_path
            cat.touch()
            await db.flush()
            await db.commit()
        except Exception as e:
            await file_service.cleanup_file(absolute_path)
            if isinstance(e, CatHealthError):
                raise
            logger.error("Failed to save image for cat %s: %s", cat_id, str(e), exc_info=True)
            raise DatabaseError(message="Failed to save the photo. Please try again.")

        logger.info("Cat %s photo set to %s", cat.id, relative_path)
        return CatResponse.from_model(cat), previous
