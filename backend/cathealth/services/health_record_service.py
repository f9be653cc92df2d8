"""
CatHealth Backend — Health Record Service
===========================================

What:  Health record CRUD, document attachments and the calendar feed.
Who:   Called by routes/records.py and routes/calendar.py.

Ownership is transitive: a record belongs to whoever owns its cat.
Record-scoped operations resolve record + owner with one joined query
(get_owned_child); cat-scoped ones check the cat first.

Calendar query plan:
    SELECT r.id, r.cat_id, c.name, r.type, r.date, r.description
    FROM health_records r JOIN cats c ON c.id = r.cat_id
    WHERE c.owner_id = :user [AND r.date >= :start] [AND r.date <= :end]
    ORDER BY r.date ASC, r.id ASC
"""

import datetime as dt
import logging
from typing import List, Optional, Tuple

from sqlalchemy import asc, desc, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cathealth.exceptions import CatHealthError, DatabaseError
from cathealth.models import Cat, HealthRecord
from cathealth.schemas.auth import TokenClaims
from cathealth.schemas.health_record import (
    CalendarEvent,
    HealthRecordResponse,
    HealthRecordWrite,
)
from cathealth.services.file_service import DOCUMENT_TYPES, FileService
from cathealth.services.ownership import get_owned_cat, get_owned_child

logger = logging.getLogger(__name__)


def _apply(record: HealthRecord, payload: HealthRecordWrite) -> None:
    record.type = payload.type.value
    record.date = payload.date
    record.description = payload.description
    record.notes = payload.notes


class HealthRecordService:
    async def _owned_record(
        self, db: AsyncSession, record_id: int, current_user: TokenClaims
    ) -> HealthRecord:
        return await get_owned_child(db, HealthRecord, record_id, current_user, "health record")

    async def create_record(
        self,
        db: AsyncSession,
        cat_id: int,
        payload: HealthRecordWrite,
        current_user: TokenClaims,
    ) -> HealthRecordResponse:
        try:
            cat = await get_owned_cat(db, cat_id, current_user)
            record = HealthRecord(cat_id=cat.id)
            _apply(record, payload)
            db.add(record)
            await db.flush()
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to create record for cat %s: %s", cat_id, str(e))
            raise DatabaseError(message="Failed to create health record. Please try again.")

        logger.info("Health record %s (%s) created for cat %s", record.id, record.type, cat_id)
        return HealthRecordResponse.from_model(record)

    async def list_records(
        self, db: AsyncSession, cat_id: int, current_user: TokenClaims
    ) -> List[HealthRecordResponse]:
        """Records of one cat, most recent date first."""
        try:
            cat = await get_owned_cat(db, cat_id, current_user)
            result = await db.execute(
                select(HealthRecord)
                .where(HealthRecord.cat_id == cat.id)
                .order_by(desc(HealthRecord.date), desc(HealthRecord.id))
            )
        except SQLAlchemyError as e:
            logger.error("Failed to list records for cat %s: %s", cat_id, str(e))
            raise DatabaseError(message="Failed to retrieve health records. Please try again.")
        return [HealthRecordResponse.from_model(r) for r in result.scalars().all()]

    async def get_record(
        self, db: AsyncSession, record_id: int, current_user: TokenClaims
    ) -> HealthRecordResponse:
        try:
            record = await self._owned_record(db, record_id, current_user)
        except SQLAlchemyError as e:
            logger.error("Failed to load record %s: %s", record_id, str(e))
            raise DatabaseError(message="Failed to retrieve health record. Please try again.")
        return HealthRecordResponse.from_model(record)

    async def update_record(
        self,
        db: AsyncSession,
        record_id: int,
        payload: HealthRecordWrite,
        current_user: TokenClaims,
    ) -> HealthRecordResponse:
        """Replaces type, date, description and notes; the attachment is kept."""
        try:
            record = await self._owned_record(db, record_id, current_user)
            _apply(record, payload)
            record.touch()
            await db.flush()
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to update record %s: %s", record_id, str(e))
            raise DatabaseError(message="Failed to update health record. Please try again.")

        logger.info("Health record %s updated", record.id)
        return HealthRecordResponse.from_model(record)

    async def delete_record(
        self, db: AsyncSession, record_id: int, current_user: TokenClaims
    ) -> Optional[str]:
        """Returns the relative path of the record's attachment, if any."""
        try:
            record = await self._owned_record(db, record_id, current_user)
            orphaned = record.file_path
            await db.delete(record)
            await db.commit()
        except SQLAlchemyError as e:
            logger.error("Failed to delete record %s: %s", record_id, str(e))
            raise DatabaseError(message="Failed to delete health record. Please try again.")

        logger.info("Health record %s deleted", record_id)
        return orphaned

    async def attach_file(
        self,
        db: AsyncSession,
        record_id: int,
        current_user: TokenClaims,
        file_service: FileService,
        filename: Optional[str],
        content: bytes,
        content_type: Optional[str] = None,
        content_length: Optional[int] = None,
    ) -> Tuple[HealthRecordResponse, Optional[str]]:
        """
        Stores a document (vet invoice, lab result, photo) for a record.

        Returns:
            (updated record, relative path of the replaced document or None)
        """
        record = await self._owned_record(db, record_id, current_user)
        absolute_path, relative_path = await file_service.validate_and_store(
            filename=filename,
            content=content,
            allowed=DOCUMENT_TYPES,
            content_type=content_type,
            content_length=content_length,
        )

        previous = record.file_path
        try:
            record.file_path = relative_path
            record.touch()
            await db.flush()
            await db.commit()
        except Exception as e:
            await file_service.cleanup_file(absolute_path)
            if isinstance(e, CatHealthError):
                raise
            logger.error("Failed to attach file to record %s: %s", record_id, str(e), exc_info=True)
            raise DatabaseError(message="Failed to save the document. Please try again.")

        logger.info("Health record %s document set to %s", record.id, relative_path)
        return HealthRecordResponse.from_model(record), previous

    async def calendar(
        self,
        db: AsyncSession,
        current_user: TokenClaims,
        start: Optional[dt.date] = None,
        end: Optional[dt.date] = None,
    ) -> List[CalendarEvent]:
        """All of the caller's records as calendar events, optionally bounded (inclusive)."""
        query = (
            select(
                HealthRecord.id,
                HealthRecord.cat_id,
                Cat.name,
                HealthRecord.type,
                HealthRecord.date,
                HealthRecord.description,
            )
            .join(Cat, Cat.id == HealthRecord.cat_id)
            .where(Cat.owner_id == current_user.user_id)
        )
        if start is not None:
            query = query.where(HealthRecord.date >= start)
        if end is not None:
            query = query.where(HealthRecord.date <= end)
        query = query.order_by(asc(HealthRecord.date), asc(HealthRecord.id))

        try:
            result = await db.execute(query)
        except SQLAlchemyError as e:
            logger.error("Failed to build calendar for user %s: %s", current_user.user_id, str(e))
            raise DatabaseError(message="Failed to retrieve calendar. Please try again.")

        return [
            CalendarEvent(
                id=row.id,
                cat_id=row.cat_id,
                cat_name=row.name,
                type=row.type,
                date=row.date,
                description=row.description,
            )
            for row in result.all()
        ]
