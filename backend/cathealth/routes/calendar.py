"""
CatHealth Backend — Calendar Route Handler
============================================

GET /api/calendar?start=YYYY-MM-DD&end=YYYY-MM-DD

Every health record of the caller's cats as a calendar event, oldest
first. Both bounds are optional and inclusive.
"""

import datetime as dt
from typing import List, Optional

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from cathealth.database import get_db_session
from cathealth.dependencies import get_current_user
from cathealth.exceptions import ValidationError
from cathealth.schemas.auth import TokenClaims
from cathealth.schemas.common import ErrorResponse, coerce_date
from cathealth.schemas.health_record import CalendarEvent
from cathealth.services.health_record_service import HealthRecordService

router = APIRouter(prefix="/api", tags=["Calendar"])

record_service = HealthRecordService()


def _query_date(value: Optional[str], name: str) -> Optional[dt.date]:
    try:
        return coerce_date(value)
    except ValueError as e:
        raise ValidationError(message=str(e), field=name)


@router.get(
    "/calendar",
    response_model=List[CalendarEvent],
    responses={400: {"description": "Invalid date bound", "model": ErrorResponse}},
    summary="Health events across all of the caller's cats",
)
async def calendar(
    start: Optional[str] = Query(default=None, description="First day included (YYYY-MM-DD)"),
    end: Optional[str] = Query(default=None, description="Last day included (YYYY-MM-DD)"),
    current_user: TokenClaims = Depends(get_current_user),
    db: AsyncSession = Depends(get_db_session),
) -> List[CalendarEvent]:
    start_date = _query_date(start, "start")
    end_date = _query_date(end, "end")
    if start_date and end_date and end_date < start_date:
        raise ValidationError(message="end must be on or after start", field="end")
    return await record_service.calendar(db, current_user, start_date, end_date)
