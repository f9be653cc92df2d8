"""
CatHealth Backend — Health Record Schemas
===========================================

Request body shared by create and update, the record response, and the
calendar event shape (a record annotated with its cat's name).
"""

import datetime as dt
from typing import Optional

from pydantic import Field, field_validator

from cathealth.models import HealthRecord, RecordType
from cathealth.schemas.common import CamelModel, blank_to_none, coerce_date, file_url


class HealthRecordWrite(CamelModel):
    """
    Body of POST /api/cats/{catId}/records and PUT /api/records/{id}.

    type must be one of vaccination, checkup, medication, other.
    """

    type: RecordType
    date: dt.date
    description: str = Field(..., min_length=1, max_length=5000)
    notes: Optional[str] = Field(default=None, max_length=5000)

    @field_validator("date", mode="before")
    @classmethod
    def parse_date(cls, v):
        return coerce_date(v)

    @field_validator("description")
    @classmethod
    def strip_description(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Description must not be blank")
        return stripped

    @field_validator("notes", mode="before")
    @classmethod
    def empty_notes(cls, v):
        return blank_to_none(v)


class HealthRecordResponse(CamelModel):
    id: int
    cat_id: int
    type: str
    date: dt.date
    description: str
    notes: Optional[str] = None
    file_url: Optional[str] = None
    created_at: dt.datetime
    updated_at: dt.datetime

    @classmethod
    def from_model(cls, record: HealthRecord) -> "HealthRecordResponse":
        return cls(
            id=record.id,
            cat_id=record.cat_id,
            type=record.type,
            date=record.date,
            description=record.description,
            notes=record.notes,
            file_url=file_url(record.file_path),
            created_at=record.created_at,
            updated_at=record.updated_at,
        )


class CalendarEvent(CamelModel):
    """One entry of GET /api/calendar."""

    id: int
    cat_id: int
    cat_name: str
    type: str
    date: dt.date
    description: str
