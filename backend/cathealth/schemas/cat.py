"""
CatHealth Backend — Cat Schemas
=================================

CatWrite is used for both POST /api/cats and PUT /api/cats/{id}: PUT is a
full replacement, so optional fields left out of the body are cleared.

Numeric coercion (form fields arrive as strings):
    age    → int, decimals truncated ("3.7" → 3)
    weight → float
    absent, "" or falsy (0) → null
    negative values or text that is not a number → 400
"""

import datetime as dt
import math
import re
from typing import List, Optional

from pydantic import Field, field_validator

from cathealth.models import Cat
from cathealth.schemas.common import INT4_MAX, CamelModel, blank_to_none, coerce_date, file_url
from cathealth.schemas.health_record import HealthRecordResponse

_DECIMAL = re.compile(r"([+-]?\d+)(?:\.\d*)?")


class CatWrite(CamelModel):
    name: str = Field(..., min_length=1, max_length=100)
    breed: str = Field(..., min_length=1, max_length=100)
    age: Optional[int] = Field(default=None, ge=0, le=INT4_MAX)
    birthdate: Optional[dt.date] = None
    weight: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    description: Optional[str] = Field(default=None, max_length=5000)

    @field_validator("name", "breed")
    @classmethod
    def strip_required_text(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Must not be blank")
        return stripped

    @field_validator("age", "weight", "description", mode="before")
    @classmethod
    def empty_to_none(cls, v):
        return blank_to_none(v)

    @field_validator("age", mode="before")
    @classmethod
    def truncate_age(cls, v):
        if isinstance(v, float) and math.isfinite(v):
            return int(v)
        if isinstance(v, str):
            match = _DECIMAL.fullmatch(v.strip())
            if match:
                return int(match.group(1))
        return v

    @field_validator("age", "weight")
    @classmethod
    def falsy_to_none(cls, v):
        return v or None

    @field_validator("birthdate", mode="before")
    @classmethod
    def parse_birthdate(cls, v):
        return coerce_date(v)


class CatResponse(CamelModel):
    id: int
    owner_id: int
    name: str
    breed: str
    age: Optional[int] = None
    birthdate: Optional[dt.date] = None
    weight: Optional[float] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    created_at: dt.datetime
    updated_at: dt.datetime

    @classmethod
    def from_model(cls, cat: Cat) -> "CatResponse":
        return cls(
            id=cat.id,
            owner_id=cat.owner_id,
            name=cat.name,
            breed=cat.breed,
            age=cat.age,
            birthdate=cat.birthdate,
            weight=cat.weight,
            description=cat.description,
            image_url=file_url(cat.image_path),
            created_at=cat.created_at,
            updated_at=cat.updated_at,
        )


class CatDetailResponse(CatResponse):
    """GET /api/cats/{id}: the cat plus its health records, newest first."""

    health_records: List[HealthRecordResponse] = Field(default_factory=list)
