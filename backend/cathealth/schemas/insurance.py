"""
CatHealth Backend — Insurance Schemas
=======================================

Wire names follow the insurance form: provider, policyNumber, startDate,
endDate, coverage, premium.
"""

import datetime as dt
from typing import Optional

from pydantic import Field, field_validator, model_validator

from cathealth.models import InsurancePolicy
from cathealth.schemas.common import CamelModel, blank_to_none, coerce_date


class InsuranceWrite(CamelModel):
    """Body of POST /api/cats/{catId}/insurance and PUT /api/insurance/{id}."""

    provider: str = Field(..., min_length=1, max_length=200)
    policy_number: str = Field(..., min_length=1, max_length=100)
    start_date: dt.date
    end_date: dt.date
    premium: Optional[float] = Field(default=None, ge=0)
    coverage: Optional[str] = Field(default=None, max_length=5000)

    @field_validator("provider", "policy_number")
    @classmethod
    def strip_required_text(cls, v: str) -> str:
        stripped = v.strip()
        if not stripped:
            raise ValueError("Must not be blank")
        return stripped

    @field_validator("start_date", "end_date", mode="before")
    @classmethod
    def parse_dates(cls, v):
        return coerce_date(v)

    @field_validator("premium", "coverage", mode="before")
    @classmethod
    def empty_to_none(cls, v):
        return blank_to_none(v)

    @model_validator(mode="after")
    def check_period(self) -> "InsuranceWrite":
        if self.end_date < self.start_date:
            raise ValueError("endDate must be on or after startDate")
        return self


class InsuranceResponse(CamelModel):
    id: int
    cat_id: int
    provider: str
    policy_number: str
    start_date: dt.date
    end_date: dt.date
    premium: Optional[float] = None
    coverage: Optional[str] = None
    created_at: dt.datetime
    updated_at: dt.datetime

    @classmethod
    def from_model(cls, policy: InsurancePolicy) -> "InsuranceResponse":
        return cls(
            id=policy.id,
            cat_id=policy.cat_id,
            provider=policy.provider,
            policy_number=policy.policy_number,
            start_date=policy.start_date,
            end_date=policy.end_date,
            premium=policy.premium,
            coverage=policy.coverage,
            created_at=policy.created_at,
            updated_at=policy.updated_at,
        )
