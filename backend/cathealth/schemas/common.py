"""
CatHealth Backend — Shared Schema Pieces
==========================================

What:  Base model, coercion helpers and the error/health response models.
Why:   The frontend speaks camelCase JSON (policyNumber, imageUrl, catId);
       the Python side stays snake_case. CamelModel bridges the two:
       responses are serialized by alias, requests accept either spelling.
"""

import datetime as dt
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

# Largest value an INTEGER column holds (int4 on PostgreSQL)
INT4_MAX = 2**31 - 1


class CamelModel(BaseModel):
    """Base for every request/response body exchanged with the frontend."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


def coerce_date(value: Any) -> Any:
    """
    Accepts `YYYY-MM-DD` or a full ISO-8601 datetime and keeps the date part.

    Browsers send `<input type="date">` values as plain dates, but
    `Date.toISOString()` output ("2024-01-01T00:00:00.000Z") shows up too.
    Blank strings become None so optional dates can be cleared; anything
    unparseable raises ValueError, which Pydantic reports as a 400.
    """
    if value is None:
        return None
    # datetime is a date subclass, so it has to be checked first
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    if isinstance(value, str):
        raw = value.strip()
        if not raw:
            return None
        try:
            if len(raw) == 10:
                return dt.date.fromisoformat(raw)
            if raw[-1] in ("Z", "z"):
                raw = raw[:-1] + "+00:00"
            return dt.datetime.fromisoformat(raw).date()
        except ValueError:
            raise ValueError(f"Invalid date '{value}'. Expected YYYY-MM-DD") from None
    return value


def blank_to_none(value: Any) -> Any:
    """Form fields arrive as "" when left empty."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


def file_url(relative_path: Optional[str]) -> Optional[str]:
    """Public URL for a file stored by FileService, or None."""
    if not relative_path:
        return None
    return f"/api/files/{relative_path}"


# ══════════════════════════════════════════════════════════════════════════
# Error & Health Response Models
# ══════════════════════════════════════════════════════════════════════════


class ErrorResponse(BaseModel):
    """
    Error body returned by every failing endpoint.

    Example:
        {"message": "Cat not found", "request_id": "a1b2c3d4"}

    `error` carries the exception detail and is only present when
    APP_ENV=development.
    """

    message: str = Field(description="Human-readable error description")
    request_id: Optional[str] = Field(default=None, description="Request correlation ID")
    error: Optional[str] = Field(default=None, description="Debug detail (development only)")


class HealthResponse(BaseModel):
    """Returned by GET /health for container and load balancer probes."""

    status: str = Field(description="Overall service status: healthy, unhealthy")
    version: str = Field(description="Application version")
    database: str = Field(description="Database connectivity: connected, disconnected")
    uptime_seconds: float = Field(description="Seconds since service started")
