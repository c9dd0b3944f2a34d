from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import Field, field_validator

from app.models.common import AppBaseModel, as_datetime, as_mapping, stringify


class SystemLogCreate(AppBaseModel):
    """One row for the system-wide activity log (`logs` collection)."""

    action: str = Field(..., min_length=1)
    user_id: Optional[str] = None
    details: Optional[Dict[str, Any]] = None


class SystemLog(AppBaseModel):
    id: Optional[str] = None
    action: Optional[str] = None
    user_id: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None

    @field_validator("id", "action", "user_id", mode="before")
    @classmethod
    def _as_text(cls, v):
        return stringify(v)

    @field_validator("details", mode="before")
    @classmethod
    def _as_details(cls, v):
        return as_mapping(v)

    @field_validator("created_at", mode="before")
    @classmethod
    def _as_created_at(cls, v):
        return as_datetime(v)
