from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import field_validator

from app.core.enums import AssetLogAction
from app.models.common import AppBaseModel, as_datetime, as_mapping, stringify


WHOLE_RECORD_FIELD = "*"


class FieldDiff(AppBaseModel):
    field: str
    old_value: Optional[str] = None
    new_value: Optional[str] = None


class AssetLogCreate(AppBaseModel):
    """Write payload for one audit row. Values are already stringified."""

    asset_id: str
    action: AssetLogAction
    field: str
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    performed_by: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None


class AssetLog(AppBaseModel):
    # stored rows are read back as-is; action stays a raw string because
    # older rows may carry kinds the enum does not know
    id: Optional[str] = None
    asset_id: Optional[str] = None
    action: Optional[str] = None
    field: Optional[str] = None
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    performed_by: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None

    @field_validator(
        "id", "asset_id", "action", "field", "old_value", "new_value", "performed_by",
        mode="before",
    )
    @classmethod
    def _as_text(cls, v):
        # ObjectIds, numbers and booleans are read back in their written spelling
        return stringify(v)

    @field_validator("metadata", mode="before")
    @classmethod
    def _as_metadata(cls, v):
        return as_mapping(v)

    @field_validator("created_at", mode="before")
    @classmethod
    def _as_created_at(cls, v):
        return as_datetime(v)
