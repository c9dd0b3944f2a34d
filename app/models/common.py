# app/models/common.py
from __future__ import annotations

from collections.abc import Mapping
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional

from bson import ObjectId
from pydantic import BaseModel, ConfigDict


def parse_oid(value: str, label: str) -> ObjectId:
    """
    Convert a path/body id into an ObjectId.
    Raises ValueError("Invalid <label> ID") so routers can answer 400.
    """
    if isinstance(value, ObjectId):
        return value
    if isinstance(value, str) and ObjectId.is_valid(value):
        return ObjectId(value)
    raise ValueError(f"Invalid {label} ID")


# -------------------------
# Lenient readers for stored rows
# -------------------------

def stringify(value: Any) -> Optional[str]:
    if value is None:
        return None
    # JSON spelling, so snapshots read from the API and from Python agree
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, Enum):
        return stringify(value.value)
    return str(value)


def as_datetime(value: Any) -> Optional[datetime]:
    """datetime or ISO-8601 text -> aware datetime (naive = UTC); anything else -> None."""
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str) and value.strip():
        try:
            parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
        except ValueError:
            return None
    else:
        return None

    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def as_mapping(value: Any) -> Optional[Dict[str, Any]]:
    if isinstance(value, Mapping):
        return {str(k): v for k, v in value.items()}
    return None


class AppBaseModel(BaseModel):
    model_config = ConfigDict(
        arbitrary_types_allowed=True,
        populate_by_name=True,
    )
