from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from app.core.enums import AssetStatus


class AssetCreate(BaseModel):
    name: str = Field(..., min_length=1)
    asset_code: Optional[str] = None
    serial_number: Optional[str] = None
    location: Optional[str] = None
    category_id: Optional[str] = None
    asset_type_id: Optional[str] = None
    description: Optional[str] = None
    status: str = AssetStatus.available.value


class AssetUpdate(BaseModel):
    # editable form fields + status
    name: Optional[str] = None
    asset_code: Optional[str] = None
    serial_number: Optional[str] = None
    location: Optional[str] = None
    category_id: Optional[str] = None
    asset_type_id: Optional[str] = None
    description: Optional[str] = None
    status: Optional[str] = None


class AssignRequest(BaseModel):
    user_id: Optional[str] = None   # None => unassign


class StatusChangeRequest(BaseModel):
    status: str = Field(..., min_length=1)


class CustomFieldRef(BaseModel):
    id: str
    key: str


class CustomFieldValuesSave(BaseModel):
    values: Dict[str, str]
    fields: List[CustomFieldRef]


class AssetCreated(BaseModel):
    id: str


class AssetChanges(BaseModel):
    changed: List[str]
