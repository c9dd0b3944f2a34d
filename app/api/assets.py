from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import get_asset_log_service, get_asset_service
from app.core.security import get_current_user_id
from app.models.common import parse_oid
from app.schemas.asset import (
    AssetChanges,
    AssetCreate,
    AssetCreated,
    AssetUpdate,
    AssignRequest,
    CustomFieldValuesSave,
    StatusChangeRequest,
)
from app.schemas.asset_log import AssetLogOut
from app.schemas.history import HistoryItem
from app.services.asset_log_service import AssetLogService
from app.services.assets_service import AssetService

router = APIRouter(prefix="/assets", tags=["Assets"])


def _http_error(e: Exception) -> HTTPException:
    if isinstance(e, LookupError):
        return HTTPException(status_code=404, detail=str(e))
    return HTTPException(status_code=400, detail=str(e))


# ------------------------------------------------------------------
# Mutations (each one writes its audit rows)
# ------------------------------------------------------------------
@router.post("", response_model=AssetCreated, status_code=201)
async def create_asset(
    data: AssetCreate,
    service: AssetService = Depends(get_asset_service),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    asset_id = await service.create_asset(data.model_dump(), performed_by=user_id)
    return {"id": asset_id}


@router.patch("/{asset_id}", response_model=AssetChanges)
async def update_asset(
    asset_id: str,
    patch: AssetUpdate,
    service: AssetService = Depends(get_asset_service),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    try:
        diffs = await service.update_asset(
            asset_id, patch.model_dump(exclude_unset=True), performed_by=user_id
        )
    except (ValueError, LookupError) as e:
        raise _http_error(e)
    return {"changed": [d.field for d in diffs]}


@router.post("/{asset_id}/assign")
async def assign_asset(
    asset_id: str,
    data: AssignRequest,
    service: AssetService = Depends(get_asset_service),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    try:
        await service.assign_asset(asset_id, data.user_id, performed_by=user_id)
    except (ValueError, LookupError) as e:
        raise _http_error(e)
    return {"ok": True}


@router.post("/{asset_id}/status")
async def change_status(
    asset_id: str,
    data: StatusChangeRequest,
    service: AssetService = Depends(get_asset_service),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    try:
        await service.change_status(asset_id, data.status, performed_by=user_id)
    except (ValueError, LookupError) as e:
        raise _http_error(e)
    return {"ok": True}


@router.put("/{asset_id}/fields", response_model=AssetChanges)
async def save_custom_fields(
    asset_id: str,
    data: CustomFieldValuesSave,
    service: AssetService = Depends(get_asset_service),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    try:
        diffs = await service.save_custom_field_values(
            asset_id, data.values, data.fields, performed_by=user_id
        )
    except (ValueError, LookupError) as e:
        raise _http_error(e)
    return {"changed": [d.field for d in diffs]}


# ------------------------------------------------------------------
# History (read path)
# ------------------------------------------------------------------
@router.get("/{asset_id}/history", response_model=List[HistoryItem])
async def asset_history(
    asset_id: str,
    logs: AssetLogService = Depends(get_asset_log_service),
):
    try:
        parse_oid(asset_id, "asset")
    except ValueError as e:
        raise _http_error(e)
    return await logs.list_history(asset_id)


@router.get("/{asset_id}/logs", response_model=List[AssetLogOut])
async def asset_logs(
    asset_id: str,
    logs: AssetLogService = Depends(get_asset_log_service),
):
    try:
        parse_oid(asset_id, "asset")
    except ValueError as e:
        raise _http_error(e)
    return await logs.list_logs(asset_id)
