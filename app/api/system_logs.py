from typing import Optional

from fastapi import APIRouter, Depends, Query

from app.api.deps import get_system_log_service
from app.schemas.system_log import SystemLogPage
from app.services.system_log_service import SystemLogService

router = APIRouter(prefix="/logs", tags=["System Logs"])


@router.get("", response_model=SystemLogPage)
async def list_system_logs(
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    q: Optional[str] = Query(None),
    service: SystemLogService = Depends(get_system_log_service),
):
    return await service.list_logs(page=page, limit=limit, q=q)
