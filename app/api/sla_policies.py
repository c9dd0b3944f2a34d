from typing import List

from fastapi import APIRouter, Depends, HTTPException

from app.api.deps import get_sla_policy_service
from app.schemas.sla_policy import SlaPolicyOut, SlaPolicyUpdate
from app.services.sla_service import SlaPolicyService

router = APIRouter(prefix="/sla-policies", tags=["SLA Policies"])


@router.get("", response_model=List[SlaPolicyOut])
async def list_policies(service: SlaPolicyService = Depends(get_sla_policy_service)):
    return await service.list_policies()


@router.patch("/{policy_id}", response_model=SlaPolicyOut)
async def update_policy(
    policy_id: str,
    patch: SlaPolicyUpdate,
    service: SlaPolicyService = Depends(get_sla_policy_service),
):
    try:
        updated = await service.update_policy(policy_id, patch)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))

    if not updated:
        raise HTTPException(status_code=404, detail="SLA policy not found")
    return updated
