from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query

from app.api.deps import get_ticket_service
from app.core.security import get_current_user_id
from app.schemas.ticket import TicketCreate, TicketUpdate
from app.services.tickets_service import TicketService

router = APIRouter(prefix="/tickets", tags=["Tickets"])


@router.get("")
async def list_tickets(
    status: Optional[str] = Query(None),
    priority: Optional[str] = Query(None),
    service: TicketService = Depends(get_ticket_service),
):
    return await service.list_tickets(status=status, priority=priority)


@router.get("/summary")
async def tickets_summary(service: TicketService = Depends(get_ticket_service)):
    return await service.summary()


@router.post("", status_code=201)
async def create_ticket(
    data: TicketCreate,
    service: TicketService = Depends(get_ticket_service),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    return await service.create_ticket(data.model_dump(), user_id=user_id)


@router.patch("/{ticket_id}")
async def update_ticket(
    ticket_id: str,
    data: TicketUpdate,
    service: TicketService = Depends(get_ticket_service),
    user_id: Optional[str] = Depends(get_current_user_id),
):
    updates = data.model_dump(exclude_unset=True)
    source = updates.pop("source", None)
    try:
        return await service.update_ticket(ticket_id, updates, user_id=user_id, source=source)
    except LookupError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
