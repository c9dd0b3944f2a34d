from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field

from app.core.enums import TicketStatus


class TicketCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: Optional[str] = None
    category_id: Optional[str] = None
    priority: Optional[str] = None
    status: str = TicketStatus.open.value
    assigned_to: Optional[str] = None
    due_at: Optional[datetime] = None


class TicketUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category_id: Optional[str] = None
    priority: Optional[str] = None
    status: Optional[str] = None
    assigned_to: Optional[str] = None
    due_at: Optional[datetime] = None
    # where the edit came from (board, drawer, ...); only recorded in the activity log
    source: Optional[str] = None
