from __future__ import annotations

from datetime import datetime
from typing import Optional, Union

from app.models.common import AppBaseModel


# timestamps stay loosely typed: rows coming from the store can carry
# malformed strings and the SLA evaluator treats those as "absent"
Timestamp = Union[datetime, str, None]


class Ticket(AppBaseModel):
    id: Optional[str] = None
    title: Optional[str] = None
    status: Optional[str] = "open"
    priority: Optional[str] = None
    assigned_to: Optional[str] = None
    created_at: Timestamp = None
    due_at: Timestamp = None
