from __future__ import annotations

from datetime import datetime
from typing import Optional

from app.models.common import AppBaseModel


class SlaPolicy(AppBaseModel):
    id: Optional[str] = None

    # matching rule (Low / Medium / High / Critical, any casing)
    priority: Optional[str] = None

    # sla logic
    response_time_hours: Optional[float] = None
    resolution_time_hours: Optional[float] = None

    updated_at: Optional[datetime] = None
