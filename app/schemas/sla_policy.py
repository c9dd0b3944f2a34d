from datetime import datetime
from typing import Optional

from pydantic import BaseModel, Field


class SlaPolicyUpdate(BaseModel):
    response_time_hours: Optional[float] = Field(None, gt=0)
    resolution_time_hours: Optional[float] = Field(None, gt=0)


class SlaPolicyOut(BaseModel):
    id: str
    priority: Optional[str] = None
    response_time_hours: Optional[float] = None
    resolution_time_hours: Optional[float] = None
    updated_at: Optional[datetime] = None
