from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel


class LogText(BaseModel):
    title: str
    description: Optional[str] = None


class SystemLogOut(BaseModel):
    id: Optional[str] = None
    action: Optional[str] = None
    user_id: Optional[str] = None
    user_name: Optional[str] = None
    details: Optional[Dict[str, Any]] = None
    created_at: Optional[datetime] = None
    title: str
    description: Optional[str] = None


class SystemLogPage(BaseModel):
    data: List[SystemLogOut]
    count: int
