from datetime import datetime
from typing import Optional

from pydantic import BaseModel

from app.core.enums import AssetLogAction


class HistoryItem(BaseModel):
    id: Optional[str] = None
    action: Optional[AssetLogAction] = None   # None => unrecognized kind
    title: str
    description: Optional[str] = None
    actor: str
    created_at: Optional[datetime] = None
