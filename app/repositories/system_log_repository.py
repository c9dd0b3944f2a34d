import re
from typing import List, Optional, Tuple


class SystemLogRepository:
    """Append-only access to the system-wide `logs` collection."""

    def __init__(self, collection):
        self.collection = collection

    async def insert_many(self, rows: List[dict]) -> None:
        await self.collection.insert_many(rows)

    async def list_page(
        self, offset: int, limit: int, q: Optional[str] = None
    ) -> Tuple[List[dict], int]:
        filt: dict = {}
        if q:
            term = re.escape(q)
            filt["$or"] = [
                {"action": {"$regex": term, "$options": "i"}},
                {"details.title": {"$regex": term, "$options": "i"}},
                {"details.ticket_id": {"$regex": term, "$options": "i"}},
                {"details.source": {"$regex": term, "$options": "i"}},
            ]

        cursor = self.collection.find(filt).sort("created_at", -1).skip(offset).limit(limit)

        out = []
        async for doc in cursor:
            doc["id"] = str(doc.pop("_id"))
            out.append(doc)

        total = await self.collection.count_documents(filt)
        return out, total
