from datetime import datetime, timezone
from typing import List, Optional

from app.core.config import get_settings
from app.models.common import parse_oid
from app.schemas.sla_policy import SlaPolicyUpdate
from app.utils.mongo import serialize_mongo


def _out(doc: dict) -> dict:
    doc = serialize_mongo(doc)
    doc["id"] = doc.pop("_id")
    return doc


class SlaPolicyService:
    def __init__(self, collection):
        self.collection = collection

    async def list_raw(self) -> List[dict]:
        limit = get_settings().policies_page_limit
        return await self.collection.find({}).sort("priority", 1).to_list(length=limit)

    async def list_policies(self) -> List[dict]:
        return [_out(d) for d in await self.list_raw()]

    # -------------------------------------------------------------------
    # Update resolution / response hours
    # -------------------------------------------------------------------
    async def update_policy(self, policy_id: str, patch: SlaPolicyUpdate) -> Optional[dict]:
        oid = parse_oid(policy_id, "SLA policy")

        update = patch.model_dump(exclude_unset=True)
        if not update:
            doc = await self.collection.find_one({"_id": oid})
            return _out(doc) if doc else None

        update["updated_at"] = datetime.now(timezone.utc)

        res = await self.collection.update_one({"_id": oid}, {"$set": update})
        if res.matched_count != 1:
            return None

        return _out(await self.collection.find_one({"_id": oid}))
