from typing import List


class AssetLogRepository:
    """Append-only access to the asset_logs collection."""

    def __init__(self, collection):
        self.collection = collection

    async def insert_many(self, rows: List[dict]) -> None:
        # one batched call per mutation
        await self.collection.insert_many(rows)

    async def list_for_asset(self, asset_id: str) -> List[dict]:
        out = []
        async for doc in self.collection.find({"asset_id": asset_id}).sort("created_at", -1):
            doc["id"] = str(doc.pop("_id"))
            out.append(doc)

        return out
