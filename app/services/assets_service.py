from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence

from app.core.enums import AssetStatus
from app.core.logging import get_logger
from app.models.asset_log import FieldDiff
from app.models.common import parse_oid
from app.schemas.asset import CustomFieldRef
from app.services.asset_log_service import (
    AssetLogService,
    assignment_entries,
    creation_entry,
    custom_field_entries,
    entries_from_diffs,
    status_change_entry,
)
from app.utils.diff import EDITABLE_ASSET_FIELDS, TRACKED_ASSET_FIELDS, diff_asset

logger = get_logger(__name__)


def _now() -> datetime:
    return datetime.now(timezone.utc)


class AssetService:
    """
    Asset mutations. The write to `assets` is authoritative and its errors
    propagate; the audit rows that follow go through AssetLogService and
    never undo it.
    """

    def __init__(self, assets_col, field_values_col, logs: AssetLogService):
        self.assets = assets_col
        self.field_values = field_values_col
        self.logs = logs

    async def _get(self, asset_id: str) -> dict:
        oid = parse_oid(asset_id, "asset")
        doc = await self.assets.find_one({"_id": oid})
        if not doc:
            raise LookupError("Asset not found")
        return doc

    async def _set(self, asset_id: str, update: Dict[str, Any]) -> None:
        update["updated_at"] = _now()
        res = await self.assets.update_one(
            {"_id": parse_oid(asset_id, "asset")},
            {"$set": update},
        )
        if res.matched_count != 1:
            raise LookupError("Asset not found")

    # ------------------------------------------------------------------
    # Create
    # ------------------------------------------------------------------
    async def create_asset(self, payload: Dict[str, Any], performed_by: Optional[str]) -> str:
        now = _now()
        doc = {
            **payload,
            "assigned_to": payload.get("assigned_to"),
            "status": payload.get("status") or AssetStatus.available.value,
            "created_at": now,
            "updated_at": now,
        }

        res = await self.assets.insert_one(doc)
        asset_id = str(res.inserted_id)
        logger.info("asset created: %s", asset_id)

        await self.logs.insert_logs([creation_entry(asset_id, performed_by)])
        return asset_id

    # ------------------------------------------------------------------
    # Update (tracked fields are diffed against the stored snapshot)
    # ------------------------------------------------------------------
    async def update_asset(
        self,
        asset_id: str,
        patch: Dict[str, Any],
        performed_by: Optional[str],
    ) -> List[FieldDiff]:
        before = await self._get(asset_id)
        # assignment has its own operation
        patch = {
            k: v for k, v in patch.items()
            if k in EDITABLE_ASSET_FIELDS or k == "status"
        }
        if not patch:
            return []

        await self._set(asset_id, dict(patch))

        after = {**before, **patch}
        diffs = diff_asset(before, after, TRACKED_ASSET_FIELDS)
        if not diffs:
            return []

        await self.logs.insert_logs(entries_from_diffs(asset_id, diffs, performed_by))
        return diffs

    # ------------------------------------------------------------------
    # Assignment (also flips status Assigned / Available)
    # ------------------------------------------------------------------
    async def assign_asset(
        self,
        asset_id: str,
        new_user_id: Optional[str],
        performed_by: Optional[str],
    ) -> None:
        before = await self._get(asset_id)
        old_user_id = before.get("assigned_to")
        new_user_id = new_user_id or None

        await self._set(
            asset_id,
            {
                "assigned_to": new_user_id,
                "status": (
                    AssetStatus.assigned if new_user_id else AssetStatus.available
                ).value,
            },
        )

        await self.logs.insert_logs(
            assignment_entries(asset_id, old_user_id, new_user_id, performed_by)
        )

    # ------------------------------------------------------------------
    # Status
    # ------------------------------------------------------------------
    async def change_status(
        self,
        asset_id: str,
        new_status: str,
        performed_by: Optional[str],
    ) -> None:
        before = await self._get(asset_id)

        await self._set(asset_id, {"status": new_status})

        await self.logs.insert_logs(
            [status_change_entry(asset_id, before.get("status"), new_status, performed_by)]
        )

    # ------------------------------------------------------------------
    # Custom (dynamic) field values
    # ------------------------------------------------------------------
    async def save_custom_field_values(
        self,
        asset_id: str,
        values: Dict[str, str],
        fields: Sequence[CustomFieldRef],
        performed_by: Optional[str],
    ) -> List[FieldDiff]:
        await self._get(asset_id)

        rows = [f for f in fields if f.key in values]
        if not rows:
            return []

        current = {}
        async for doc in self.field_values.find({"asset_id": asset_id}):
            current[doc["field_id"]] = doc.get("value_text")

        before = {f.key: current.get(f.id) for f in rows}

        now = _now()
        for f in rows:
            await self.field_values.update_one(
                {"asset_id": asset_id, "field_id": f.id},
                {
                    "$set": {"value_text": values[f.key], "updated_at": now},
                    "$setOnInsert": {"asset_id": asset_id, "field_id": f.id},
                },
                upsert=True,
            )

        diffs = diff_asset(before, values, [f.key for f in rows])
        await self.logs.insert_logs(custom_field_entries(asset_id, diffs, performed_by))
        return diffs
