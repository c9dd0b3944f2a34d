from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Sequence

from app.core.enums import AssetLogAction, AssetStatus
from app.core.logging import get_logger
from app.models.asset_log import WHOLE_RECORD_FIELD, AssetLog, AssetLogCreate, FieldDiff
from app.models.common import stringify
from app.repositories.asset_log_repository import AssetLogRepository
from app.repositories.user_repository import UserRepository, name_resolver
from app.schemas.asset_log import AssetLogOut
from app.schemas.history import HistoryItem
from app.services.asset_log_messages import UserNameResolver, classify, describe

logger = get_logger(__name__)


# -------------------------
# Entry builders
# -------------------------

def entries_from_diffs(
    asset_id: str,
    diffs: Iterable[FieldDiff],
    performed_by: Optional[str],
) -> List[AssetLogCreate]:
    return [
        AssetLogCreate(
            asset_id=asset_id,
            action=AssetLogAction.status_change if d.field == "status" else AssetLogAction.update,
            field=d.field,
            old_value=d.old_value,
            new_value=d.new_value,
            performed_by=performed_by,
        )
        for d in diffs
    ]


def creation_entry(asset_id: str, performed_by: Optional[str]) -> AssetLogCreate:
    return AssetLogCreate(
        asset_id=asset_id,
        action=AssetLogAction.create,
        field=WHOLE_RECORD_FIELD,
        old_value=None,
        new_value="created",
        performed_by=performed_by,
    )


def assignment_entries(
    asset_id: str,
    old_user_id: Optional[str],
    new_user_id: Optional[str],
    performed_by: Optional[str],
) -> List[AssetLogCreate]:
    old_user_id = stringify(old_user_id)
    new_user_id = stringify(new_user_id)

    def _status(user_id):
        return (AssetStatus.assigned if user_id else AssetStatus.available).value

    return [
        AssetLogCreate(
            asset_id=asset_id,
            action=AssetLogAction.assign if new_user_id else AssetLogAction.unassign,
            field="assigned_to",
            old_value=old_user_id,
            new_value=new_user_id,
            performed_by=performed_by,
        ),
        AssetLogCreate(
            asset_id=asset_id,
            action=AssetLogAction.status_change,
            field="status",
            old_value=_status(old_user_id),
            new_value=_status(new_user_id),
            performed_by=performed_by,
        ),
    ]


def status_change_entry(
    asset_id: str,
    old_status: Optional[str],
    new_status: Optional[str],
    performed_by: Optional[str],
) -> AssetLogCreate:
    return AssetLogCreate(
        asset_id=asset_id,
        action=AssetLogAction.status_change,
        field="status",
        old_value=stringify(old_status),
        new_value=stringify(new_status),
        performed_by=performed_by,
    )


def custom_field_entries(
    asset_id: str,
    diffs: Iterable[FieldDiff],
    performed_by: Optional[str],
) -> List[AssetLogCreate]:
    return [
        AssetLogCreate(
            asset_id=asset_id,
            action=AssetLogAction.custom_field_update,
            field=d.field,
            old_value=d.old_value,
            new_value=d.new_value,
            performed_by=performed_by,
        )
        for d in diffs
    ]


def _to_row(entry: AssetLogCreate, now: datetime) -> Dict[str, Any]:
    return {
        "asset_id": entry.asset_id,
        "action": entry.action.value,
        "field": entry.field,
        "old_value": entry.old_value,
        "new_value": entry.new_value,
        "performed_by": entry.performed_by or None,
        "metadata": entry.metadata,
        "created_at": now,
    }


def _user_ids(logs: Sequence[AssetLog]) -> List[str]:
    ids = []
    for log in logs:
        ids.append(log.performed_by)
        if log.action in ("assign", "unassign") or log.field == "assigned_to":
            ids.extend([log.old_value, log.new_value])
    return [x for x in ids if x]


# -------------------------
# Service
# -------------------------

class AssetLogService:
    """
    Writes and reads the asset audit trail.

    insert_logs() is advisory: a failed write is logged and counted,
    never raised, so the asset mutation it accompanies stands.
    """

    def __init__(self, repo: AssetLogRepository, users: Optional[UserRepository] = None):
        self.repo = repo
        self.users = users
        self.failed_batches = 0
        self.failed_entries = 0

    async def insert_logs(self, entries: Sequence[AssetLogCreate]) -> bool:
        if not entries:
            return True

        now = datetime.now(timezone.utc)
        rows = [_to_row(e, now) for e in entries]

        try:
            await self.repo.insert_many(rows)
        except Exception:
            self.failed_batches += 1
            self.failed_entries += len(rows)
            logger.exception(
                "asset log insert failed (%d entries, assets=%s)",
                len(rows),
                sorted({r["asset_id"] for r in rows}),
                extra={
                    "asset_log_failed_batches": self.failed_batches,
                    "asset_log_failed_entries": self.failed_entries,
                },
            )
            return False

        logger.debug("asset log insert: %d entries", len(rows))
        return True

    async def _load(self, asset_id: str):
        logs = [AssetLog.model_validate(r) for r in await self.repo.list_for_asset(asset_id)]
        if self.users is None:
            return logs, None
        names = await self.users.names_by_ids(_user_ids(logs))
        return logs, name_resolver(names)

    async def list_history(
        self,
        asset_id: str,
        resolve_user_name: Optional[UserNameResolver] = None,
    ) -> List[HistoryItem]:
        logs, resolver = await self._load(asset_id)
        resolver = resolve_user_name or resolver
        return [classify(log, resolver) for log in logs]

    async def list_logs(
        self,
        asset_id: str,
        resolve_user_name: Optional[UserNameResolver] = None,
    ) -> List[AssetLogOut]:
        logs, resolver = await self._load(asset_id)
        resolver = resolve_user_name or resolver
        return [
            AssetLogOut(**log.model_dump(), message=describe(log, resolver))
            for log in logs
        ]
