from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, List, Optional, Sequence, Union

from app.core.enums import SystemLogAction
from app.core.logging import get_logger
from app.models.common import stringify
from app.models.system_log import SystemLog, SystemLogCreate
from app.repositories.system_log_repository import SystemLogRepository
from app.repositories.user_repository import UserRepository, name_resolver
from app.schemas.system_log import SystemLogOut, SystemLogPage
from app.services.system_log_messages import map_log_to_text
from app.utils.mongo import serialize_mongo

logger = get_logger(__name__)


def _to_row(entry: SystemLogCreate, now: datetime) -> Dict[str, Any]:
    return {
        "action": entry.action,
        "user_id": entry.user_id or None,
        # ObjectIds / datetimes in details are kept as JSON text
        "details": serialize_mongo(entry.details) if entry.details is not None else None,
        "created_at": now,
    }


def _user_ids(logs: Sequence[SystemLog]) -> List[str]:
    ids = []
    for log in logs:
        ids.append(log.user_id)
        if log.action == SystemLogAction.ticket_assigned.value and log.details:
            ids.append(stringify(log.details.get("to")))
    return [x for x in ids if x]


class SystemLogService:
    """
    System-wide activity log (ticket events and similar).

    Writes are advisory like the asset trail: a failed insert is logged
    and counted, never raised into the request that triggered it.
    """

    def __init__(self, repo: SystemLogRepository, users: Optional[UserRepository] = None):
        self.repo = repo
        self.users = users
        self.failed_batches = 0
        self.failed_entries = 0

    async def log_many(self, entries: Sequence[SystemLogCreate]) -> bool:
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
                "system log insert failed (%d entries, actions=%s)",
                len(rows),
                sorted({r["action"] for r in rows}),
            )
            return False

        return True

    async def log_system_action(
        self,
        action: Union[str, Enum],
        details: Optional[Dict[str, Any]] = None,
        user_id: Optional[str] = None,
    ) -> bool:
        if isinstance(action, Enum):
            action = action.value
        return await self.log_many(
            [SystemLogCreate(action=action, details=details, user_id=user_id)]
        )

    async def list_logs(self, page: int = 1, limit: int = 20, q: Optional[str] = None) -> SystemLogPage:
        page = max(page, 1)
        rows, total = await self.repo.list_page((page - 1) * limit, limit, q)
        logs = [SystemLog.model_validate(r) for r in rows]

        names: Dict[str, str] = {}
        if self.users is not None:
            names = await self.users.names_by_ids(_user_ids(logs))
        resolver = name_resolver(names)

        data = []
        for log in logs:
            text = map_log_to_text(log.action, log.details, resolver)
            data.append(
                SystemLogOut(
                    **log.model_dump(),
                    user_name=names.get(log.user_id) if log.user_id else None,
                    title=text.title,
                    description=text.description,
                )
            )
        return SystemLogPage(data=data, count=total)
