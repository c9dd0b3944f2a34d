from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

from app.core.config import get_settings
from app.core.enums import SystemLogAction, TicketStatus
from app.core.logging import get_logger
from app.models.common import parse_oid
from app.models.system_log import SystemLogCreate
from app.services.sla import (
    annotate_breaches,
    build_resolution_hours_map,
    is_ticket_breached,
    normalize_priority,
)
from app.services.sla_service import SlaPolicyService
from app.services.system_log_service import SystemLogService
from app.utils.mongo import serialize_mongo

logger = get_logger(__name__)

# fields whose changes get their own activity entry
_LOGGED_FIELDS = ("status", "due_at", "assigned_to")


def _out(row: dict) -> dict:
    row = serialize_mongo(row)
    row["id"] = row.pop("_id", row.get("id"))
    return row


def _same(a, b) -> bool:
    # stored and incoming datetimes compare by their ISO text
    return serialize_mongo(a) == serialize_mongo(b)


class TicketService:
    def __init__(
        self,
        tickets_col,
        policies: SlaPolicyService,
        system_logs: Optional[SystemLogService] = None,
    ):
        self.tickets = tickets_col
        self.policies = policies
        self.system_logs = system_logs

    async def _hours_map(self) -> Dict[str, float]:
        return build_resolution_hours_map(await self.policies.list_raw())

    # ------------------------------------------------------------------
    # Reads
    # ------------------------------------------------------------------
    async def list_tickets(
        self,
        status: Optional[str] = None,
        priority: Optional[str] = None,
        now: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """
        Newest first, at most `tickets_page_limit` rows, each with `sla_breached`.
        Status and priority are free-form in the store, so both filters
        compare normalized values and run before the page cap.
        """
        wanted_status = TicketStatus.normalize(status) if status and status != "all" else None
        wanted_priority = normalize_priority(priority) if priority and priority != "all" else None

        limit = get_settings().tickets_page_limit

        rows: List[Dict[str, Any]] = []
        async for row in self.tickets.find({}).sort("created_at", -1):
            if wanted_status and TicketStatus.normalize(row.get("status")) != wanted_status:
                continue
            if wanted_priority and normalize_priority(row.get("priority")) != wanted_priority:
                continue

            rows.append(row)
            if len(rows) >= limit:
                break

        # evaluate before serializing: datetimes are compared as datetimes
        annotated = annotate_breaches(rows, await self.policies.list_raw(), now)
        return [_out(row) for row in annotated]

    async def summary(self, now: Optional[datetime] = None) -> Dict[str, int]:
        # whole collection, no page cap
        hours_map = await self._hours_map()
        current = now or datetime.now(timezone.utc)

        counts = {s.value: 0 for s in TicketStatus}
        total = 0
        breached = 0
        projection = {"status": 1, "priority": 1, "created_at": 1, "due_at": 1}
        async for row in self.tickets.find({}, projection):
            total += 1
            counts[TicketStatus.normalize(row.get("status")).value] += 1
            if is_ticket_breached(row, hours_map, current):
                breached += 1

        return {
            "total": total,
            **counts,
            "sla_breached": breached,
        }

    # ------------------------------------------------------------------
    # Writes (each one leaves a row in the system activity log)
    # ------------------------------------------------------------------
    async def _log(self, entries: List[SystemLogCreate]) -> None:
        if self.system_logs is not None:
            await self.system_logs.log_many(entries)

    async def create_ticket(self, payload: Dict[str, Any], user_id: Optional[str]) -> dict:
        now = datetime.now(timezone.utc)
        doc = {
            **payload,
            "status": payload.get("status") or TicketStatus.open.value,
            "created_by": user_id,
            "created_at": now,
            "updated_at": now,
        }
        res = await self.tickets.insert_one(doc)
        ticket_id = str(res.inserted_id)
        logger.info("ticket created: %s", ticket_id)

        await self._log([
            SystemLogCreate(
                action=SystemLogAction.ticket_created.value,
                user_id=user_id,
                details={
                    "ticket_id": ticket_id,
                    "title": doc.get("title"),
                    "priority": doc.get("priority"),
                },
            )
        ])

        doc["_id"] = res.inserted_id
        return _out(doc)

    async def update_ticket(
        self,
        ticket_id: str,
        updates: Dict[str, Any],
        user_id: Optional[str],
        source: Optional[str] = None,
    ) -> dict:
        oid = parse_oid(ticket_id, "ticket")
        before = await self.tickets.find_one({"_id": oid})
        if not before:
            raise LookupError("Ticket not found")

        if updates:
            res = await self.tickets.update_one(
                {"_id": oid},
                {"$set": {**updates, "updated_at": datetime.now(timezone.utc)}},
            )
            if res.matched_count != 1:
                raise LookupError("Ticket not found")

        entries = _update_entries(ticket_id, before, updates, user_id, source)
        await self._log(entries)

        return _out(await self.tickets.find_one({"_id": oid}))


def _update_entries(
    ticket_id: str,
    before: Dict[str, Any],
    updates: Dict[str, Any],
    user_id: Optional[str],
    source: Optional[str],
) -> List[SystemLogCreate]:
    def entry(action: SystemLogAction, **details) -> SystemLogCreate:
        return SystemLogCreate(
            action=action.value,
            user_id=user_id,
            details={"ticket_id": ticket_id, **details},
        )

    changed = [k for k, v in updates.items() if not _same(before.get(k), v)]
    entries: List[SystemLogCreate] = []

    if "status" in changed:
        entries.append(entry(
            SystemLogAction.ticket_status_changed,
            **{"from": before.get("status"), "to": updates["status"]},
        ))

    if "due_at" in changed:
        entries.append(entry(
            SystemLogAction.ticket_due_date_changed,
            **{"from": before.get("due_at"), "to": updates["due_at"]},
        ))

    if "assigned_to" in changed:
        if updates["assigned_to"]:
            entries.append(entry(
                SystemLogAction.ticket_assigned,
                **{"from": before.get("assigned_to"), "to": updates["assigned_to"]},
            ))
        else:
            entries.append(entry(
                SystemLogAction.ticket_unassigned,
                **{"from": before.get("assigned_to")},
            ))

    others = [k for k in changed if k not in _LOGGED_FIELDS]
    if others:
        entries.append(entry(SystemLogAction.ticket_updated, source=source, fields=others))

    return entries
