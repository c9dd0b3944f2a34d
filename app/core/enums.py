from __future__ import annotations

import re
from enum import Enum
from typing import Optional


class TicketStatus(str, Enum):
    open = "open"
    in_progress = "in_progress"
    closed = "closed"

    @classmethod
    def normalize(cls, value: Optional[str]) -> "TicketStatus":
        # "In Progress" / "in progress" / "IN_PROGRESS" all land on in_progress,
        # anything unknown is shown as open
        key = re.sub(r"\s+", "_", (value or "").strip().lower())
        if key == cls.in_progress.value:
            return cls.in_progress
        if key == cls.closed.value:
            return cls.closed
        return cls.open


class TicketPriority(str, Enum):
    low = "low"
    medium = "medium"
    high = "high"
    critical = "critical"

    @classmethod
    def normalize(cls, value: Optional[str]) -> "TicketPriority":
        key = (value or "").strip().lower()
        for member in (cls.critical, cls.high, cls.medium):
            if key == member.value:
                return member
        return cls.low


class AssetStatus(str, Enum):
    available = "Available"
    assigned = "Assigned"


class AssetLogAction(str, Enum):
    create = "create"
    update = "update"
    assign = "assign"
    unassign = "unassign"
    status_change = "status_change"
    custom_field_update = "custom_field_update"

    @classmethod
    def parse(cls, value) -> Optional["AssetLogAction"]:
        """Return the matching action, or None for anything outside the enum."""
        if isinstance(value, cls):
            return value
        try:
            return cls(value)
        except ValueError:
            return None


class SystemLogAction(str, Enum):
    # stored as plain text; the log keeps any action string a caller writes
    ticket_created = "ticket.created"
    ticket_status_changed = "ticket.status_changed"
    ticket_assigned = "ticket.assigned"
    ticket_unassigned = "ticket.unassigned"
    ticket_due_date_changed = "ticket.due_date_changed"
    ticket_updated = "ticket.updated"
