from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Iterable, List, Mapping, Optional

from app.core.enums import TicketStatus
from app.models.common import as_datetime


# -------------------------
# Helpers
# -------------------------

def _get(row: Any, key: str):
    # rows come either as raw Mongo dicts or as pydantic models
    if isinstance(row, Mapping):
        return row.get(key)
    return getattr(row, key, None)


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _hours(value) -> Optional[float]:
    if value is None:
        return None
    try:
        hours = float(value)
    except (TypeError, ValueError):
        return None
    if not math.isfinite(hours) or hours <= 0:
        return None
    return hours


def normalize_priority(value: Optional[str]) -> str:
    return (value or "").strip().lower()


# -------------------------
# SLA rules
# -------------------------

def build_resolution_hours_map(policies: Iterable[Any]) -> Dict[str, float]:
    """
    priority -> resolution hours.
    Entries without a priority or without a finite positive hour value
    are left out; the last policy wins when two normalize to the same key.
    """
    out: Dict[str, float] = {}
    for policy in policies or []:
        key = normalize_priority(_get(policy, "priority"))
        if not key:
            continue
        hours = _hours(_get(policy, "resolution_time_hours"))
        if hours is None:
            continue
        out[key] = hours
    return out


def is_ticket_breached(
    ticket: Any,
    resolution_hours_by_priority: Mapping[str, float],
    now: Optional[datetime] = None,
) -> bool:
    """
    A ticket is breached when it is not closed and either its due_at has
    passed, or (without a usable due_at) created_at + policy hours has.

    An unparseable created_at or a priority without a policy never breaches.
    """
    if TicketStatus.normalize(_get(ticket, "status")) == TicketStatus.closed:
        return False

    current = as_datetime(now) if now is not None else _now()
    if current is None:
        current = _now()

    # due_at wins when present
    due_at = as_datetime(_get(ticket, "due_at"))
    if due_at is not None:
        return due_at < current

    created_at = as_datetime(_get(ticket, "created_at"))
    priority = _get(ticket, "priority")
    if created_at is None or not priority:
        return False

    hours = resolution_hours_by_priority.get(normalize_priority(priority))
    if not hours:
        return False

    return current > created_at + timedelta(hours=hours)


def annotate_breaches(
    tickets: Iterable[Any],
    policies: Iterable[Any],
    now: Optional[datetime] = None,
) -> List[Dict[str, Any]]:
    hours_map = build_resolution_hours_map(policies)
    current = now or _now()

    out: List[Dict[str, Any]] = []
    for ticket in tickets:
        row = dict(ticket) if isinstance(ticket, Mapping) else ticket.model_dump()
        row["sla_breached"] = is_ticket_breached(ticket, hours_map, current)
        out.append(row)
    return out
