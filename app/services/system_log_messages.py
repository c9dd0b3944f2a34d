"""
Title/description text for system activity log rows (`logs` collection).
"""

from __future__ import annotations

from typing import Any, Mapping, Optional

from app.core.enums import SystemLogAction
from app.models.common import as_datetime
from app.schemas.system_log import LogText
from app.services.asset_log_messages import ARROW, EMPTY, UserNameResolver, resolve_name


def _or_empty(value: Any) -> str:
    return EMPTY if value is None else str(value)


def format_log_date(value: Any) -> str:
    if value is None or value == "":
        return EMPTY
    parsed = as_datetime(value)
    if parsed is None:
        # shown as stored
        return str(value)
    return parsed.strftime("%d %b %Y %H:%M")


def map_log_to_text(
    action: Optional[str],
    details: Optional[Mapping[str, Any]],
    resolve_user_name: Optional[UserNameResolver] = None,
) -> LogText:
    title = action or EMPTY
    if not isinstance(details, Mapping):
        return LogText(title=title)

    if action == SystemLogAction.ticket_created.value:
        lines = []
        if details.get("title"):
            lines.append(f"Title: {details['title']}")
        if details.get("priority"):
            lines.append(f"Priority: {details['priority']}")
        return LogText(title="Ticket created", description="\n".join(lines) or None)

    if action == SystemLogAction.ticket_status_changed.value:
        return LogText(
            title="Status changed",
            description=(
                f'from "{_or_empty(details.get("from"))}" '
                f'{ARROW} "{_or_empty(details.get("to"))}"'
            ),
        )

    if action == SystemLogAction.ticket_assigned.value:
        to = details.get("to")
        name = resolve_name(str(to), resolve_user_name) if to is not None else None
        return LogText(title="Ticket assigned", description=f"Assigned to {name or _or_empty(to)}")

    if action == SystemLogAction.ticket_unassigned.value:
        return LogText(title="Ticket unassigned")

    if action == SystemLogAction.ticket_due_date_changed.value:
        return LogText(
            title="Due date changed",
            description=(
                f'from "{format_log_date(details.get("from"))}" '
                f'{ARROW} "{format_log_date(details.get("to"))}"'
            ),
        )

    if action == SystemLogAction.ticket_updated.value:
        source = details.get("source")
        return LogText(
            title="Ticket updated",
            description=f"Source: {source}" if source else None,
        )

    return LogText(title=title)
