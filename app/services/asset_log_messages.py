"""
Human-readable text for asset history rows.

describe() renders the one-line message used in log listings,
classify() renders the title/description pair used by the history timeline.
Both are pure and never raise on partially filled rows.
"""

from __future__ import annotations

from typing import Any, Callable, Mapping, Optional

from pydantic import ValidationError

from app.core.enums import AssetLogAction
from app.core.logging import get_logger
from app.models.asset_log import AssetLog
from app.schemas.history import HistoryItem

logger = get_logger(__name__)

UserNameResolver = Callable[[str], Optional[str]]

EMPTY = "—"        # em dash
ARROW = "→"
SYSTEM_ACTOR = "System"
UNKNOWN_USER = "User"
UNASSIGNED = "Unassigned"


def _as_log(log: Any) -> AssetLog:
    if isinstance(log, AssetLog):
        return log
    try:
        if isinstance(log, Mapping):
            return AssetLog.model_validate(dict(log))
        return AssetLog.model_validate(log, from_attributes=True)
    except ValidationError:
        # unreadable row: render the generic message instead of failing the listing
        logger.warning("unreadable asset log row: %r", log)
        return AssetLog()


def resolve_name(user_id: Optional[str], resolve_user_name: Optional[UserNameResolver]) -> Optional[str]:
    if not user_id or resolve_user_name is None:
        return None
    try:
        name = resolve_user_name(user_id)
    except Exception:
        logger.warning("user name lookup failed for %s", user_id, exc_info=True)
        return None
    return name or None


def actor_name(log: Any, resolve_user_name: Optional[UserNameResolver] = None) -> str:
    log = _as_log(log)
    if not log.performed_by:
        return SYSTEM_ACTOR
    return resolve_name(log.performed_by, resolve_user_name) or UNKNOWN_USER


def _or_empty(value: Optional[str]) -> str:
    return EMPTY if value is None else value


def _field(log: AssetLog) -> str:
    return log.field or "a field"


def _assignee(user_id: Optional[str], resolve_user_name: Optional[UserNameResolver]) -> str:
    if user_id is None:
        return UNASSIGNED
    return resolve_name(user_id, resolve_user_name) or UNKNOWN_USER


# -------------------------
# One-line message
# -------------------------

def describe(log: Any, resolve_user_name: Optional[UserNameResolver] = None) -> str:
    log = _as_log(log)
    actor = actor_name(log, resolve_user_name)
    action = AssetLogAction.parse(log.action)

    if action is AssetLogAction.create:
        return f"{actor} created the asset"

    if action is AssetLogAction.assign:
        target = resolve_name(log.new_value, resolve_user_name) or "a user"
        return f"{actor} assigned the asset to {target}"

    if action is AssetLogAction.unassign:
        return f"{actor} unassigned the asset"

    if action is AssetLogAction.status_change:
        return (
            f'{actor} changed status from "{_or_empty(log.old_value)}" '
            f'to "{_or_empty(log.new_value)}"'
        )

    if action is AssetLogAction.update:
        return (
            f'{actor} updated {_field(log)}: "{_or_empty(log.old_value)}" '
            f'{ARROW} "{_or_empty(log.new_value)}"'
        )

    if action is AssetLogAction.custom_field_update:
        return f"{actor} updated {_field(log)}"

    # unknown kinds (action is None)
    return f"{actor} updated the asset"


# -------------------------
# Timeline item
# -------------------------

def classify(log: Any, resolve_user_name: Optional[UserNameResolver] = None) -> HistoryItem:
    log = _as_log(log)
    actor = actor_name(log, resolve_user_name)
    action = AssetLogAction.parse(log.action)

    base = {
        "id": log.id,
        "action": action,
        "actor": actor,
        "created_at": log.created_at,
    }

    if action is AssetLogAction.create:
        return HistoryItem(**base, title=f"{actor} created the asset")

    is_status = action is AssetLogAction.status_change or (
        action is AssetLogAction.update and log.field == "status"
    )
    if is_status:
        return HistoryItem(
            **base,
            title=f"{actor} changed status",
            description=f"{_or_empty(log.old_value)} {ARROW} {_or_empty(log.new_value)}",
        )

    is_assignment = action in (AssetLogAction.assign, AssetLogAction.unassign) or (
        action is AssetLogAction.update and log.field == "assigned_to"
    )
    if is_assignment:
        old = _assignee(log.old_value, resolve_user_name)
        new = _assignee(log.new_value, resolve_user_name)
        return HistoryItem(
            **base,
            title=f"{actor} changed assignment",
            description=f"{old} {ARROW} {new}",
        )

    if action is AssetLogAction.update:
        return HistoryItem(
            **base,
            title=f"{actor} updated the asset",
            description=(
                f'{_field(log)}: "{_or_empty(log.old_value)}" '
                f'{ARROW} "{_or_empty(log.new_value)}"'
            ),
        )

    if action is AssetLogAction.custom_field_update:
        return HistoryItem(**base, title=f"{actor} updated a custom field")

    return HistoryItem(**base, title=f"{actor} updated the asset")
