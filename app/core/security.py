# app/core/security.py
from typing import Optional

from fastapi import Request


def get_current_user_id(request: Request) -> Optional[str]:
    """
    Actor id for audit rows.
    Sessions are handled upstream; the caller is forwarded in X-User-Id.
    No header => the change is recorded as a System action.
    """
    user_id = (request.headers.get("X-User-Id") or "").strip()
    return user_id or None
