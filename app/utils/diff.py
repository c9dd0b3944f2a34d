from typing import Any, List, Mapping, Optional, Sequence

from app.models.asset_log import FieldDiff
from app.models.common import stringify


# fields whose changes end up in the asset history
TRACKED_ASSET_FIELDS = (
    "name",
    "asset_code",
    "status",
    "location",
    "assigned_to",
    "category_id",
    "asset_type_id",
)

# fields the asset edit form may patch
EDITABLE_ASSET_FIELDS = (
    "name",
    "asset_code",
    "serial_number",
    "location",
    "category_id",
    "asset_type_id",
    "description",
)


def diff_asset(
    before: Optional[Mapping[str, Any]],
    after: Optional[Mapping[str, Any]],
    fields: Sequence[str],
) -> List[FieldDiff]:
    """
    Field-level changes between two snapshots, restricted to `fields`
    and reported in that order.

    Values are compared after stringify(), so 1 and "1" are the same value.
    """
    before = before or {}
    after = after or {}

    changes: List[FieldDiff] = []
    for field in fields:
        old_v = stringify(before.get(field))
        new_v = stringify(after.get(field))
        if old_v == new_v:
            continue
        changes.append(FieldDiff(field=field, old_value=old_v, new_value=new_v))
    return changes
