from typing import Callable, Dict, Iterable, Optional

from bson import ObjectId


class UserRepository:
    def __init__(self, col):
        self.col = col

    async def names_by_ids(self, ids: Iterable[Optional[str]]) -> Dict[str, str]:
        # blanks, duplicates and non-ObjectId strings never reach the query
        wanted = sorted({x for x in ids if x and ObjectId.is_valid(x)})
        if not wanted:
            return {}

        cursor = self.col.find(
            {"_id": {"$in": [ObjectId(x) for x in wanted]}},
            {"name": 1, "full_name": 1},
        )

        names = {}
        async for u in cursor:
            name = u.get("name") or u.get("full_name")
            if name:
                names[str(u["_id"])] = name

        return names


def name_resolver(names: Dict[str, str]) -> Callable[[str], Optional[str]]:
    return names.get
