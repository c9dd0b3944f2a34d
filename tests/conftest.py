from __future__ import annotations

import copy
import re
from datetime import datetime
from types import SimpleNamespace
from typing import Any, Dict, List, Optional

import pytest
from bson import ObjectId


# ---------------------------------------------------------------------------
# In-memory stand-in for the motor collections the services talk to.
# Supports the subset of the query/update language the code uses.
# ---------------------------------------------------------------------------


def _lookup(doc: Dict[str, Any], key: str) -> Any:
    value: Any = doc
    for part in key.split("."):
        if not isinstance(value, dict):
            return None
        value = value.get(part)
    return value


def _matches(doc: Dict[str, Any], query: Optional[Dict[str, Any]]) -> bool:
    for key, cond in (query or {}).items():
        if key == "$or":
            if not any(_matches(doc, q) for q in cond):
                return False
            continue
        value = _lookup(doc, key)
        if isinstance(cond, dict) and "$in" in cond:
            if value not in cond["$in"]:
                return False
        elif isinstance(cond, dict) and "$ne" in cond:
            if value == cond["$ne"]:
                return False
        elif isinstance(cond, dict) and "$regex" in cond:
            flags = re.IGNORECASE if "i" in cond.get("$options", "") else 0
            if not isinstance(value, str) or not re.search(cond["$regex"], value, flags):
                return False
        elif value != cond:
            return False
    return True


class FakeCursor:
    def __init__(self, docs: List[Dict[str, Any]]):
        self._docs = docs

    def sort(self, key: str, direction: int = 1) -> "FakeCursor":
        present = [d for d in self._docs if d.get(key) is not None]
        missing = [d for d in self._docs if d.get(key) is None]
        # dates sort after other types, as in BSON order
        present.sort(key=lambda d: (isinstance(d[key], datetime), d[key]), reverse=direction < 0)
        self._docs = present + missing
        return self

    def skip(self, n: int) -> "FakeCursor":
        self._docs = self._docs[n:]
        return self

    def limit(self, n: int) -> "FakeCursor":
        self._docs = self._docs[:n]
        return self

    async def to_list(self, length: Optional[int] = None) -> List[Dict[str, Any]]:
        return self._docs if length is None else self._docs[:length]

    def __aiter__(self):
        self._iter = iter(self._docs)
        return self

    async def __anext__(self):
        try:
            return next(self._iter)
        except StopIteration:
            raise StopAsyncIteration


class FakeCollection:
    def __init__(self, docs: Optional[List[Dict[str, Any]]] = None):
        self.docs: List[Dict[str, Any]] = []
        self.insert_many_calls = 0
        for d in docs or []:
            self._store(d)

    def _store(self, doc: Dict[str, Any]) -> ObjectId:
        doc = copy.deepcopy(doc)
        doc.setdefault("_id", ObjectId())
        self.docs.append(doc)
        return doc["_id"]

    async def insert_one(self, doc):
        return SimpleNamespace(inserted_id=self._store(doc))

    async def insert_many(self, docs):
        self.insert_many_calls += 1
        return SimpleNamespace(inserted_ids=[self._store(d) for d in docs])

    def find(self, query=None, projection=None):
        return FakeCursor([copy.deepcopy(d) for d in self.docs if _matches(d, query)])

    async def find_one(self, query=None):
        for d in self.docs:
            if _matches(d, query):
                return copy.deepcopy(d)
        return None

    async def count_documents(self, query=None):
        return len([d for d in self.docs if _matches(d, query)])

    async def update_one(self, query, update, upsert=False):
        for d in self.docs:
            if _matches(d, query):
                d.update(copy.deepcopy(update.get("$set", {})))
                return SimpleNamespace(matched_count=1, modified_count=1, upserted_id=None)

        if not upsert:
            return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=None)

        doc = {k: v for k, v in query.items() if not isinstance(v, dict)}
        doc.update(update.get("$setOnInsert", {}))
        doc.update(update.get("$set", {}))
        return SimpleNamespace(matched_count=0, modified_count=0, upserted_id=self._store(doc))


class FailingCollection(FakeCollection):
    async def insert_many(self, docs):
        self.insert_many_calls += 1
        raise ConnectionError("asset_logs unavailable")


@pytest.fixture
def fake_collection():
    return FakeCollection


@pytest.fixture
def failing_collection():
    return FailingCollection
