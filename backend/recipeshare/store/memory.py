# recipeshare/store/memory.py
# In-process stores (STORE_BACKEND=memory, tests)
# - one asyncio.Lock per recipe/user is the serialization point for writes
# - reads hand out deep copies; nothing outside the store holds a live record

from __future__ import annotations
import asyncio
import copy
from collections import defaultdict
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from bson import ObjectId

from recipeshare.core.errors import UsernameTaken
from recipeshare.services.aggregate import average_rating
from recipeshare.services.filters import RecipeQuery
from recipeshare.store.base import Doc, RecipeStore, UserStore

def _newest_first(doc: Doc):
    return (doc["createdAt"], doc["_id"])

def _popular_first(doc: Doc):
    return (average_rating(doc.get("ratings")), doc["createdAt"], doc["_id"])

class MemoryRecipeStore(RecipeStore):
    def __init__(self) -> None:
        self._docs: Dict[str, Doc] = {}
        self._locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    async def insert(self, doc: Doc) -> str:
        rid = str(ObjectId())
        stored = copy.deepcopy(doc)
        stored["_id"] = rid
        stored.setdefault("ratings", [])
        stored.setdefault("comments", [])
        self._docs[rid] = stored
        return rid

    async def get(self, recipe_id: str) -> Optional[Doc]:
        doc = self._docs.get(recipe_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def get_many(self, recipe_ids: Iterable[str]) -> List[Doc]:
        return [copy.deepcopy(self._docs[r]) for r in recipe_ids if r in self._docs]

    async def exists(self, recipe_id: str) -> bool:
        return recipe_id in self._docs

    async def find(self, query: RecipeQuery, *, skip: int = 0, limit: Optional[int] = None) -> List[Doc]:
        hits = sorted((d for d in self._docs.values() if query.matches(d)), key=_newest_first, reverse=True)
        end = None if limit is None else skip + limit
        return [copy.deepcopy(d) for d in hits[skip:end]]

    async def count(self, query: RecipeQuery) -> int:
        return sum(1 for d in self._docs.values() if query.matches(d))

    async def top_rated(self, limit: int) -> List[Doc]:
        ranked = sorted(self._docs.values(), key=_popular_first, reverse=True)
        return [copy.deepcopy(d) for d in ranked[:limit]]

    # ------------------------------
    # engagement primitives
    # ------------------------------
    async def set_rating(self, recipe_id: str, user_id: str, rating: int, now: datetime) -> bool:
        if recipe_id not in self._docs:
            return False
        async with self._locks[recipe_id]:
            doc = self._docs[recipe_id]
            for entry in doc["ratings"]:
                if entry["user"] == user_id:
                    entry["rating"] = rating
                    doc["updatedAt"] = now
                    return True
            return False

    async def push_rating(self, recipe_id: str, entry: Doc, now: datetime) -> bool:
        if recipe_id not in self._docs:
            return False
        async with self._locks[recipe_id]:
            doc = self._docs[recipe_id]
            if any(r["user"] == entry["user"] for r in doc["ratings"]):
                return False
            doc["ratings"].append(copy.deepcopy(entry))
            doc["updatedAt"] = now
            return True

    async def push_comment(self, recipe_id: str, entry: Doc, now: datetime) -> bool:
        if recipe_id not in self._docs:
            return False
        async with self._locks[recipe_id]:
            doc = self._docs[recipe_id]
            doc["comments"].append(copy.deepcopy(entry))
            doc["updatedAt"] = now
            return True


class MemoryUserStore(UserStore):
    def __init__(self) -> None:
        self._docs: Dict[str, Doc] = {}
        self._locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        # guards username uniqueness across records
        self._names = asyncio.Lock()

    def _owner_of(self, username: str) -> Optional[str]:
        for uid, doc in self._docs.items():
            if doc.get("username") == username:
                return uid
        return None

    async def insert(self, doc: Doc) -> str:
        async with self._names:
            if self._owner_of(doc.get("username")) is not None:
                raise UsernameTaken()
            uid = str(ObjectId())
            stored = copy.deepcopy(doc)
            stored["_id"] = uid
            stored.setdefault("favoriteRecipes", [])
            self._docs[uid] = stored
            return uid

    async def get(self, user_id: str) -> Optional[Doc]:
        doc = self._docs.get(user_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def get_by_username(self, username: str) -> Optional[Doc]:
        uid = self._owner_of(username)
        return copy.deepcopy(self._docs[uid]) if uid is not None else None

    async def get_many(self, user_ids: Iterable[str]) -> Dict[str, Doc]:
        return {u: copy.deepcopy(self._docs[u]) for u in set(user_ids) if u in self._docs}

    async def add_favorite(self, user_id: str, recipe_id: str) -> bool:
        if user_id not in self._docs:
            return False
        async with self._locks[user_id]:
            favs = self._docs[user_id]["favoriteRecipes"]
            if recipe_id in favs:
                return False
            favs.append(recipe_id)
            return True

    async def remove_favorite(self, user_id: str, recipe_id: str) -> bool:
        if user_id not in self._docs:
            return False
        async with self._locks[user_id]:
            doc = self._docs[user_id]
            doc["favoriteRecipes"] = [r for r in doc["favoriteRecipes"] if r != recipe_id]
            return True

    async def update_profile(self, user_id: str, fields: Doc) -> Optional[Doc]:
        if user_id not in self._docs:
            return None
        async with self._names, self._locks[user_id]:
            owner = self._owner_of(fields["username"]) if "username" in fields else None
            if owner not in (None, user_id):
                raise UsernameTaken()
            self._docs[user_id].update(copy.deepcopy(fields))
            return copy.deepcopy(self._docs[user_id])

