# recipeshare/store/mongo.py
# MongoDB stores (motor)
# Engagement writes are single update_one calls guarded in the filter
# (document-level atomicity in mongo), never find → mutate → save.

from __future__ import annotations
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from bson import ObjectId
from motor.motor_asyncio import AsyncIOMotorDatabase
from pymongo import ReturnDocument
from pymongo.errors import DuplicateKeyError

from recipeshare.core.errors import UsernameTaken
from recipeshare.services.filters import RecipeQuery
from recipeshare.store.base import Doc, RecipeStore, UserStore

NEWEST_FIRST = [("createdAt", -1), ("_id", -1)]

def _oid(v: Any) -> Optional[ObjectId]:
    if isinstance(v, ObjectId):
        return v
    return ObjectId(v) if ObjectId.is_valid(v) else None

def _ref(v: Any) -> Any:
    # refs we wrote ourselves are ObjectId; keep anything else untouched
    return _oid(v) or v

def _plain_recipe(doc: Doc) -> Doc:
    doc["_id"] = str(doc["_id"])
    doc["author"] = str(doc.get("author"))
    for r in doc.get("ratings") or []:
        r["user"] = str(r["user"])
    for c in doc.get("comments") or []:
        c["user"] = str(c["user"])
    doc.setdefault("ratings", [])
    doc.setdefault("comments", [])
    return doc

def _plain_user(doc: Doc) -> Doc:
    doc["_id"] = str(doc["_id"])
    doc["favoriteRecipes"] = [str(r) for r in (doc.get("favoriteRecipes") or [])]
    return doc

def popular_pipeline(limit: int) -> List[Dict[str, Any]]:
    # average rounded half-up to one decimal in integer math:
    #   floor((20*sum + n) / (2n)) / 10
    return [
        {"$addFields": {
            "_n": {"$size": {"$ifNull": ["$ratings", []]}},
            "_sum": {"$sum": "$ratings.rating"},
        }},
        {"$addFields": {
            "_avg": {"$cond": [
                {"$gt": ["$_n", 0]},
                {"$divide": [
                    {"$floor": {"$divide": [
                        {"$add": [{"$multiply": ["$_sum", 20]}, "$_n"]},
                        {"$multiply": ["$_n", 2]},
                    ]}},
                    10,
                ]},
                0,
            ]},
        }},
        {"$sort": {"_avg": -1, "createdAt": -1, "_id": -1}},
        {"$limit": int(limit)},
        {"$project": {"_n": 0, "_sum": 0, "_avg": 0}},
    ]

class MongoRecipeStore(RecipeStore):
    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self.col = db["recipes"]

    async def insert(self, doc: Doc) -> str:
        payload = dict(doc)
        payload["author"] = _ref(doc["author"])
        payload["ratings"] = [{**r, "user": _ref(r["user"])} for r in doc.get("ratings") or []]
        payload["comments"] = [{**c, "user": _ref(c["user"])} for c in doc.get("comments") or []]
        res = await self.col.insert_one(payload)
        return str(res.inserted_id)

    async def get(self, recipe_id: str) -> Optional[Doc]:
        oid = _oid(recipe_id)
        if oid is None:
            return None
        doc = await self.col.find_one({"_id": oid})
        return _plain_recipe(doc) if doc else None

    async def get_many(self, recipe_ids: Iterable[str]) -> List[Doc]:
        order = [o for o in (_oid(r) for r in recipe_ids) if o is not None]
        if not order:
            return []
        docs = await self.col.find({"_id": {"$in": order}}).to_list(length=None)
        by_id = {d["_id"]: d for d in docs}
        return [_plain_recipe(by_id[o]) for o in order if o in by_id]

    async def exists(self, recipe_id: str) -> bool:
        oid = _oid(recipe_id)
        if oid is None:
            return False
        return await self.col.count_documents({"_id": oid}, limit=1) > 0

    async def find(self, query: RecipeQuery, *, skip: int = 0, limit: Optional[int] = None) -> List[Doc]:
        cur = self.col.find(query.to_mongo()).sort(NEWEST_FIRST).skip(skip)
        if limit is not None:
            cur = cur.limit(limit)
        docs = await cur.to_list(length=limit)
        return [_plain_recipe(d) for d in docs]

    async def count(self, query: RecipeQuery) -> int:
        return await self.col.count_documents(query.to_mongo())

    async def top_rated(self, limit: int) -> List[Doc]:
        docs = await self.col.aggregate(popular_pipeline(limit)).to_list(length=limit)
        return [_plain_recipe(d) for d in docs]

    # ------------------------------
    # engagement primitives
    # ------------------------------
    async def set_rating(self, recipe_id: str, user_id: str, rating: int, now: datetime) -> bool:
        oid = _oid(recipe_id)
        if oid is None:
            return False
        res = await self.col.update_one(
            {"_id": oid, "ratings.user": _ref(user_id)},
            {"$set": {"ratings.$.rating": rating, "updatedAt": now}},
        )
        return res.matched_count == 1

    async def push_rating(self, recipe_id: str, entry: Doc, now: datetime) -> bool:
        oid = _oid(recipe_id)
        if oid is None:
            return False
        user = _ref(entry["user"])
        res = await self.col.update_one(
            {"_id": oid, "ratings.user": {"$ne": user}},
            {"$push": {"ratings": {**entry, "user": user}}, "$set": {"updatedAt": now}},
        )
        return res.matched_count == 1

    async def push_comment(self, recipe_id: str, entry: Doc, now: datetime) -> bool:
        oid = _oid(recipe_id)
        if oid is None:
            return False
        res = await self.col.update_one(
            {"_id": oid},
            {"$push": {"comments": {**entry, "user": _ref(entry["user"])}}, "$set": {"updatedAt": now}},
        )
        return res.matched_count == 1


class MongoUserStore(UserStore):
    def __init__(self, db: AsyncIOMotorDatabase) -> None:
        self.col = db["users"]

    async def insert(self, doc: Doc) -> str:
        payload = dict(doc)
        payload["favoriteRecipes"] = [_ref(r) for r in doc.get("favoriteRecipes") or []]
        try:
            res = await self.col.insert_one(payload)
        except DuplicateKeyError:
            # unique index on username (db/indexes.py)
            raise UsernameTaken()
        return str(res.inserted_id)

    async def get(self, user_id: str) -> Optional[Doc]:
        oid = _oid(user_id)
        if oid is None:
            return None
        doc = await self.col.find_one({"_id": oid})
        return _plain_user(doc) if doc else None

    async def get_by_username(self, username: str) -> Optional[Doc]:
        doc = await self.col.find_one({"username": username})
        return _plain_user(doc) if doc else None

    async def get_many(self, user_ids: Iterable[str]) -> Dict[str, Doc]:
        oids = list({o for o in (_oid(u) for u in user_ids) if o is not None})
        if not oids:
            return {}
        docs = await self.col.find({"_id": {"$in": oids}}).to_list(length=None)
        return {d["_id"]: d for d in (_plain_user(x) for x in docs)}

    async def add_favorite(self, user_id: str, recipe_id: str) -> bool:
        oid = _oid(user_id)
        if oid is None:
            return False
        rid = _ref(recipe_id)
        res = await self.col.update_one(
            {"_id": oid, "favoriteRecipes": {"$ne": rid}},
            {"$push": {"favoriteRecipes": rid}},
        )
        return res.modified_count == 1

    async def remove_favorite(self, user_id: str, recipe_id: str) -> bool:
        oid = _oid(user_id)
        if oid is None:
            return False
        res = await self.col.update_one({"_id": oid}, {"$pull": {"favoriteRecipes": _ref(recipe_id)}})
        return res.matched_count == 1

    async def update_profile(self, user_id: str, fields: Doc) -> Optional[Doc]:
        oid = _oid(user_id)
        if oid is None:
            return None
        try:
            doc = await self.col.find_one_and_update(
                {"_id": oid}, {"$set": fields}, return_document=ReturnDocument.AFTER
            )
        except DuplicateKeyError:
            raise UsernameTaken()
        return _plain_user(doc) if doc else None
