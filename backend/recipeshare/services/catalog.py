# recipeshare/services/catalog.py
# Recipe/user reads and recipe creation
# - profile fields of authors/raters/commenters are joined from the user store at read time
# - averageRating / totalTime are attached on every read, never persisted

from __future__ import annotations
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence

from recipeshare.core.errors import EmptyIngredientsOrInstructions, RecipeNotFound, UserNotFound
from recipeshare.db.models.recipe import RecipeDoc
from recipeshare.db.models.user import UserDoc
from recipeshare.services.aggregate import average_rating, total_time
from recipeshare.services.filters import RecipeQuery, build_query
from recipeshare.services.search import paginate, popular
from recipeshare.store.base import Doc, RecipeStore, UserStore

log = logging.getLogger(__name__)

LIST_AUTHOR_FIELDS = ("username", "avatar")
DETAIL_AUTHOR_FIELDS = ("username", "avatar", "bio")

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

def user_ref(user_id: str, user: Optional[Mapping[str, Any]], fields: Sequence[str]) -> Dict[str, Any]:
    """{"id": ..., <fields>}; fields are None when the user record is gone."""
    out: Dict[str, Any] = {"id": user_id}
    for f in fields:
        out[f] = user.get(f) if user else None
    return out

def recipe_summary(doc: Mapping[str, Any]) -> Dict[str, Any]:
    return {
        "id": doc["_id"],
        "title": doc.get("title", ""),
        "image": doc.get("image", ""),
        "averageRating": average_rating(doc.get("ratings")),
        "createdAt": doc.get("createdAt"),
    }

def present_recipe(doc: Doc, users: Mapping[str, Doc], *, detail: bool = False) -> Dict[str, Any]:
    author_fields = DETAIL_AUTHOR_FIELDS if detail else LIST_AUTHOR_FIELDS
    rater_fields = ("username",) if detail else ()
    commenter_fields = LIST_AUTHOR_FIELDS if detail else ()

    out = {k: v for k, v in doc.items() if k != "_id"}
    out["id"] = doc["_id"]
    out["author"] = user_ref(doc["author"], users.get(doc["author"]), author_fields)
    out["ratings"] = [
        {**r, "user": user_ref(r["user"], users.get(r["user"]), rater_fields)}
        for r in doc.get("ratings") or []
    ]
    out["comments"] = [
        {**c, "user": user_ref(c["user"], users.get(c["user"]), commenter_fields)}
        for c in doc.get("comments") or []
    ]
    out["averageRating"] = average_rating(doc.get("ratings"))
    out["totalTime"] = total_time(doc)
    return out

def _user_ids(docs: Iterable[Doc], *, detail: bool) -> set[str]:
    ids: set[str] = set()
    for d in docs:
        ids.add(d["author"])
        if detail:
            ids.update(r["user"] for r in d.get("ratings") or [])
            ids.update(c["user"] for c in d.get("comments") or [])
    return ids

class CatalogService:
    def __init__(
        self,
        recipes: RecipeStore,
        users: UserStore,
        *,
        clock: Callable[[], datetime] = utcnow,
    ) -> None:
        self.recipes = recipes
        self.users = users
        self.clock = clock

    async def _present_many(self, docs: List[Doc], *, detail: bool = False) -> List[Dict[str, Any]]:
        users = await self.users.get_many(_user_ids(docs, detail=detail))
        return [present_recipe(d, users, detail=detail) for d in docs]

    # ------------------------------
    # recipes
    # ------------------------------
    async def create_recipe(self, author_id: str, payload: Mapping[str, Any]) -> Dict[str, Any]:
        if not payload.get("ingredients") or not payload.get("instructions"):
            raise EmptyIngredientsOrInstructions()
        if await self.users.get(author_id) is None:
            raise UserNotFound()

        now = self.clock()
        data = dict(payload)
        for key in ("title", "cuisine"):
            if isinstance(data.get(key), str):
                data[key] = data[key].strip()
        doc = RecipeDoc(**data, author=author_id, createdAt=now, updatedAt=now).model_dump()

        rid = await self.recipes.insert(doc)
        log.info("recipe created id=%s author=%s", rid, author_id)
        stored = await self.recipes.get(rid)
        return (await self._present_many([stored]))[0]

    async def get_recipe(self, recipe_id: str) -> Dict[str, Any]:
        doc = await self.recipes.get(recipe_id)
        if doc is None:
            raise RecipeNotFound()
        return (await self._present_many([doc], detail=True))[0]

    async def list_recipes(
        self,
        query: RecipeQuery,
        page: Optional[int] = 1,
        page_size: Optional[int] = None,
    ) -> Dict[str, Any]:
        res = await paginate(self.recipes, query, page, page_size)
        return {"recipes": await self._present_many(res["recipes"]), "pagination": res["pagination"]}

    async def popular_recipes(self) -> List[Dict[str, Any]]:
        return await self._present_many(await popular(self.recipes))

    async def recipes_by_author(self, user_id: str) -> List[Dict[str, Any]]:
        docs = await self.recipes.find(build_query(author=user_id))
        return await self._present_many(docs)

    # ------------------------------
    # users
    # ------------------------------
    async def register_user(self, username: str, avatar: str = "", bio: str = "") -> Dict[str, Any]:
        doc = UserDoc(username=username, avatar=avatar, bio=bio, createdAt=self.clock()).model_dump()
        uid = await self.users.insert(doc)
        log.info("user registered id=%s", uid)
        return await self._user_out(await self.users.get(uid))

    async def _user_out(self, user: Doc) -> Dict[str, Any]:
        favs = await self.recipes.get_many(user.get("favoriteRecipes") or [])
        return {
            "id": user["_id"],
            "username": user.get("username", ""),
            "avatar": user.get("avatar", ""),
            "bio": user.get("bio", ""),
            "favoriteRecipes": [recipe_summary(r) for r in favs],
            "createdAt": user.get("createdAt"),
        }

    async def get_profile(self, user_id: str) -> Dict[str, Any]:
        user = await self.users.get(user_id)
        if user is None:
            raise UserNotFound()
        own = await self.recipes.find(build_query(author=user_id))
        return {"user": await self._user_out(user), "recipes": [recipe_summary(r) for r in own]}

    async def update_profile(
        self,
        user_id: str,
        *,
        username: Optional[str] = None,
        bio: Optional[str] = None,
        avatar: Optional[str] = None,
    ) -> Dict[str, Any]:
        # only non-empty fields change
        fields = {k: v for k, v in (("username", username), ("bio", bio), ("avatar", avatar)) if v}
        user = await self.users.update_profile(user_id, fields) if fields else await self.users.get(user_id)
        if user is None:
            raise UserNotFound()
        return await self._user_out(user)

    async def favorites(self, user_id: str) -> List[Dict[str, Any]]:
        user = await self.users.get(user_id)
        if user is None:
            raise UserNotFound()
        # favorites whose recipe no longer resolves are skipped by get_many
        docs = await self.recipes.get_many(user.get("favoriteRecipes") or [])
        return await self._present_many(docs)
