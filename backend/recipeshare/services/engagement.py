# recipeshare/services/engagement.py
# rate / comment / favorite
# - rate: upsert per (recipe, user) → exactly one entry per user, last write wins
# - comment: append-only, no dedup
# - favorite: add rejects duplicates (AlreadyFavorited), remove of a non-member is a no-op
# All writes go through single atomic store primitives; see store/base.py.

from __future__ import annotations
import logging
from datetime import datetime
from typing import Any, Callable, Dict, Optional

from recipeshare.core.config import settings
from recipeshare.core.errors import (
    AlreadyFavorited,
    InvalidComment,
    InvalidRating,
    RecipeNotFound,
    UserNotFound,
    WriteConflict,
)
from recipeshare.db.models.recipe import CommentEntry, RatingEntry
from recipeshare.services.aggregate import average_rating
from recipeshare.services.catalog import user_ref, utcnow
from recipeshare.store.base import RecipeStore, UserStore

log = logging.getLogger(__name__)

MAX_COMMENT_LEN = 500

class EngagementManager:
    def __init__(
        self,
        recipes: RecipeStore,
        users: UserStore,
        *,
        clock: Callable[[], datetime] = utcnow,
        max_attempts: Optional[int] = None,
    ) -> None:
        self.recipes = recipes
        self.users = users
        self.clock = clock
        self.max_attempts = max_attempts or settings.RATE_MAX_ATTEMPTS

    async def rate(self, recipe_id: str, user_id: str, value: Any) -> float:
        """Upsert user's rating, return the recipe's recomputed averageRating."""
        if isinstance(value, bool) or not isinstance(value, int) or not 1 <= value <= 5:
            raise InvalidRating()

        for attempt in range(1, self.max_attempts + 1):
            now = self.clock()
            # 1) overwrite my entry in place
            if await self.recipes.set_rating(recipe_id, user_id, value, now):
                break
            # 2) no entry yet → append, guarded on "still no entry for me"
            entry = RatingEntry(user=user_id, rating=value, createdAt=now).model_dump()
            if await self.recipes.push_rating(recipe_id, entry, now):
                break
            # 3) both missed: recipe gone, or my own concurrent request appended in between
            if not await self.recipes.exists(recipe_id):
                raise RecipeNotFound()
            log.warning("rate retry recipe=%s user=%s attempt=%d", recipe_id, user_id, attempt)
        else:
            raise WriteConflict()

        log.info("rated recipe=%s user=%s value=%d", recipe_id, user_id, value)
        doc = await self.recipes.get(recipe_id)
        return average_rating((doc or {}).get("ratings"))

    async def comment(self, recipe_id: str, user_id: str, text: str) -> Dict[str, Any]:
        """Append a comment, return it with the commenter's username/avatar."""
        text = (text or "").strip()
        if not text or len(text) > MAX_COMMENT_LEN:
            raise InvalidComment()

        now = self.clock()
        entry = CommentEntry(user=user_id, text=text, createdAt=now).model_dump()
        if not await self.recipes.push_comment(recipe_id, entry, now):
            raise RecipeNotFound()

        log.info("commented recipe=%s user=%s", recipe_id, user_id)
        commenter = await self.users.get(user_id)
        return {**entry, "user": user_ref(user_id, commenter, ("username", "avatar"))}

    async def favorite(self, user_id: str, recipe_id: str, add: bool) -> None:
        if add:
            if not await self.recipes.exists(recipe_id):
                raise RecipeNotFound()
            if await self.users.add_favorite(user_id, recipe_id):
                log.info("favorite added user=%s recipe=%s", user_id, recipe_id)
                return
            if await self.users.get(user_id) is None:
                raise UserNotFound()
            raise AlreadyFavorited()

        # remove: recipe need not exist any more
        if not await self.users.remove_favorite(user_id, recipe_id):
            raise UserNotFound()
        log.info("favorite removed user=%s recipe=%s", user_id, recipe_id)
