# recipeshare/store/base.py
# Store contracts the catalog depends on.
# Records cross this boundary as plain dicts: "_id" and every user/recipe
# reference are str, datetimes stay datetimes.
#
# Engagement writes are single atomic primitives (no read-modify-write of the
# whole document), so concurrent raters on one recipe never lose entries.

from __future__ import annotations
from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, Iterable, List, Optional

from recipeshare.services.filters import RecipeQuery

Doc = Dict[str, Any]

class RecipeStore(ABC):

    @abstractmethod
    async def insert(self, doc: Doc) -> str:
        """Insert a new recipe, return its assigned id."""

    @abstractmethod
    async def get(self, recipe_id: str) -> Optional[Doc]:
        ...

    @abstractmethod
    async def get_many(self, recipe_ids: Iterable[str]) -> List[Doc]:
        """Existing recipes among ids, in the order given. Unknown ids are skipped."""

    @abstractmethod
    async def exists(self, recipe_id: str) -> bool:
        ...

    @abstractmethod
    async def find(self, query: RecipeQuery, *, skip: int = 0, limit: Optional[int] = None) -> List[Doc]:
        """Matches ordered by createdAt desc, then _id desc."""

    @abstractmethod
    async def count(self, query: RecipeQuery) -> int:
        ...

    @abstractmethod
    async def top_rated(self, limit: int) -> List[Doc]:
        """Ordered by current average rating desc, then createdAt desc, then _id desc."""

    @abstractmethod
    async def set_rating(self, recipe_id: str, user_id: str, rating: int, now: datetime) -> bool:
        """Overwrite user's existing rating entry in place. False if there is none (or no recipe)."""

    @abstractmethod
    async def push_rating(self, recipe_id: str, entry: Doc, now: datetime) -> bool:
        """Append entry only if entry["user"] has no rating yet. False otherwise (or no recipe)."""

    @abstractmethod
    async def push_comment(self, recipe_id: str, entry: Doc, now: datetime) -> bool:
        """Append a comment. False if the recipe does not exist."""


class UserStore(ABC):

    @abstractmethod
    async def insert(self, doc: Doc) -> str:
        """Insert a new user, return its id. UsernameTaken if the name is in use."""

    @abstractmethod
    async def get(self, user_id: str) -> Optional[Doc]:
        ...

    @abstractmethod
    async def get_by_username(self, username: str) -> Optional[Doc]:
        ...

    @abstractmethod
    async def get_many(self, user_ids: Iterable[str]) -> Dict[str, Doc]:
        """id -> user for the ids that exist."""

    @abstractmethod
    async def add_favorite(self, user_id: str, recipe_id: str) -> bool:
        """Add recipe_id unless already present. False when nothing was added."""

    @abstractmethod
    async def remove_favorite(self, user_id: str, recipe_id: str) -> bool:
        """Remove recipe_id if present. False only when the user does not exist."""

    @abstractmethod
    async def update_profile(self, user_id: str, fields: Doc) -> Optional[Doc]:
        """$set-style partial update, returns the updated user or None.
        UsernameTaken if a new username belongs to someone else."""
