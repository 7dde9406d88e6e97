# recipeshare/core/deps.py
# Store bootstrap + shared dependencies (service factories, caller identity)
# - mongo: one motor client per process, opened on startup, closed on shutdown
# - memory: fresh in-process stores; main.py fills them with the demo data
from typing import Optional

from fastapi import Header, HTTPException
from motor.motor_asyncio import AsyncIOMotorClient, AsyncIOMotorDatabase

from recipeshare.core.config import settings
from recipeshare.services.catalog import CatalogService
from recipeshare.services.engagement import EngagementManager
from recipeshare.store.base import RecipeStore, UserStore
from recipeshare.store.memory import MemoryRecipeStore, MemoryUserStore
from recipeshare.store.mongo import MongoRecipeStore, MongoUserStore

USER_HEADER = "X-User-Id"

_client: Optional[AsyncIOMotorClient] = None
_recipes: Optional[RecipeStore] = None
_users: Optional[UserStore] = None

def use_stores(recipes: Optional[RecipeStore], users: Optional[UserStore]) -> None:
    global _recipes, _users
    _recipes, _users = recipes, users

async def init_stores() -> None:
    global _client
    if settings.STORE_BACKEND == "memory":
        use_stores(MemoryRecipeStore(), MemoryUserStore())
        return
    if _client is not None:
        return

    client = AsyncIOMotorClient(settings.MONGO_URI)
    try:
        # fails while the server is still coming up; main.py retries
        await client[settings.MONGO_DB].command("ping")
    except Exception:
        client.close()
        raise
    _client = client
    db = client[settings.MONGO_DB]
    use_stores(MongoRecipeStore(db), MongoUserStore(db))

def mongo_db() -> Optional[AsyncIOMotorDatabase]:
    """Database handle of the open client, None on the memory backend or before startup."""
    return _client[settings.MONGO_DB] if _client is not None else None

async def close_stores() -> None:
    global _client
    if _client is not None:
        _client.close()
    _client = None
    use_stores(None, None)

def _stores() -> tuple[RecipeStore, UserStore]:
    if _recipes is None or _users is None:
        raise RuntimeError("Stores are not initialized yet.")
    return _recipes, _users

def get_catalog() -> CatalogService:
    return CatalogService(*_stores())

def get_engagement() -> EngagementManager:
    return EngagementManager(*_stores())

def get_current_user_id(x_user_id: Optional[str] = Header(default=None, alias=USER_HEADER)) -> str:
    # the auth gateway in front of us sets this header; we only require it
    v = (x_user_id or "").strip()
    if not v:
        raise HTTPException(status_code=401, detail="Authentication required")
    return v
