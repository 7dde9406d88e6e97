"""
rate / comment / favorite semantics, including concurrent raters.
"""

import asyncio

import pytest

from recipeshare.core.errors import (
    AlreadyFavorited,
    InvalidComment,
    InvalidRating,
    RecipeNotFound,
    UserNotFound,
    WriteConflict,
)
from recipeshare.services.catalog import CatalogService
from recipeshare.services.engagement import EngagementManager
from recipeshare.store.memory import MemoryRecipeStore

from conftest import recipe_payload


async def _setup(catalog, n_users=1):
    users = [await catalog.register_user(f"user{i:03d}") for i in range(n_users)]
    recipe = await catalog.create_recipe(users[0]["id"], recipe_payload())
    return recipe["id"], [u["id"] for u in users]


# ------------------------------
# rate
# ------------------------------

@pytest.mark.asyncio
async def test_rate_twice_keeps_one_entry_with_latest_value(catalog, engagement, recipes):
    rid, (uid,) = await _setup(catalog)

    assert await engagement.rate(rid, uid, 2) == 2.0
    assert await engagement.rate(rid, uid, 5) == 5.0

    doc = await recipes.get(rid)
    assert [(r["user"], r["rating"]) for r in doc["ratings"]] == [(uid, 5)]


@pytest.mark.asyncio
async def test_average_reflects_latest_value_per_user(catalog, engagement):
    rid, (a, b) = await _setup(catalog, n_users=2)
    await engagement.rate(rid, a, 1)
    await engagement.rate(rid, b, 4)
    assert await engagement.rate(rid, a, 5) == 4.5


@pytest.mark.asyncio
@pytest.mark.parametrize("value", (0, 6, -1, 3.5, "4", True, None))
async def test_rate_rejects_out_of_range(catalog, engagement, recipes, value):
    rid, (uid,) = await _setup(catalog)
    with pytest.raises(InvalidRating):
        await engagement.rate(rid, uid, value)
    assert (await recipes.get(rid))["ratings"] == []


@pytest.mark.asyncio
async def test_rate_missing_recipe_changes_nothing(catalog, engagement, recipes):
    rid, (uid,) = await _setup(catalog)
    before = await recipes.get(rid)

    with pytest.raises(RecipeNotFound):
        await engagement.rate("0" * 24, uid, 3)

    assert await recipes.get(rid) == before
    assert not await recipes.exists("0" * 24)


@pytest.mark.asyncio
async def test_fifty_concurrent_raters_lose_nothing(catalog, engagement, recipes):
    rid, uids = await _setup(catalog, n_users=50)

    await asyncio.gather(*(engagement.rate(rid, uid, (i % 5) + 1) for i, uid in enumerate(uids)))

    doc = await recipes.get(rid)
    assert len(doc["ratings"]) == 50
    assert {r["user"] for r in doc["ratings"]} == set(uids)


@pytest.mark.asyncio
async def test_same_user_racing_ends_with_one_entry(catalog, engagement, recipes):
    rid, (uid,) = await _setup(catalog)

    await asyncio.gather(*(engagement.rate(rid, uid, v) for v in (1, 2, 3, 4, 5)))

    doc = await recipes.get(rid)
    assert len(doc["ratings"]) == 1
    assert doc["ratings"][0]["rating"] in {1, 2, 3, 4, 5}


class _AlwaysContended(MemoryRecipeStore):
    async def set_rating(self, recipe_id, user_id, rating, now):
        return False

    async def push_rating(self, recipe_id, entry, now):
        return False


@pytest.mark.asyncio
async def test_exhausted_retries_surface_write_conflict(users, clock):
    store = _AlwaysContended()
    catalog = CatalogService(store, users, clock=clock)
    rid, (uid,) = await _setup(catalog)

    manager = EngagementManager(store, users, clock=clock, max_attempts=3)
    with pytest.raises(WriteConflict):
        await manager.rate(rid, uid, 4)


# ------------------------------
# comment
# ------------------------------

@pytest.mark.asyncio
async def test_comments_append_in_order(catalog, engagement, recipes):
    rid, (uid,) = await _setup(catalog)

    await engagement.comment(rid, uid, "hi")
    await engagement.comment(rid, uid, "there")

    doc = await recipes.get(rid)
    assert [c["text"] for c in doc["comments"]] == ["hi", "there"]


@pytest.mark.asyncio
async def test_comment_returns_entry_with_profile(catalog, engagement, users):
    rid, (uid,) = await _setup(catalog)
    await users.update_profile(uid, {"avatar": "https://img.example.com/me.png"})

    out = await engagement.comment(rid, uid, "  tasty  ")

    assert out["text"] == "tasty"
    assert out["user"] == {"id": uid, "username": "user000", "avatar": "https://img.example.com/me.png"}
    assert out["createdAt"] is not None


@pytest.mark.asyncio
@pytest.mark.parametrize("text", ("", "   ", "x" * 501))
async def test_comment_rejects_empty_or_long(catalog, engagement, text):
    rid, (uid,) = await _setup(catalog)
    with pytest.raises(InvalidComment):
        await engagement.comment(rid, uid, text)


@pytest.mark.asyncio
async def test_comment_missing_recipe(catalog, engagement):
    _, (uid,) = await _setup(catalog)
    with pytest.raises(RecipeNotFound):
        await engagement.comment("nope", uid, "hi")


# ------------------------------
# favorite
# ------------------------------

@pytest.mark.asyncio
async def test_favorite_twice_is_rejected(catalog, engagement, users):
    rid, (uid,) = await _setup(catalog)

    await engagement.favorite(uid, rid, add=True)
    with pytest.raises(AlreadyFavorited):
        await engagement.favorite(uid, rid, add=True)

    assert (await users.get(uid))["favoriteRecipes"] == [rid]


@pytest.mark.asyncio
async def test_unfavorite_without_favorites_is_noop(catalog, engagement, users):
    rid, (uid,) = await _setup(catalog)

    await engagement.favorite(uid, rid, add=False)

    assert (await users.get(uid))["favoriteRecipes"] == []


@pytest.mark.asyncio
async def test_unfavorite_removes(catalog, engagement, users):
    rid, (uid,) = await _setup(catalog)
    await engagement.favorite(uid, rid, add=True)
    await engagement.favorite(uid, rid, add=False)
    assert (await users.get(uid))["favoriteRecipes"] == []


@pytest.mark.asyncio
async def test_favorite_missing_recipe(catalog, engagement, users):
    _, (uid,) = await _setup(catalog)
    with pytest.raises(RecipeNotFound):
        await engagement.favorite(uid, "missing", add=True)
    assert (await users.get(uid))["favoriteRecipes"] == []


@pytest.mark.asyncio
async def test_unfavorite_does_not_need_the_recipe(catalog, engagement):
    _, (uid,) = await _setup(catalog)
    await engagement.favorite(uid, "missing", add=False)


@pytest.mark.asyncio
async def test_favorite_unknown_user(catalog, engagement):
    rid, _ = await _setup(catalog)
    with pytest.raises(UserNotFound):
        await engagement.favorite("ghost", rid, add=True)
    with pytest.raises(UserNotFound):
        await engagement.favorite("ghost", rid, add=False)
