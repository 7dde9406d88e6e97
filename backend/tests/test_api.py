"""
HTTP surface over the in-memory stores.
"""

import asyncio

import pytest
from fastapi.testclient import TestClient

from recipeshare.core.config import settings
from recipeshare.core.deps import USER_HEADER, use_stores
from recipeshare.main import app
from recipeshare.scripts.seed_demo import RECIPES, USERS
from recipeshare.services.catalog import CatalogService
from recipeshare.store.memory import MemoryRecipeStore, MemoryUserStore

from conftest import StepClock, recipe_payload


@pytest.fixture
def stores():
    recipes, users = MemoryRecipeStore(), MemoryUserStore()
    use_stores(recipes, users)
    yield recipes, users
    use_stores(None, None)


@pytest.fixture
def client(stores):
    # no context manager: startup would replace the stores with a real backend
    return TestClient(app)


@pytest.fixture
def seeded(stores):
    catalog = CatalogService(*stores, clock=StepClock())

    async def _seed():
        alice = await catalog.register_user("alice")
        bob = await catalog.register_user("bob")
        pasta = await catalog.create_recipe(alice["id"], recipe_payload())
        curry = await catalog.create_recipe(
            bob["id"],
            recipe_payload(
                title="Chickpea Curry",
                cuisine="Indian",
                diet="Vegan",
                prepTime=20,
                ingredients=[{"name": "chickpeas", "amount": "1 can"}],
            ),
        )
        return {"alice": alice["id"], "bob": bob["id"], "pasta": pasta["id"], "curry": curry["id"]}

    return asyncio.run(_seed())


def _as(uid):
    return {USER_HEADER: uid}


# ------------------------------
# reads
# ------------------------------

def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.json()["status"] == "ok"


def test_list_newest_first_with_pagination(client, seeded):
    res = client.get("/recipes")
    assert res.status_code == 200
    body = res.json()
    assert [r["id"] for r in body["recipes"]] == [seeded["curry"], seeded["pasta"]]
    assert body["pagination"] == {
        "currentPage": 1,
        "totalPages": 1,
        "totalRecipes": 2,
        "hasNext": False,
        "hasPrev": False,
    }


def test_list_filters(client, seeded):
    res = client.get("/recipes", params={"cuisine": "Italian", "maxPrepTime": "15"})
    assert [r["id"] for r in res.json()["recipes"]] == [seeded["pasta"]]

    res = client.get("/recipes", params={"ingredients": "chickpeas, saffron"})
    assert [r["id"] for r in res.json()["recipes"]] == [seeded["curry"]]


def test_malformed_numbers_are_ignored(client, seeded):
    res = client.get("/recipes", params={"maxPrepTime": "soon", "page": "x", "limit": "-3"})
    assert res.status_code == 200
    body = res.json()
    assert body["pagination"]["totalRecipes"] == 2
    assert body["pagination"]["currentPage"] == 1


def test_limit_pages(client, seeded):
    res = client.get("/recipes", params={"limit": "1", "page": "2"})
    body = res.json()
    assert [r["id"] for r in body["recipes"]] == [seeded["pasta"]]
    assert body["pagination"]["hasPrev"] is True
    assert body["pagination"]["hasNext"] is False


def test_detail_and_missing(client, seeded):
    res = client.get(f"/recipes/{seeded['pasta']}")
    assert res.status_code == 200
    assert res.json()["author"]["username"] == "alice"
    assert res.json()["totalTime"] == 25

    res = client.get("/recipes/000000000000000000000000")
    assert res.status_code == 404
    assert res.json() == {"detail": "Recipe not found"}


def test_popular_and_by_user(client, seeded):
    client.post(f"/recipes/{seeded['pasta']}/rate", json={"rating": 5}, headers=_as(seeded["bob"]))

    res = client.get("/recipes/popular")
    assert [r["id"] for r in res.json()] == [seeded["pasta"], seeded["curry"]]

    res = client.get(f"/recipes/user/{seeded['bob']}")
    assert [r["id"] for r in res.json()] == [seeded["curry"]]


# ------------------------------
# writes
# ------------------------------

def test_mutations_need_identity(client, seeded):
    res = client.post(f"/recipes/{seeded['pasta']}/rate", json={"rating": 4})
    assert res.status_code == 401


def test_rate_returns_average(client, seeded):
    pasta = seeded["pasta"]
    client.post(f"/recipes/{pasta}/rate", json={"rating": 2}, headers=_as(seeded["alice"]))
    res = client.post(f"/recipes/{pasta}/rate", json={"rating": 5}, headers=_as(seeded["bob"]))
    assert res.status_code == 200
    assert res.json() == {"message": "Recipe rated successfully", "averageRating": 3.5}

    res = client.post(f"/recipes/{pasta}/rate", json={"rating": 4}, headers=_as(seeded["bob"]))
    assert res.json()["averageRating"] == 3.0
    assert len(client.get(f"/recipes/{pasta}").json()["ratings"]) == 2


@pytest.mark.parametrize("rating", (0, 6, "five"))
def test_rate_out_of_range_is_400(client, seeded, rating):
    res = client.post(f"/recipes/{seeded['pasta']}/rate", json={"rating": rating}, headers=_as(seeded["bob"]))
    assert res.status_code == 400
    body = res.json()
    assert body["detail"] == "Invalid request"
    assert body["errors"][0]["loc"] == ["body", "rating"]
    assert client.get(f"/recipes/{seeded['pasta']}").json()["ratings"] == []


@pytest.mark.parametrize("text", ("", "x" * 501))
def test_comment_shape_is_400(client, seeded, text):
    res = client.post(f"/recipes/{seeded['pasta']}/comment", json={"text": text}, headers=_as(seeded["bob"]))
    assert res.status_code == 400



def test_comment(client, seeded):
    res = client.post(
        f"/recipes/{seeded['pasta']}/comment", json={"text": "lovely"}, headers=_as(seeded["bob"])
    )
    assert res.status_code == 200
    assert res.json()["user"]["username"] == "bob"
    assert res.json()["text"] == "lovely"

    res = client.post("/recipes/000000000000000000000000/comment", json={"text": "hi"}, headers=_as(seeded["bob"]))
    assert res.status_code == 404


def test_favorite_twice_is_400(client, seeded):
    url = f"/recipes/{seeded['curry']}/favorite"
    res = client.post(url, headers=_as(seeded["alice"]))
    assert res.json() == {"message": "Recipe added to favorites"}

    res = client.post(url, headers=_as(seeded["alice"]))
    assert res.status_code == 400
    assert res.json() == {"detail": "Recipe already in favorites"}

    res = client.get(f"/users/{seeded['alice']}/favorites")
    assert [r["id"] for r in res.json()] == [seeded["curry"]]

    res = client.delete(url, headers=_as(seeded["alice"]))
    assert res.json() == {"message": "Recipe removed from favorites"}
    res = client.delete(url, headers=_as(seeded["alice"]))
    assert res.status_code == 200


def test_create_recipe(client, seeded):
    res = client.post("/recipes", json=recipe_payload(title="Toast"), headers=_as(seeded["alice"]))
    assert res.status_code == 201
    assert res.json()["author"]["id"] == seeded["alice"]

    res = client.post("/recipes", json=recipe_payload(ingredients=[]), headers=_as(seeded["alice"]))
    assert res.status_code == 400

    res = client.post("/recipes", json=recipe_payload(diet="Carnivore"), headers=_as(seeded["alice"]))
    assert res.status_code == 400
    assert res.json()["errors"][0]["loc"][:2] == ["body", "diet"]


def test_profile_and_update(client, seeded):
    res = client.get(f"/users/{seeded['alice']}")
    assert res.status_code == 200
    assert [r["id"] for r in res.json()["recipes"]] == [seeded["pasta"]]

    res = client.put(f"/users/{seeded['alice']}", json={"bio": "hello"}, headers=_as(seeded["bob"]))
    assert res.status_code == 403

    res = client.put(f"/users/{seeded['alice']}", json={"bio": "hello"}, headers=_as(seeded["alice"]))
    assert res.status_code == 200
    assert res.json()["bio"] == "hello"

    assert client.get("/users/000000000000000000000000").status_code == 404


def test_profile_update_validation(client, seeded):
    alice = _as(seeded["alice"])

    res = client.put(f"/users/{seeded['alice']}", json={"username": "al"}, headers=alice)
    assert res.status_code == 400
    assert res.json()["errors"][0]["loc"] == ["body", "username"]

    res = client.put(f"/users/{seeded['alice']}", json={"username": "bob"}, headers=alice)
    assert res.status_code == 400
    assert res.json() == {"detail": "Username already taken"}

    assert client.get(f"/users/{seeded['alice']}").json()["user"]["username"] == "alice"


# ------------------------------
# memory backend startup
# ------------------------------

def test_memory_backend_starts_with_demo_users(monkeypatch):
    monkeypatch.setattr(settings, "STORE_BACKEND", "memory")
    with TestClient(app) as client:
        body = client.get("/recipes").json()
        assert body["pagination"]["totalRecipes"] == len(RECIPES)

        chef = body["recipes"][-1]["author"]
        assert chef["username"] == USERS[0][0]

        res = client.post(f"/recipes/{body['recipes'][0]['id']}/favorite", headers=_as(chef["id"]))
        assert res.status_code == 200
        assert client.get("/health").json() == {"status": "ok", "store": "memory", "db": "skip"}
