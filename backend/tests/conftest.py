"""
Shared fixtures: in-memory stores, a deterministic clock, payload builders.
"""

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import pytest

from recipeshare.services.catalog import CatalogService
from recipeshare.services.engagement import EngagementManager
from recipeshare.store.memory import MemoryRecipeStore, MemoryUserStore


class StepClock:
    """Every call is one second after the previous one."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2024, 1, 1, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        self.now += timedelta(seconds=1)
        return self.now


def recipe_payload(**overrides) -> dict:
    data = {
        "title": "Tomato Pasta",
        "description": "Simple weeknight pasta.",
        "image": "https://img.example.com/pasta.jpg",
        "ingredients": [
            {"name": "pasta", "amount": "200 g"},
            {"name": "tomato", "amount": "3"},
        ],
        "instructions": [
            {"step": 1, "description": "Boil pasta."},
            {"step": 2, "description": "Make sauce."},
        ],
        "prepTime": 10,
        "cookTime": 15,
        "servings": 2,
        "calories": 600,
        "difficulty": "Easy",
        "cuisine": "Italian",
        "diet": "Vegetarian",
        "tags": ["pasta"],
    }
    data.update(overrides)
    return data


@pytest.fixture
def clock() -> StepClock:
    return StepClock()


@pytest.fixture
def recipes() -> MemoryRecipeStore:
    return MemoryRecipeStore()


@pytest.fixture
def users() -> MemoryUserStore:
    return MemoryUserStore()


@pytest.fixture
def catalog(recipes, users, clock) -> CatalogService:
    return CatalogService(recipes, users, clock=clock)


@pytest.fixture
def engagement(recipes, users, clock) -> EngagementManager:
    return EngagementManager(recipes, users, clock=clock)
