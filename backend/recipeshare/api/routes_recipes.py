# recipeshare/api/routes_recipes.py
# Recipe listing / detail / creation + rate, comment, favorite
# Thin layer: parse query/body → call catalog or engagement → response model.
# CatalogError → status code is handled once in main.py.

from __future__ import annotations
from typing import List, Optional

from fastapi import APIRouter, Depends

from recipeshare.core.deps import get_catalog, get_current_user_id, get_engagement
from recipeshare.db.models.schemas import (
    CommentIn,
    CommentOut,
    MessageOut,
    RateIn,
    RateOut,
    RecipeIn,
    RecipeOut,
    RecipePage,
)
from recipeshare.services.catalog import CatalogService
from recipeshare.services.engagement import EngagementManager
from recipeshare.services.filters import build_query

router = APIRouter(prefix="/recipes", tags=["recipes"])

def _int_or_none(v: Optional[str]) -> Optional[int]:
    # malformed numbers mean "no constraint", not a 4xx
    if v is None or not str(v).strip():
        return None
    try:
        return int(str(v).strip())
    except ValueError:
        return None

def _csv(v: Optional[str]) -> List[str]:
    return [s.strip() for s in (v or "").split(",") if s.strip()]

# ------------------------------
# reads
# ------------------------------

@router.get("", response_model=RecipePage)
async def list_recipes(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    cuisine: Optional[str] = None,
    diet: Optional[str] = None,
    difficulty: Optional[str] = None,
    search: Optional[str] = None,
    maxPrepTime: Optional[str] = None,
    maxCookTime: Optional[str] = None,
    maxCalories: Optional[str] = None,
    ingredients: Optional[str] = None,
    catalog: CatalogService = Depends(get_catalog),
):
    query = build_query(
        cuisine=cuisine,
        diet=diet,
        difficulty=difficulty,
        search=search,
        max_prep_time=_int_or_none(maxPrepTime),
        max_cook_time=_int_or_none(maxCookTime),
        max_calories=_int_or_none(maxCalories),
        ingredients=_csv(ingredients),
    )
    return await catalog.list_recipes(query, _int_or_none(page), _int_or_none(limit))

# static paths first (/popular, /user/..) so they don't hit /{rid}
@router.get("/popular", response_model=List[RecipeOut])
async def popular_recipes(catalog: CatalogService = Depends(get_catalog)):
    return await catalog.popular_recipes()

@router.get("/user/{user_id}", response_model=List[RecipeOut])
async def recipes_by_user(user_id: str, catalog: CatalogService = Depends(get_catalog)):
    return await catalog.recipes_by_author(user_id)

@router.get("/{rid}", response_model=RecipeOut)
async def get_recipe(rid: str, catalog: CatalogService = Depends(get_catalog)):
    return await catalog.get_recipe(rid)

# ------------------------------
# writes (caller id from the auth gateway)
# ------------------------------

@router.post("", response_model=RecipeOut, status_code=201)
async def create_recipe(
    body: RecipeIn,
    user_id: str = Depends(get_current_user_id),
    catalog: CatalogService = Depends(get_catalog),
):
    return await catalog.create_recipe(user_id, body.model_dump())

@router.post("/{rid}/rate", response_model=RateOut)
async def rate_recipe(
    rid: str,
    body: RateIn,
    user_id: str = Depends(get_current_user_id),
    engagement: EngagementManager = Depends(get_engagement),
):
    avg = await engagement.rate(rid, user_id, body.rating)
    return RateOut(averageRating=avg)

@router.post("/{rid}/comment", response_model=CommentOut)
async def comment_recipe(
    rid: str,
    body: CommentIn,
    user_id: str = Depends(get_current_user_id),
    engagement: EngagementManager = Depends(get_engagement),
):
    return await engagement.comment(rid, user_id, body.text)

@router.post("/{rid}/favorite", response_model=MessageOut)
async def add_favorite(
    rid: str,
    user_id: str = Depends(get_current_user_id),
    engagement: EngagementManager = Depends(get_engagement),
):
    await engagement.favorite(user_id, rid, add=True)
    return MessageOut(message="Recipe added to favorites")

@router.delete("/{rid}/favorite", response_model=MessageOut)
async def remove_favorite(
    rid: str,
    user_id: str = Depends(get_current_user_id),
    engagement: EngagementManager = Depends(get_engagement),
):
    await engagement.favorite(user_id, rid, add=False)
    return MessageOut(message="Recipe removed from favorites")
