# recipeshare/api/routes_users.py
# User profile / profile update / favorites list

from __future__ import annotations
from typing import List

from fastapi import APIRouter, Depends, HTTPException

from recipeshare.core.deps import get_catalog, get_current_user_id
from recipeshare.db.models.schemas import RecipeOut, UserOut, UserProfileOut, UserUpdateIn
from recipeshare.services.catalog import CatalogService

router = APIRouter(prefix="/users", tags=["users"])

@router.get("/{user_id}", response_model=UserProfileOut)
async def get_profile(user_id: str, catalog: CatalogService = Depends(get_catalog)):
    """Profile + favorite recipe summaries + own recipe summaries."""
    return await catalog.get_profile(user_id)

@router.put("/{user_id}", response_model=UserOut)
async def update_profile(
    user_id: str,
    body: UserUpdateIn,
    caller_id: str = Depends(get_current_user_id),
    catalog: CatalogService = Depends(get_catalog),
):
    if caller_id != user_id:
        raise HTTPException(status_code=403, detail="Not authorized")
    return await catalog.update_profile(
        user_id, username=body.username, bio=body.bio, avatar=body.avatar
    )

@router.get("/{user_id}/favorites", response_model=List[RecipeOut])
async def get_favorites(user_id: str, catalog: CatalogService = Depends(get_catalog)):
    return await catalog.favorites(user_id)
