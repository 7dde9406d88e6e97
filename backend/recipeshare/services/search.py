# recipeshare/services/search.py
# Paginated listing over a RecipeQuery + the "popular" top slice
# - order: createdAt desc, _id desc (stable across pages)
# - page N = [(N-1)*size, N*size) of that order; past the end → empty list, not an error

from __future__ import annotations
import math
from typing import Any, Dict, List, Optional

from recipeshare.core.config import settings
from recipeshare.services.filters import RecipeQuery
from recipeshare.store.base import Doc, RecipeStore

def page_window(page: Optional[int], page_size: Optional[int], default_size: int) -> tuple[int, int]:
    """Normalize paging input: page < 1 → 1, size <= 0 → default."""
    page = page if page and page > 0 else 1
    size = page_size if page_size and page_size > 0 else default_size
    return page, size

def pagination_meta(page: int, size: int, total: int) -> Dict[str, Any]:
    total_pages = math.ceil(total / size) if total else 0
    return {
        "currentPage": page,
        "totalPages": total_pages,
        "totalRecipes": total,
        "hasNext": page < total_pages,
        # no results at all → nothing to go back to either
        "hasPrev": page > 1 and total_pages > 0,
    }

async def paginate(
    store: RecipeStore,
    query: RecipeQuery,
    page: Optional[int] = 1,
    page_size: Optional[int] = None,
    *,
    default_size: Optional[int] = None,
) -> Dict[str, Any]:
    page, size = page_window(page, page_size, default_size or settings.DEFAULT_PAGE_SIZE)
    total = await store.count(query)
    skip = (page - 1) * size
    docs: List[Doc] = await store.find(query, skip=skip, limit=size) if skip < total else []
    return {"recipes": docs, "pagination": pagination_meta(page, size, total)}

async def popular(store: RecipeStore, limit: Optional[int] = None) -> List[Doc]:
    """Top recipes by freshly computed averageRating, newest first on ties. No paging."""
    return await store.top_rated(limit or settings.POPULAR_LIMIT)
