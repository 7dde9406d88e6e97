# recipeshare/services/filters.py
# List filters → one normalized, immutable predicate (RecipeQuery)
# - every constraint is optional; None/""/[] means "no constraint on this dimension"
# - constraints combine with AND
# - renders to a MongoDB filter (to_mongo) or evaluates a plain dict (matches)
# Malformed numbers never get here: the route layer turns them into None.

from __future__ import annotations
import re
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

from bson import ObjectId
from pydantic import BaseModel, ConfigDict

_WORD_RE = re.compile(r"\w+", re.UNICODE)

def _clean(v: Optional[str]) -> Optional[str]:
    if v is None:
        return None
    v = str(v).strip()
    return v or None

def _words(text: str) -> set[str]:
    return {w.lower() for w in _WORD_RE.findall(text or "")}

class RecipeQuery(BaseModel):
    model_config = ConfigDict(frozen=True)

    cuisine: Optional[str] = None
    diet: Optional[str] = None
    difficulty: Optional[str] = None
    search: Optional[str] = None
    maxPrepTime: Optional[int] = None
    maxCookTime: Optional[int] = None
    maxCalories: Optional[int] = None
    ingredients: Tuple[str, ...] = ()
    author: Optional[str] = None

    # ------------------------------
    # MongoDB rendering
    # ------------------------------
    def to_mongo(self) -> Dict[str, Any]:
        flt: Dict[str, Any] = {}
        if self.cuisine is not None:
            flt["cuisine"] = self.cuisine
        if self.diet is not None:
            flt["diet"] = self.diet
        if self.difficulty is not None:
            flt["difficulty"] = self.difficulty
        if self.search is not None:
            # needs the text index from db/indexes.py
            flt["$text"] = {"$search": self.search}
        if self.maxPrepTime is not None:
            flt["prepTime"] = {"$lte": self.maxPrepTime}
        if self.maxCookTime is not None:
            flt["cookTime"] = {"$lte": self.maxCookTime}
        if self.maxCalories is not None:
            flt["calories"] = {"$lte": self.maxCalories}
        if self.ingredients:
            flt["ingredients.name"] = {"$in": list(self.ingredients)}
        if self.author is not None:
            flt["author"] = ObjectId(self.author) if ObjectId.is_valid(self.author) else self.author
        return flt

    # ------------------------------
    # in-process evaluation (memory store)
    # ------------------------------
    def matches(self, doc: Mapping[str, Any]) -> bool:
        if self.cuisine is not None and doc.get("cuisine") != self.cuisine:
            return False
        if self.diet is not None and doc.get("diet") != self.diet:
            return False
        if self.difficulty is not None and doc.get("difficulty") != self.difficulty:
            return False
        if not _within(doc.get("prepTime"), self.maxPrepTime):
            return False
        if not _within(doc.get("cookTime"), self.maxCookTime):
            return False
        if not _within(doc.get("calories"), self.maxCalories):
            return False
        if self.ingredients:
            names = {i.get("name") for i in (doc.get("ingredients") or [])}
            if names.isdisjoint(self.ingredients):
                return False
        if self.author is not None and doc.get("author") != self.author:
            return False
        if self.search is not None and not self._text_hit(doc):
            return False
        return True

    def _text_hit(self, doc: Mapping[str, Any]) -> bool:
        # same fields as the mongo text index; any term is enough (no stemming here)
        haystack = _words(doc.get("title") or "") | _words(doc.get("description") or "")
        for ing in doc.get("ingredients") or []:
            haystack |= _words(ing.get("name") or "")
        return not _words(self.search or "").isdisjoint(haystack)

def _within(value: Any, bound: Optional[int]) -> bool:
    if bound is None:
        return True
    # like $lte: a missing/null field never satisfies a bound
    if value is None:
        return False
    return value <= bound

def build_query(
    *,
    cuisine: Optional[str] = None,
    diet: Optional[str] = None,
    difficulty: Optional[str] = None,
    search: Optional[str] = None,
    max_prep_time: Optional[int] = None,
    max_cook_time: Optional[int] = None,
    max_calories: Optional[int] = None,
    ingredients: Optional[Iterable[str]] = None,
    author: Optional[str] = None,
) -> RecipeQuery:
    names: list[str] = []
    for n in ingredients or []:
        n = _clean(n)
        if n and n not in names:
            names.append(n)

    return RecipeQuery(
        cuisine=_clean(cuisine),
        diet=_clean(diet),
        difficulty=_clean(difficulty),
        search=_clean(search),
        maxPrepTime=max_prep_time,
        maxCookTime=max_cook_time,
        maxCalories=max_calories,
        ingredients=tuple(names),
        author=_clean(author),
    )
