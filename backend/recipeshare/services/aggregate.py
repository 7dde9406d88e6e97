# recipeshare/services/aggregate.py
# Derived recipe values. Never stored on the document: recompute on every read.

from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Iterable, Mapping

_ONE_DECIMAL = Decimal("0.1")

def average_rating(ratings: Iterable[Mapping[str, Any]] | None) -> float:
    """Mean of rating values, half-up to one decimal. 0 when unrated."""
    values = [int(r["rating"]) for r in (ratings or [])]
    if not values:
        return 0
    # exact decimal mean, no binary float before rounding
    mean = Decimal(sum(values)) / Decimal(len(values))
    return float(mean.quantize(_ONE_DECIMAL, rounding=ROUND_HALF_UP))

def total_time(recipe: Mapping[str, Any]) -> int:
    return int(recipe.get("prepTime") or 0) + int(recipe.get("cookTime") or 0)
