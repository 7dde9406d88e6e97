# recipeshare/core/errors.py
# Typed failures raised by the catalog/engagement core.
# The HTTP layer maps status_code straight onto the response (see main.py).

from __future__ import annotations


class CatalogError(Exception):
    status_code = 500
    detail = "Server error"

    def __init__(self, detail: str | None = None) -> None:
        if detail is not None:
            self.detail = detail
        super().__init__(self.detail)


class RecipeNotFound(CatalogError):
    status_code = 404
    detail = "Recipe not found"


class UserNotFound(CatalogError):
    status_code = 404
    detail = "User not found"


class InvalidRating(CatalogError):
    status_code = 400
    detail = "Rating must be between 1 and 5"


class InvalidComment(CatalogError):
    status_code = 400
    detail = "Comment text is required (max 500 characters)"


class AlreadyFavorited(CatalogError):
    status_code = 400
    detail = "Recipe already in favorites"


class EmptyIngredientsOrInstructions(CatalogError):
    status_code = 400
    detail = "At least one ingredient and one instruction are required"


class WriteConflict(CatalogError):
    # retries exhausted on a contended recipe
    status_code = 409
    detail = "Recipe is being updated concurrently, try again"


class UsernameTaken(CatalogError):
    status_code = 400
    detail = "Username already taken"
