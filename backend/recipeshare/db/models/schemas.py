# recipeshare/db/models/schemas.py
# Request/response models for the HTTP layer
# RecipeIn: creation body (shape only; empty lists are rejected by the catalog)
# RecipeOut / RecipePage: list + detail cards with derived fields
from __future__ import annotations
from typing import List, Optional
from datetime import datetime

from pydantic import BaseModel, Field

from recipeshare.db.models.recipe import Diet, Difficulty, Ingredient, Instruction

# # author / rater / commenter display fields (joined at read time)
class UserRef(BaseModel):
    id: str
    username: Optional[str] = None
    avatar: Optional[str] = None
    bio: Optional[str] = None

class RecipeIn(BaseModel):
    title: str = Field(..., min_length=1, max_length=100)
    description: str = Field(..., min_length=1, max_length=1000)
    image: str
    ingredients: List[Ingredient]
    instructions: List[Instruction]
    prepTime: int = Field(..., ge=0)
    cookTime: int = Field(..., ge=0)
    servings: int = Field(..., ge=1)
    calories: Optional[int] = Field(default=None, ge=0)
    difficulty: Difficulty
    cuisine: str = Field(..., min_length=1)
    diet: Diet
    tags: List[str] = Field(default_factory=list)

class RateIn(BaseModel):
    rating: int = Field(..., ge=1, le=5)

class CommentIn(BaseModel):
    text: str = Field(..., min_length=1, max_length=500)

class RatingOut(BaseModel):
    user: UserRef
    rating: int
    createdAt: datetime

class CommentOut(BaseModel):
    user: UserRef
    text: str
    createdAt: datetime

class RecipeOut(BaseModel):
    id: str
    title: str
    description: str
    image: str
    ingredients: List[Ingredient]
    instructions: List[Instruction]
    prepTime: int
    cookTime: int
    servings: int
    calories: Optional[int] = None
    difficulty: str
    cuisine: str
    diet: str
    author: UserRef
    ratings: List[RatingOut] = Field(default_factory=list)
    comments: List[CommentOut] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    createdAt: datetime
    updatedAt: datetime
    # derived on every read
    averageRating: float = 0
    totalTime: int = 0

class Pagination(BaseModel):
    currentPage: int
    totalPages: int
    totalRecipes: int
    hasNext: bool
    hasPrev: bool

class RecipePage(BaseModel):
    recipes: List[RecipeOut]
    pagination: Pagination

class RateOut(BaseModel):
    message: str = "Recipe rated successfully"
    averageRating: float

class MessageOut(BaseModel):
    message: str

# # user profile
class RecipeSummary(BaseModel):
    id: str
    title: str
    image: str
    averageRating: float
    createdAt: Optional[datetime] = None

class UserOut(BaseModel):
    id: str
    username: str
    avatar: str = ""
    bio: str = ""
    favoriteRecipes: List[RecipeSummary] = Field(default_factory=list)
    createdAt: Optional[datetime] = None

class UserProfileOut(BaseModel):
    user: UserOut
    recipes: List[RecipeSummary]

class UserUpdateIn(BaseModel):
    username: Optional[str] = Field(default=None, min_length=3, max_length=20)
    bio: Optional[str] = Field(default=None, max_length=500)
    avatar: Optional[str] = None
