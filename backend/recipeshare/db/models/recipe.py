# recipeshare/db/models/recipe.py
# Persisted recipe document shape (recipes collection)
from __future__ import annotations

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, Field

Diet = Literal["Vegetarian", "Vegan", "Gluten-Free", "Keto", "Paleo", "Regular"]
Difficulty = Literal["Easy", "Medium", "Hard"]

DIETS = ("Vegetarian", "Vegan", "Gluten-Free", "Keto", "Paleo", "Regular")
DIFFICULTIES = ("Easy", "Medium", "Hard")

class Ingredient(BaseModel):
    name: str = Field(..., min_length=1)
    amount: str = Field(..., min_length=1)

class Instruction(BaseModel):
    step: int
    description: str = Field(..., min_length=1)

class RatingEntry(BaseModel):
    user: str
    rating: int = Field(..., ge=1, le=5)
    createdAt: datetime

class CommentEntry(BaseModel):
    user: str
    text: str = Field(..., max_length=500)
    createdAt: datetime

class RecipeDoc(BaseModel):
    # insert payload; the store assigns _id. refs are plain strings here,
    # the mongo store converts them to ObjectId
    title: str = Field(..., max_length=100)
    description: str = Field(..., max_length=1000)
    image: str
    ingredients: List[Ingredient] = Field(default_factory=list)
    instructions: List[Instruction] = Field(default_factory=list)
    prepTime: int = Field(..., ge=0)
    cookTime: int = Field(..., ge=0)
    servings: int = Field(..., ge=1)
    calories: Optional[int] = Field(default=None, ge=0)
    difficulty: Difficulty
    cuisine: str
    diet: Diet
    author: str
    ratings: List[RatingEntry] = Field(default_factory=list)
    comments: List[CommentEntry] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    createdAt: datetime
    updatedAt: datetime
