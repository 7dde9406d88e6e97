# recipeshare/db/models/user.py
# Persisted user document shape (users collection).
# Credentials live with the external identity service, not here.
from datetime import datetime
from typing import List

from pydantic import BaseModel, Field

class UserDoc(BaseModel):
    username: str = Field(..., min_length=3, max_length=20)
    avatar: str = ""
    bio: str = Field(default="", max_length=500)
    favoriteRecipes: List[str] = Field(default_factory=list)
    createdAt: datetime
