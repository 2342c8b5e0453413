from pydantic import BaseModel
from typing import Optional
from datetime import datetime


class RecipeSchema(BaseModel):
    key: str
    name: str
    emoji: str
    color: Optional[str] = None
    created_by: Optional[str] = None
    creator_name: Optional[str] = None
    created_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class UserSchema(BaseModel):
    user_id: str
    username: Optional[str] = None
    joined_at: Optional[datetime] = None
    discovery_count: int = 0

    class Config:
        from_attributes = True


class CreateResult(BaseModel):
    """Outcome of an insert-if-absent: the stored row is always returned."""
    created: bool
    recipe: RecipeSchema
