"""
Community Models
Reviews, comments and the derived ranking rows
"""
from pydantic import BaseModel, Field
from datetime import datetime
from typing import Optional


class ReviewAuthor(BaseModel):
    name: str
    initial: str

    @classmethod
    def from_name(cls, name: str) -> "ReviewAuthor":
        return cls(name=name, initial=name[:1])


class CommunityReview(BaseModel):
    """
    A user's rating of a recipe
    Immutable after creation, deleted only by its author
    """
    model_config = {"frozen": True}

    id: str
    recipe_id: str
    recipe_name: str = ""
    rating: int = Field(ge=1, le=5)
    text: Optional[str] = None
    image_ref: Optional[str] = None
    author: ReviewAuthor
    created_at: datetime


class ReviewComment(BaseModel):
    model_config = {"frozen": True}

    id: str
    review_id: str
    author: ReviewAuthor
    text: str
    created_at: datetime


class RecipeRanking(BaseModel):
    """
    Leaderboard row, recomputed on demand and never persisted
    """
    recipe_id: str
    recipe_name: str
    review_count: int = Field(ge=1)
    average_rating: float
    score: float
    rank: int = Field(ge=1)
