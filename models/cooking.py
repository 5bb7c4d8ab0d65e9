"""
Cooking Models
In-memory cooking session and the durable completion record
"""
from pydantic import BaseModel, Field, model_validator
from datetime import datetime
from typing import Any, Dict, FrozenSet, List, Optional

from models.recipe import RecipeStep


class CookingSession(BaseModel):
    """
    Single-user traversal of one recipe's ordered steps
    """
    recipe_id: str
    steps: List[RecipeStep]
    current_index: int = 0
    completed_indices: FrozenSet[int] = frozenset()
    started_at: datetime
    paused_at: Optional[datetime] = None
    elapsed_seconds: int = Field(default=0, ge=0)

    @model_validator(mode="after")
    def check_indices(self) -> "CookingSession":
        if not self.steps:
            raise ValueError("a cooking session needs at least one step")
        if not 0 <= self.current_index < len(self.steps):
            raise ValueError(f"current_index {self.current_index} out of range")
        if any(not 0 <= index < len(self.steps) for index in self.completed_indices):
            raise ValueError("completed_indices out of range")
        return self

    @property
    def paused(self) -> bool:
        return self.paused_at is not None

    @property
    def last_index(self) -> int:
        return len(self.steps) - 1

    @property
    def current_step(self) -> RecipeStep:
        return self.steps[self.current_index]


class CompletedRecipeEntry(BaseModel):
    """
    Record that a recipe was finished on a given calendar day
    """
    model_config = {"frozen": True}

    recipe_id: str
    snapshot: Dict[str, Any]
    completed_at: datetime
