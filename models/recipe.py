"""
Recipe Models
Recipe detail and step structures supplied by the recipe provider
"""
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


class RecipeStep(BaseModel):
    """
    One instruction in a recipe
    Immutable once loaded into a cooking session
    """
    model_config = {"frozen": True}

    index: int = Field(ge=0)
    text: str
    image_ref: Optional[str] = None


class RecipeDetail(BaseModel):
    """
    Recipe information as returned by the recipe-detail provider
    """
    id: str
    name: str
    steps: List[RecipeStep] = []
    extra: Dict[str, Any] = {}

    @classmethod
    def from_provider(cls, data: dict) -> "RecipeDetail":
        """
        Build from a provider payload

        Provider steps carry either `index` (0-based) or `step` (1-based number),
        and the picture under `image` or `imageRef`.

        Args:
            data: raw recipe dictionary

        Returns:
            RecipeDetail
        """
        if data["id"] is None:
            raise ValueError("recipe id is required")

        raw_steps = data.get("steps", [])
        if not isinstance(raw_steps, list):
            raise ValueError("steps must be a list")

        steps = []
        for position, item in enumerate(raw_steps):
            if isinstance(item, str):
                steps.append(RecipeStep(index=position, text=item))
                continue
            if not isinstance(item, dict):
                raise ValueError(f"step {position} must be a string or an object")

            try:
                if "index" in item:
                    index = int(item["index"])
                elif "step" in item:
                    index = int(item["step"]) - 1
                else:
                    index = position
            except TypeError:
                raise ValueError(f"step {position} has a non-numeric index")

            steps.append(RecipeStep(
                index=index,
                text=item.get("text") or item.get("description", ""),
                image_ref=item.get("imageRef") or item.get("image")
            ))

        known = {"id", "name", "steps"}
        return cls(
            id=str(data["id"]),
            name=data.get("name", ""),
            steps=steps,
            extra={k: v for k, v in data.items() if k not in known}
        )
