"""
Saved Recipes
Bookmarked recipes persisted in the key-value store
"""
import asyncio
import logging
from typing import Any, Dict, List

from core.store import SAVED_RECIPES_KEY

logger = logging.getLogger(__name__)


class SavedRecipes:
    """
    Saved recipe list, deduplicated by recipe id
    """

    def __init__(self, store):
        """
        Args:
            store: key-value store with async get/set
        """
        self.store = store
        self._lock = asyncio.Lock()

    async def _load(self) -> List[Dict[str, Any]]:
        raw = await self.store.get(SAVED_RECIPES_KEY)
        if not isinstance(raw, list):
            return []
        return [item for item in raw if isinstance(item, dict) and "id" in item]

    async def all(self) -> List[Dict[str, Any]]:
        async with self._lock:
            return await self._load()

    async def is_saved(self, recipe_id) -> bool:
        return any(str(item["id"]) == str(recipe_id) for item in await self.all())

    async def save(self, recipe: Dict[str, Any]) -> bool:
        """
        Save a recipe

        Ids are compared as strings so 3 and "3" are the same recipe.

        Args:
            recipe: recipe dictionary with an `id`

        Returns:
            True if added, False if it was already saved
        """
        async with self._lock:
            saved = await self._load()
            if any(str(item["id"]) == str(recipe["id"]) for item in saved):
                return False

            saved.append(recipe)
            await self.store.set(SAVED_RECIPES_KEY, saved)
        logger.info("Saved recipe %s", recipe["id"])
        return True

    async def remove(self, recipe_id) -> bool:
        """
        Args:
            recipe_id: recipe id to remove

        Returns:
            True if something was removed
        """
        async with self._lock:
            saved = await self._load()
            remaining = [item for item in saved if str(item["id"]) != str(recipe_id)]
            if len(remaining) == len(saved):
                return False
            await self.store.set(SAVED_RECIPES_KEY, remaining)
        return True

    async def clear(self):
        async with self._lock:
            await self.store.set(SAVED_RECIPES_KEY, [])
