"""
Completion Recorder
Completed-recipes log, one entry per recipe per calendar day
"""
import asyncio
import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Sequence, Tuple

from pydantic import ValidationError

from core.store import COMPLETED_RECIPES_KEY
from models.cooking import CompletedRecipeEntry

logger = logging.getLogger(__name__)


def record_completion(
    log: Sequence[CompletedRecipeEntry],
    recipe: Dict[str, Any],
    now: datetime,
) -> Tuple[List[CompletedRecipeEntry], bool]:
    """
    Prepend a completion unless the recipe was already finished that day

    Days are local calendar dates, not a rolling 24 hour window.

    Args:
        log: existing entries, most recent first
        recipe: recipe snapshot, must carry an `id`
        now: completion time

    Returns:
        (new log, recorded flag)
    """
    recipe_id = str(recipe["id"])
    for entry in log:
        if entry.recipe_id == recipe_id and entry.completed_at.date() == now.date():
            return list(log), False

    entry = CompletedRecipeEntry(recipe_id=recipe_id, snapshot=dict(recipe), completed_at=now)
    return [entry, *log], True


class CompletionLog:
    """
    Completed-recipes log persisted in the key-value store
    """

    def __init__(self, store):
        """
        Args:
            store: key-value store with async get/set
        """
        self.store = store
        self._lock = asyncio.Lock()

    async def entries(self) -> List[CompletedRecipeEntry]:
        raw = await self.store.get(COMPLETED_RECIPES_KEY)
        if not isinstance(raw, list):
            return []

        entries = []
        for item in raw:
            try:
                entries.append(CompletedRecipeEntry.model_validate(item))
            except ValidationError:
                logger.warning("Skipping malformed completion entry: %r", item)
        return entries

    async def record(self, recipe: Dict[str, Any], now: Optional[datetime] = None) -> bool:
        """
        Record a finished recipe

        Args:
            recipe: recipe snapshot
            now: completion time, current time by default

        Returns:
            True if a new entry was stored
        """
        async with self._lock:
            log = await self.entries()
            new_log, recorded = record_completion(log, recipe, now or datetime.now())
            if recorded:
                await self.store.set(
                    COMPLETED_RECIPES_KEY,
                    [entry.model_dump(mode="json") for entry in new_log]
                )

        if recorded:
            logger.info("Recorded completion of recipe %s (%d total)", recipe["id"], len(new_log))
        else:
            logger.debug("Recipe %s already completed today", recipe["id"])
        return recorded

    async def count(self) -> int:
        return len(await self.entries())

    async def completion_count(self, recipe_id: str) -> int:
        """Number of days on which a recipe was completed"""
        return sum(1 for entry in await self.entries() if entry.recipe_id == str(recipe_id))
