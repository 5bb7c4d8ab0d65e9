"""
Cooking Session Tracker
Drives a user through the ordered steps of one recipe
"""
import logging
from datetime import datetime
from typing import Callable, Optional, Sequence

from core.errors import InvalidRecipeError, OutOfRangeError
from models.cooking import CookingSession
from models.recipe import RecipeStep

logger = logging.getLogger(__name__)


class CookingSessionTracker:
    """
    Step navigation, pause/resume and progress for cooking sessions

    Every operation returns a new session and leaves its input untouched. The
    tracker owns no timer; the caller's periodic tick calls `tick`.
    """

    def __init__(self, clock: Optional[Callable[[], datetime]] = None):
        """
        Args:
            clock: returns the current time, datetime.now by default
        """
        self._clock = clock or datetime.now

    def start(self, recipe_id: str, steps: Sequence[RecipeStep]) -> CookingSession:
        """
        Start a session at the first step

        Args:
            recipe_id: recipe being cooked
            steps: ordered steps

        Returns:
            CookingSession

        Raises:
            InvalidRecipeError: steps is empty
        """
        if not steps:
            raise InvalidRecipeError(f"recipe {recipe_id} has no steps")

        logger.debug("Starting session for recipe %s with %d steps", recipe_id, len(steps))
        return CookingSession(
            recipe_id=recipe_id,
            steps=list(steps),
            started_at=self._clock()
        )

    def advance(self, session: CookingSession) -> CookingSession:
        """
        Mark the current step done and move to the next one

        At the last step only the completion mark changes; finishing the
        recipe is a separate call.
        """
        completed = session.completed_indices | {session.current_index}
        next_index = session.current_index
        if session.current_index < session.last_index:
            next_index += 1

        return session.model_copy(update={
            "current_index": next_index,
            "completed_indices": completed
        })

    def retreat(self, session: CookingSession) -> CookingSession:
        """Move back one step, staying put at the first step"""
        if session.current_index <= 0:
            return session
        return session.model_copy(update={"current_index": session.current_index - 1})

    def jump_to(self, session: CookingSession, index: int) -> CookingSession:
        """
        Move straight to a step without touching completion marks

        Raises:
            OutOfRangeError: index outside the recipe's steps
        """
        if index < 0 or index >= len(session.steps):
            raise OutOfRangeError(index, len(session.steps))
        return session.model_copy(update={"current_index": index})

    def pause(self, session: CookingSession) -> CookingSession:
        if session.paused:
            return session
        return session.model_copy(update={"paused_at": self._clock()})

    def resume(self, session: CookingSession) -> CookingSession:
        if not session.paused:
            return session
        return session.model_copy(update={"paused_at": None})

    def tick(self, session: CookingSession, seconds: int = 1) -> CookingSession:
        """
        Accumulate elapsed time, skipped while paused

        Args:
            session: session to update
            seconds: length of the caller's tick

        Returns:
            CookingSession
        """
        if session.paused or seconds <= 0:
            return session
        return session.model_copy(update={"elapsed_seconds": session.elapsed_seconds + seconds})

    @staticmethod
    def progress(session: CookingSession) -> float:
        """Completed steps as a percentage, for display"""
        return len(session.completed_indices) / len(session.steps) * 100

    @staticmethod
    def is_finished(session: CookingSession) -> bool:
        return len(session.completed_indices) == len(session.steps)
