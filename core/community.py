"""
Community Board
Reviews, comments and the recipe leaderboard
"""
import asyncio
import logging
from datetime import datetime
from typing import Callable, Dict, List, Optional, Sequence

from pydantic import ValidationError

from core.errors import NotReviewAuthorError, ReviewNotFoundError
from core.store import COMMENTS_KEY, REVIEWS_KEY
from models.community import (
    CommunityReview,
    RecipeRanking,
    ReviewAuthor,
    ReviewComment,
)
from utils.text_utils import get_random_string

logger = logging.getLogger(__name__)

RATING_WEIGHT = 0.7
VOLUME_WEIGHT = 0.3
SCORE_TIE_TOLERANCE = 0.001

REVIEW_ORDERS = ("all", "recent", "popular")


def rank_reviews(reviews: Sequence[CommunityReview]) -> List[RecipeRanking]:
    """
    Build the recipe leaderboard from community reviews

    score = (average / 5) * 0.7 + (count / max count) * 0.3, sorted by score,
    then average, then count, all descending. Rows whose score is within
    SCORE_TIE_TOLERANCE of the previous row share its rank; the next distinct
    row takes that rank + 1.

    Args:
        reviews: all community reviews

    Returns:
        RecipeRanking list, best first
    """
    groups: Dict[str, List[CommunityReview]] = {}
    for review in reviews:
        groups.setdefault(review.recipe_id, []).append(review)

    if not groups:
        return []

    max_review_count = max(max(len(group) for group in groups.values()), 1)

    rows = []
    for recipe_id, group in groups.items():
        review_count = len(group)
        average_rating = sum(review.rating for review in group) / review_count
        score = (average_rating / 5) * RATING_WEIGHT + (review_count / max_review_count) * VOLUME_WEIGHT
        rows.append((recipe_id, group[0].recipe_name, review_count, average_rating, score))

    rows.sort(key=lambda row: (row[4], row[3], row[2]), reverse=True)

    rankings: List[RecipeRanking] = []
    for recipe_id, recipe_name, review_count, average_rating, score in rows:
        if rankings and abs(score - rankings[-1].score) < SCORE_TIE_TOLERANCE:
            rank = rankings[-1].rank
        elif rankings:
            rank = rankings[-1].rank + 1
        else:
            rank = 1

        rankings.append(RecipeRanking(
            recipe_id=recipe_id,
            recipe_name=recipe_name,
            review_count=review_count,
            average_rating=average_rating,
            score=score,
            rank=rank
        ))
    return rankings


def sort_reviews(reviews: Sequence[CommunityReview], order: str = "all") -> List[CommunityReview]:
    """
    Order reviews for the community feed

    Args:
        reviews: reviews in stored order
        order: "all" keeps stored order, "recent" is newest first,
            "popular" is highest rating first

    Returns:
        CommunityReview list
    """
    if order == "recent":
        return sorted(reviews, key=lambda review: review.created_at, reverse=True)
    if order == "popular":
        return sorted(reviews, key=lambda review: review.rating, reverse=True)
    if order == "all":
        return list(reviews)
    raise ValueError(f"unknown review order: {order}")


class ReviewBoard:
    """
    Community reviews and comments persisted in the key-value store
    """

    def __init__(self, store, clock: Optional[Callable[[], datetime]] = None):
        """
        Args:
            store: key-value store with async get/set
            clock: returns the current time, datetime.now by default
        """
        self.store = store
        self._clock = clock or datetime.now
        self._lock = asyncio.Lock()

    async def _load(self, key: str, model) -> list:
        raw = await self.store.get(key)
        if not isinstance(raw, list):
            return []

        items = []
        for item in raw:
            try:
                items.append(model.model_validate(item))
            except ValidationError:
                logger.warning("Skipping malformed %s entry: %r", key, item)
        return items

    async def _save(self, key: str, items: list):
        await self.store.set(key, [item.model_dump(mode="json") for item in items])

    async def reviews(self) -> List[CommunityReview]:
        return await self._load(REVIEWS_KEY, CommunityReview)

    async def sorted_reviews(self, order: str = "all") -> List[CommunityReview]:
        return sort_reviews(await self.reviews(), order)

    async def rankings(self) -> List[RecipeRanking]:
        return rank_reviews(await self.reviews())

    async def submit(
        self,
        recipe_id: str,
        recipe_name: str,
        rating: int,
        author: ReviewAuthor,
        text: Optional[str] = None,
        image_ref: Optional[str] = None,
    ) -> CommunityReview:
        """
        Append a new review

        Raises:
            pydantic.ValidationError: rating outside 1..5
        """
        review = CommunityReview(
            id=f"review_{get_random_string(12)}",
            recipe_id=str(recipe_id),
            recipe_name=recipe_name,
            rating=rating,
            text=text,
            image_ref=image_ref,
            author=author,
            created_at=self._clock()
        )
        async with self._lock:
            reviews = await self.reviews()
            reviews.append(review)
            await self._save(REVIEWS_KEY, reviews)
        logger.info("Review %s submitted for recipe %s", review.id, review.recipe_id)
        return review

    async def delete(self, review_id: str, author_name: str):
        """
        Delete a review and its comments

        Raises:
            ReviewNotFoundError: no such review
            NotReviewAuthorError: author_name did not write the review
        """
        async with self._lock:
            reviews = await self.reviews()
            target = next((review for review in reviews if review.id == review_id), None)
            if target is None:
                raise ReviewNotFoundError(review_id)
            if target.author.name != author_name:
                raise NotReviewAuthorError(review_id, author_name)

            await self._save(REVIEWS_KEY, [review for review in reviews if review.id != review_id])

            comments = await self._load(COMMENTS_KEY, ReviewComment)
            remaining = [comment for comment in comments if comment.review_id != review_id]
            if len(remaining) != len(comments):
                await self._save(COMMENTS_KEY, remaining)
        logger.info("Review %s deleted by %s", review_id, author_name)

    async def add_comment(self, review_id: str, author: ReviewAuthor, text: str) -> Optional[ReviewComment]:
        """
        Comment on a review

        Returns:
            The stored comment, or None when text is blank

        Raises:
            ReviewNotFoundError: no such review
        """
        text = (text or "").strip()
        if not text:
            return None

        comment = ReviewComment(
            id=f"comment_{get_random_string(12)}",
            review_id=review_id,
            author=author,
            text=text,
            created_at=self._clock()
        )
        # same lock as delete, so a comment never outlives its review
        async with self._lock:
            if not any(review.id == review_id for review in await self.reviews()):
                raise ReviewNotFoundError(review_id)

            comments = await self._load(COMMENTS_KEY, ReviewComment)
            comments.append(comment)
            await self._save(COMMENTS_KEY, comments)
        return comment

    async def comments_for(self, review_id: str) -> List[ReviewComment]:
        return [comment for comment in await self._load(COMMENTS_KEY, ReviewComment)
                if comment.review_id == review_id]
