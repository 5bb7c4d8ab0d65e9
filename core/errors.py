"""
Errors raised by the cooking and community core
"""


class CookingError(Exception):
    """Base class for errors surfaced to the caller"""


class InvalidRecipeError(CookingError):
    """A cooking session was started with no steps"""


class OutOfRangeError(CookingError):
    """A step index outside the recipe's steps"""

    def __init__(self, index: int, step_count: int):
        super().__init__(f"step index {index} out of range [0, {step_count})")
        self.index = index
        self.step_count = step_count


class ReviewNotFoundError(CookingError):
    def __init__(self, review_id: str):
        super().__init__(f"review not found: {review_id}")
        self.review_id = review_id


class NotReviewAuthorError(CookingError):
    def __init__(self, review_id: str, author_name: str):
        super().__init__(f"{author_name} is not the author of review {review_id}")
        self.review_id = review_id
        self.author_name = author_name
