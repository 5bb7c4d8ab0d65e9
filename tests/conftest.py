import pytest
from datetime import datetime

from models.recipe import RecipeStep


class FakeClock:
    """Manually advanced clock for session and review timestamps"""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


@pytest.fixture
def clock():
    return FakeClock(datetime(2024, 5, 1, 18, 30))


@pytest.fixture
def sample_steps():
    return [
        RecipeStep(index=0, text="Chop the onion."),
        RecipeStep(index=1, text="Fry the rice with kimchi.", image_ref="step2.jpg"),
        RecipeStep(index=2, text="Top with a fried egg.")
    ]
