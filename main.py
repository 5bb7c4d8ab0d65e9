"""
Cooking Companion Server
HTTP surface for cooking sessions, completed recipes and the community board
"""
import logging
import time
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any, Dict, List, Optional

from fastapi import FastAPI, HTTPException, Request
from pydantic import BaseModel, Field

from config import Settings, load_settings
from core.community import REVIEW_ORDERS, ReviewBoard
from core.completion import CompletionLog
from core.cooking import CookingSessionTracker
from core.errors import (
    InvalidRecipeError,
    NotReviewAuthorError,
    OutOfRangeError,
    ReviewNotFoundError,
)
from core.saved import SavedRecipes
from core.store import MemoryStore, SQLiteStore
from models.community import ReviewAuthor
from models.cooking import CookingSession
from models.recipe import RecipeDetail
from utils.text_utils import format_elapsed, get_random_string, time_ago

logger = logging.getLogger(__name__)


class StartSessionRequest(BaseModel):
    recipe: Dict[str, Any]


class JumpRequest(BaseModel):
    index: int


class TickRequest(BaseModel):
    seconds: Optional[int] = None


class ReviewRequest(BaseModel):
    recipe_id: str
    recipe_name: str = ""
    rating: int = Field(ge=1, le=5)
    text: Optional[str] = None
    image_ref: Optional[str] = None
    author_name: str


class CommentRequest(BaseModel):
    author_name: str
    text: str


class ActiveSession:
    """A running session plus the recipe snapshot recorded on completion"""

    def __init__(self, recipe: RecipeDetail, session: CookingSession):
        self.recipe = recipe
        self.session = session
        self.touched_at = time.monotonic()


def session_view(session_id: str, session: CookingSession) -> dict:
    return {
        "session_id": session_id,
        **session.model_dump(mode="json"),
        "completed_indices": sorted(session.completed_indices),
        "paused": session.paused,
        "progress": CookingSessionTracker.progress(session),
        "finished": CookingSessionTracker.is_finished(session),
        "elapsed": format_elapsed(session.elapsed_seconds)
    }


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    settings = settings or load_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if settings.store == "memory":
            store = MemoryStore()
        else:
            store = SQLiteStore(settings.db_path)
            await store.init_db()
        print(f"✅ Using {settings.store} store")

        app.state.store = store
        app.state.tracker = CookingSessionTracker()
        app.state.completions = CompletionLog(store)
        app.state.board = ReviewBoard(store)
        app.state.saved = SavedRecipes(store)
        app.state.sessions = {}
        try:
            yield
        finally:
            await store.close()

    app = FastAPI(lifespan=lifespan)

    def evict_idle(sessions: Dict[str, ActiveSession]):
        now = time.monotonic()
        for session_id in [sid for sid, active in sessions.items()
                           if now - active.touched_at >= settings.session_ttl_seconds]:
            del sessions[session_id]
            logger.info("Session %s expired", session_id)

    def get_active(request: Request, session_id: str) -> ActiveSession:
        evict_idle(request.app.state.sessions)
        active = request.app.state.sessions.get(session_id)
        if active is None:
            raise HTTPException(status_code=404, detail="Session not found")
        return active

    def update(request: Request, session_id: str, operation) -> dict:
        active = get_active(request, session_id)
        active.session = operation(active.session)
        active.touched_at = time.monotonic()
        return session_view(session_id, active.session)

    @app.post("/sessions")
    async def start_session(body: StartSessionRequest, request: Request):
        try:
            recipe = RecipeDetail.from_provider(body.recipe)
        except (KeyError, ValueError) as e:
            raise HTTPException(status_code=400, detail=f"Invalid recipe: {e}")

        try:
            session = request.app.state.tracker.start(recipe.id, recipe.steps)
        except InvalidRecipeError as e:
            raise HTTPException(status_code=400, detail=str(e))

        evict_idle(request.app.state.sessions)
        session_id = get_random_string(16)
        request.app.state.sessions[session_id] = ActiveSession(recipe, session)
        logger.info("Session %s started for recipe %s", session_id, recipe.id)
        return session_view(session_id, session)

    @app.get("/sessions/{session_id}")
    async def get_session(session_id: str, request: Request):
        return session_view(session_id, get_active(request, session_id).session)

    @app.post("/sessions/{session_id}/advance")
    async def advance(session_id: str, request: Request):
        return update(request, session_id, request.app.state.tracker.advance)

    @app.post("/sessions/{session_id}/retreat")
    async def retreat(session_id: str, request: Request):
        return update(request, session_id, request.app.state.tracker.retreat)

    @app.post("/sessions/{session_id}/jump")
    async def jump(session_id: str, body: JumpRequest, request: Request):
        tracker = request.app.state.tracker
        try:
            return update(request, session_id, lambda s: tracker.jump_to(s, body.index))
        except OutOfRangeError as e:
            raise HTTPException(status_code=400, detail=str(e))

    @app.post("/sessions/{session_id}/pause")
    async def pause(session_id: str, request: Request):
        return update(request, session_id, request.app.state.tracker.pause)

    @app.post("/sessions/{session_id}/resume")
    async def resume(session_id: str, request: Request):
        return update(request, session_id, request.app.state.tracker.resume)

    @app.post("/sessions/{session_id}/tick")
    async def tick(session_id: str, request: Request, body: Optional[TickRequest] = None):
        seconds = body.seconds if body and body.seconds is not None else settings.tick_seconds
        tracker = request.app.state.tracker
        return update(request, session_id, lambda s: tracker.tick(s, seconds))

    @app.post("/sessions/{session_id}/complete")
    async def complete(session_id: str, request: Request):
        active = get_active(request, session_id)
        if not CookingSessionTracker.is_finished(active.session):
            raise HTTPException(status_code=409, detail="Not every step is completed")

        snapshot = {
            "id": active.recipe.id,
            "name": active.recipe.name,
            "steps": [step.model_dump() for step in active.recipe.steps],
            **active.recipe.extra,
            "elapsed_seconds": active.session.elapsed_seconds
        }
        # removed before awaiting, so a repeated complete gets 404
        request.app.state.sessions.pop(session_id, None)
        recorded = await request.app.state.completions.record(snapshot)
        return {"recorded": recorded}

    @app.delete("/sessions/{session_id}")
    async def discard_session(session_id: str, request: Request):
        get_active(request, session_id)
        request.app.state.sessions.pop(session_id, None)
        return {"discarded": True}

    @app.get("/completed")
    async def completed(request: Request):
        entries = await request.app.state.completions.entries()
        return [entry.model_dump(mode="json") for entry in entries]

    @app.get("/completed/{recipe_id}/count")
    async def completed_count(recipe_id: str, request: Request):
        count = await request.app.state.completions.completion_count(recipe_id)
        return {"recipe_id": recipe_id, "count": count}

    @app.get("/reviews")
    async def list_reviews(request: Request, order: str = "all"):
        if order not in REVIEW_ORDERS:
            raise HTTPException(status_code=400, detail=f"Unknown order: {order}")
        reviews = await request.app.state.board.sorted_reviews(order)
        now = datetime.now()
        return [{**review.model_dump(mode="json"), "time_ago": time_ago(review.created_at, now)}
                for review in reviews]

    @app.post("/reviews")
    async def submit_review(body: ReviewRequest, request: Request):
        review = await request.app.state.board.submit(
            recipe_id=body.recipe_id,
            recipe_name=body.recipe_name,
            rating=body.rating,
            author=ReviewAuthor.from_name(body.author_name),
            text=body.text,
            image_ref=body.image_ref
        )
        return review.model_dump(mode="json")

    @app.delete("/reviews/{review_id}")
    async def delete_review(review_id: str, author_name: str, request: Request):
        try:
            await request.app.state.board.delete(review_id, author_name)
        except ReviewNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        except NotReviewAuthorError as e:
            raise HTTPException(status_code=403, detail=str(e))
        return {"deleted": True}

    @app.get("/reviews/{review_id}/comments")
    async def list_comments(review_id: str, request: Request):
        comments = await request.app.state.board.comments_for(review_id)
        return [comment.model_dump(mode="json") for comment in comments]

    @app.post("/reviews/{review_id}/comments")
    async def add_comment(review_id: str, body: CommentRequest, request: Request):
        try:
            comment = await request.app.state.board.add_comment(
                review_id, ReviewAuthor.from_name(body.author_name), body.text
            )
        except ReviewNotFoundError as e:
            raise HTTPException(status_code=404, detail=str(e))
        if comment is None:
            raise HTTPException(status_code=400, detail="Comment is empty")
        return comment.model_dump(mode="json")

    @app.get("/rankings")
    async def rankings(request: Request):
        return [ranking.model_dump() for ranking in await request.app.state.board.rankings()]

    @app.get("/saved")
    async def list_saved(request: Request) -> List[Dict[str, Any]]:
        return await request.app.state.saved.all()

    @app.post("/saved")
    async def save_recipe(recipe: Dict[str, Any], request: Request):
        if "id" not in recipe:
            raise HTTPException(status_code=400, detail="Recipe id is required")
        return {"saved": await request.app.state.saved.save(recipe)}

    @app.delete("/saved")
    async def clear_saved(request: Request):
        await request.app.state.saved.clear()
        return {"cleared": True}

    @app.delete("/saved/{recipe_id}")
    async def remove_saved(recipe_id: str, request: Request):
        if not await request.app.state.saved.remove(recipe_id):
            raise HTTPException(status_code=404, detail="Recipe not saved")
        return {"removed": True}

    return app


settings = load_settings()
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
app = create_app(settings)


if __name__ == "__main__":
    import uvicorn

    print("Server started at :5050")
    uvicorn.run(app, host="0.0.0.0", port=5050)
