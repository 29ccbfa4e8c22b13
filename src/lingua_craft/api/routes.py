"""REST API routes exposing session state and learner intents."""

import functools

import structlog
from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from lingua_craft.config import get_settings
from lingua_craft.gateway.openai_gateway import OpenAIGateway
from lingua_craft.models.vocabulary import EducationLevel
from lingua_craft.presentation.views import level_cards, render_state, review_cards
from lingua_craft.session.controller import RETURN_HOME_CONFIRMATION, SessionController
from lingua_craft.storage.mastered import InMemoryMasteredRepository, JsonMasteredRepository

logger = structlog.get_logger()
router = APIRouter(prefix="/api")


class LevelRequest(BaseModel):
    level: str


class SentenceRequest(BaseModel):
    sentence: str


class ReturnHomeRequest(BaseModel):
    confirmed: bool = False


@functools.lru_cache
def get_controller() -> SessionController:
    """Process-wide controller (one learner per running app)."""
    settings = get_settings()
    gateway = OpenAIGateway(
        api_key=settings.openai_api_key,
        word_model=settings.word_model,
        evaluation_model=settings.evaluation_model,
        words_per_batch=settings.words_per_batch,
        word_temperature=settings.word_temperature,
        evaluation_temperature=settings.evaluation_temperature,
        base_url=settings.openai_base_url,
        timeout=settings.request_timeout_seconds,
    )
    if settings.storage_backend == "memory":
        repository = InMemoryMasteredRepository()
    else:
        repository = JsonMasteredRepository(settings.mastered_path)
    logger.info(
        "controller_created",
        storage_backend=settings.storage_backend,
        word_model=settings.word_model,
    )
    return SessionController(gateway, gateway, repository)


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint."""
    return {"status": "ok"}


@router.get("/levels")
async def list_levels() -> list[dict]:
    return level_cards()


@router.get("/state")
async def get_state(controller: SessionController = Depends(get_controller)) -> dict:
    state = render_state(controller.snapshot())
    state["confirm_message"] = RETURN_HOME_CONFIRMATION
    return state


@router.post("/level")
async def select_level(
    body: LevelRequest, controller: SessionController = Depends(get_controller)
) -> dict:
    try:
        level = EducationLevel.parse(body.level)
    except ValueError as exc:
        raise HTTPException(status_code=422, detail=str(exc))
    await controller.select_level(level)
    return render_state(controller.snapshot())


@router.put("/sentence")
async def edit_sentence(
    body: SentenceRequest, controller: SessionController = Depends(get_controller)
) -> dict:
    controller.update_sentence(body.sentence)
    return render_state(controller.snapshot())


@router.post("/sentence")
async def submit_sentence(
    body: SentenceRequest, controller: SessionController = Depends(get_controller)
) -> dict:
    await controller.submit_sentence(body.sentence)
    return render_state(controller.snapshot())


@router.post("/advance")
async def advance(controller: SessionController = Depends(get_controller)) -> dict:
    await controller.advance()
    return render_state(controller.snapshot())


@router.post("/skip")
async def skip(controller: SessionController = Depends(get_controller)) -> dict:
    await controller.skip()
    return render_state(controller.snapshot())


@router.post("/hint")
async def reveal_hint(controller: SessionController = Depends(get_controller)) -> dict:
    controller.reveal_hint()
    return render_state(controller.snapshot())


@router.post("/review/toggle")
async def toggle_review(controller: SessionController = Depends(get_controller)) -> dict:
    controller.toggle_review()
    return render_state(controller.snapshot())


@router.post("/home")
async def return_home(
    body: ReturnHomeRequest, controller: SessionController = Depends(get_controller)
) -> dict:
    controller.return_home(body.confirmed)
    return render_state(controller.snapshot())


@router.post("/notice/dismiss")
async def dismiss_notice(controller: SessionController = Depends(get_controller)) -> dict:
    controller.dismiss_notice()
    return render_state(controller.snapshot())


@router.get("/mastered")
async def list_mastered(controller: SessionController = Depends(get_controller)) -> list[dict]:
    return review_cards(controller.mastered_items)
