from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, File, Query, UploadFile

from memoraize.core.config import settings
from memoraize.core.result import Result
from memoraize.apis.deps import get_view_session
from memoraize.modules.views.base import Effect, effects_for
from memoraize.modules.views.generate import Upload
from memoraize.modules.views.sessions import ViewSession
from .schemas import (
    CollectionAction,
    CollectionCloseDialog,
    CollectionCreate,
    CollectionDelete,
    CollectionNavigate,
    CollectionOpenDialog,
    CollectionReload,
    CollectionSetDraftName,
    CollectionViewResponse,
    FlashcardAction,
    FlashcardCreate,
    FlashcardDelete,
    FlashcardDialog,
    FlashcardFlip,
    FlashcardReload,
    FlashcardSelectCollection,
    FlashcardSetColors,
    FlashcardSetDraft,
    FlashcardSetSearch,
    FlashcardSetSort,
    FlashcardSpeak,
    FlashcardToggle,
    FlashcardViewResponse,
    FlashcardsPageResponse,
    GenerationAction,
    GenerationFlip,
    GenerationGenerate,
    GenerationRefreshRecommendation,
    GenerationSave,
    GenerationSaveDialog,
    GenerationSetOptions,
    GenerationViewResponse,
)


router = APIRouter()

PREFIX = f"/{settings.app.version}"


def _with_effect(result: Result, effect_type: str) -> list[Effect]:
    """Effects for ``result`` plus a ``speak``/``navigate`` effect carrying its value."""
    effects = effects_for(result)
    if result.ok and result.value:
        effects.append(Effect(type=effect_type, message=str(result.value)))
    return effects


@router.get(
    f"{PREFIX}/flashcards",
    response_model=FlashcardsPageResponse,
    tags=["views"],
)
async def flashcards_page(
    id: Optional[str] = Query(default=None, description="Collection to open"),
    session: ViewSession = Depends(get_view_session),
) -> FlashcardsPageResponse:
    if not id:
        result = await session.collections.load()
        return FlashcardsPageResponse(
            view="collections",
            collections=session.collections.state,
            effects=effects_for(result),
        )
    result = await session.flashcards.select_collection(id)
    return FlashcardsPageResponse(
        view="flashcards",
        flashcards=session.flashcards.state,
        effects=effects_for(result),
    )


# Collection list ------------------------------------------------------------


@router.get(
    f"{PREFIX}/views/collections",
    response_model=CollectionViewResponse,
    tags=["views"],
)
async def get_collection_view(
    session: ViewSession = Depends(get_view_session),
) -> CollectionViewResponse:
    result = await session.collections.load()
    return CollectionViewResponse(
        state=session.collections.state, effects=effects_for(result)
    )


@router.post(
    f"{PREFIX}/views/collections/actions",
    response_model=CollectionViewResponse,
    tags=["views"],
)
async def dispatch_collection_action(
    action: CollectionAction,
    session: ViewSession = Depends(get_view_session),
) -> CollectionViewResponse:
    view = session.collections
    effects: list[Effect]
    if isinstance(action, CollectionReload):
        effects = effects_for(await view.load())
    elif isinstance(action, CollectionOpenDialog):
        effects = effects_for(view.open_dialog())
    elif isinstance(action, CollectionCloseDialog):
        effects = effects_for(view.close_dialog())
    elif isinstance(action, CollectionSetDraftName):
        effects = effects_for(view.set_draft_name(action.name))
    elif isinstance(action, CollectionCreate):
        effects = effects_for(await view.create(action.name))
    elif isinstance(action, CollectionDelete):
        effects = effects_for(await view.delete(action.name))
    elif isinstance(action, CollectionNavigate):
        result = view.navigate(action.name)
        if result.ok:
            await session.flashcards.select_collection(action.name)
        effects = _with_effect(result, "navigate")
    else:  # pragma: no cover - the union is closed
        effects = []
    return CollectionViewResponse(state=view.state, effects=effects)


# Flashcard browsing ---------------------------------------------------------


@router.get(
    f"{PREFIX}/views/flashcards",
    response_model=FlashcardViewResponse,
    tags=["views"],
)
async def get_flashcard_view(
    session: ViewSession = Depends(get_view_session),
) -> FlashcardViewResponse:
    result = await session.flashcards.load()
    return FlashcardViewResponse(
        state=session.flashcards.state, effects=effects_for(result)
    )


@router.post(
    f"{PREFIX}/views/flashcards/actions",
    response_model=FlashcardViewResponse,
    tags=["views"],
)
async def dispatch_flashcard_action(
    action: FlashcardAction,
    session: ViewSession = Depends(get_view_session),
) -> FlashcardViewResponse:
    view = session.flashcards
    effects: list[Effect]
    if isinstance(action, FlashcardReload):
        effects = effects_for(await view.load())
    elif isinstance(action, FlashcardSelectCollection):
        effects = effects_for(await view.select_collection(action.name))
    elif isinstance(action, FlashcardSetSearch):
        effects = effects_for(await view.set_search(action.query))
    elif isinstance(action, FlashcardSetSort):
        effects = effects_for(await view.set_sort(action.order))
    elif isinstance(action, FlashcardFlip):
        effects = effects_for(view.flip(action.index))
    elif isinstance(action, FlashcardSpeak):
        effects = _with_effect(view.play_audio(action.text), "speak")
    elif isinstance(action, FlashcardToggle):
        toggles = {
            "toggle_audio": view.toggle_audio,
            "toggle_delete_mode": view.toggle_delete_mode,
            "toggle_sort_menu": view.toggle_sort_menu,
            "toggle_color_menu": view.toggle_color_menu,
        }
        effects = effects_for(toggles[action.type]())
    elif isinstance(action, FlashcardSetColors):
        effects = effects_for(view.set_colors(front=action.front, back=action.back))
    elif isinstance(action, FlashcardDialog):
        if action.type == "open_dialog":
            effects = effects_for(view.open_dialog())
        else:
            effects = effects_for(view.close_dialog())
    elif isinstance(action, FlashcardSetDraft):
        effects = effects_for(view.set_draft(front=action.front, back=action.back))
    elif isinstance(action, FlashcardCreate):
        effects = effects_for(await view.create_card(action.front, action.back))
    elif isinstance(action, FlashcardDelete):
        effects = effects_for(await view.delete_card(action.id))
    else:  # pragma: no cover - the union is closed
        effects = []
    return FlashcardViewResponse(state=view.state, effects=effects)


# Generation -----------------------------------------------------------------


@router.get(
    f"{PREFIX}/views/generate",
    response_model=GenerationViewResponse,
    tags=["views"],
)
async def get_generation_view(
    session: ViewSession = Depends(get_view_session),
) -> GenerationViewResponse:
    view = session.generation
    effects: list[Effect] = []
    if not view.state.recommended_topic:
        effects = effects_for(await view.fetch_recommended_topic())
    return GenerationViewResponse(state=view.state, effects=effects)


@router.post(
    f"{PREFIX}/views/generate/actions",
    response_model=GenerationViewResponse,
    tags=["views"],
)
async def dispatch_generation_action(
    action: GenerationAction,
    session: ViewSession = Depends(get_view_session),
) -> GenerationViewResponse:
    view = session.generation
    effects: list[Effect]
    if isinstance(action, GenerationSetOptions):
        options = action.model_dump(exclude={"type"}, exclude_none=True)
        effects = effects_for(view.set_options(**options))
    elif isinstance(action, GenerationFlip):
        effects = effects_for(view.flip(action.index))
    elif isinstance(action, GenerationSaveDialog):
        if action.type == "open_save_dialog":
            effects = effects_for(view.open_save_dialog())
        else:
            effects = effects_for(view.close_save_dialog())
    elif isinstance(action, GenerationRefreshRecommendation):
        effects = effects_for(await view.fetch_recommended_topic())
    elif isinstance(action, GenerationGenerate):
        effects = effects_for(await view.generate())
    elif isinstance(action, GenerationSave):
        effects = _with_effect(await view.save(action.name), "navigate")
    else:  # pragma: no cover - the union is closed
        effects = []
    return GenerationViewResponse(state=view.state, effects=effects)


@router.post(
    f"{PREFIX}/views/generate/submit",
    response_model=GenerationViewResponse,
    tags=["views"],
)
async def submit_generation(
    file: Optional[UploadFile] = File(default=None),
    session: ViewSession = Depends(get_view_session),
) -> GenerationViewResponse:
    """Generate from the current form; ``file`` feeds word/image inputs."""
    upload = None
    if file is not None:
        upload = Upload(filename=file.filename or "upload", content=await file.read())
    result = await session.generation.generate(upload)
    return GenerationViewResponse(
        state=session.generation.state, effects=effects_for(result)
    )
