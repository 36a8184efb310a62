from __future__ import annotations

from typing import Annotated, Literal, Optional, Union

from pydantic import BaseModel, Field

from memoraize.modules.generation.models import AnswerType, Difficulty, InputKind
from memoraize.modules.views.base import Effect
from memoraize.modules.views.collections import CollectionViewState
from memoraize.modules.views.derive import SortOrder
from memoraize.modules.views.flashcards import FlashcardViewState
from memoraize.modules.views.generate import GenerationViewState


# Collection list actions ------------------------------------------------


class CollectionReload(BaseModel):
    type: Literal["reload"]


class CollectionOpenDialog(BaseModel):
    type: Literal["open_dialog"]


class CollectionCloseDialog(BaseModel):
    type: Literal["close_dialog"]


class CollectionSetDraftName(BaseModel):
    type: Literal["set_draft_name"]
    name: str


class CollectionCreate(BaseModel):
    type: Literal["create"]
    name: Optional[str] = Field(default=None, description="Defaults to the draft name")


class CollectionDelete(BaseModel):
    type: Literal["delete"]
    name: str


class CollectionNavigate(BaseModel):
    type: Literal["navigate"]
    name: str


CollectionAction = Annotated[
    Union[
        CollectionReload,
        CollectionOpenDialog,
        CollectionCloseDialog,
        CollectionSetDraftName,
        CollectionCreate,
        CollectionDelete,
        CollectionNavigate,
    ],
    Field(discriminator="type"),
]


# Flashcard browsing actions ----------------------------------------------


class FlashcardReload(BaseModel):
    type: Literal["reload"]


class FlashcardSelectCollection(BaseModel):
    type: Literal["select_collection"]
    name: Optional[str] = None


class FlashcardSetSearch(BaseModel):
    type: Literal["set_search"]
    query: str = ""


class FlashcardSetSort(BaseModel):
    type: Literal["set_sort"]
    order: SortOrder


class FlashcardFlip(BaseModel):
    type: Literal["flip"]
    index: int


class FlashcardSpeak(BaseModel):
    type: Literal["speak"]
    text: str


class FlashcardToggle(BaseModel):
    type: Literal[
        "toggle_audio", "toggle_delete_mode", "toggle_sort_menu", "toggle_color_menu"
    ]


class FlashcardSetColors(BaseModel):
    type: Literal["set_colors"]
    front: Optional[str] = None
    back: Optional[str] = None


class FlashcardDialog(BaseModel):
    type: Literal["open_dialog", "close_dialog"]


class FlashcardSetDraft(BaseModel):
    type: Literal["set_draft"]
    front: Optional[str] = None
    back: Optional[str] = None


class FlashcardCreate(BaseModel):
    type: Literal["create"]
    front: Optional[str] = None
    back: Optional[str] = None


class FlashcardDelete(BaseModel):
    type: Literal["delete"]
    id: str


FlashcardAction = Annotated[
    Union[
        FlashcardReload,
        FlashcardSelectCollection,
        FlashcardSetSearch,
        FlashcardSetSort,
        FlashcardFlip,
        FlashcardSpeak,
        FlashcardToggle,
        FlashcardSetColors,
        FlashcardDialog,
        FlashcardSetDraft,
        FlashcardCreate,
        FlashcardDelete,
    ],
    Field(discriminator="type"),
]


# Generation actions ---------------------------------------------------------


class GenerationSetOptions(BaseModel):
    type: Literal["set_options"]
    input_type: Optional[InputKind] = None
    text: Optional[str] = None
    lang: Optional[str] = None
    num_flashcards: Optional[int] = None
    difficulty: Optional[Difficulty] = None
    answer_type: Optional[AnswerType] = None
    name: Optional[str] = None


class GenerationFlip(BaseModel):
    type: Literal["flip"]
    index: int


class GenerationSaveDialog(BaseModel):
    type: Literal["open_save_dialog", "close_save_dialog"]


class GenerationRefreshRecommendation(BaseModel):
    type: Literal["refresh_recommendation"]


class GenerationGenerate(BaseModel):
    type: Literal["generate"]


class GenerationSave(BaseModel):
    type: Literal["save"]
    name: Optional[str] = Field(default=None, description="Defaults to the name draft")


GenerationAction = Annotated[
    Union[
        GenerationSetOptions,
        GenerationFlip,
        GenerationSaveDialog,
        GenerationRefreshRecommendation,
        GenerationGenerate,
        GenerationSave,
    ],
    Field(discriminator="type"),
]


# Responses ------------------------------------------------------------------


class CollectionViewResponse(BaseModel):
    state: CollectionViewState
    effects: list[Effect] = Field(default_factory=list)


class FlashcardViewResponse(BaseModel):
    state: FlashcardViewState
    effects: list[Effect] = Field(default_factory=list)


class GenerationViewResponse(BaseModel):
    state: GenerationViewState
    effects: list[Effect] = Field(default_factory=list)


class FlashcardsPageResponse(BaseModel):
    """``/flashcards``: the collection list, or one collection when ``id`` is given."""

    view: Literal["collections", "flashcards"]
    collections: Optional[CollectionViewState] = None
    flashcards: Optional[FlashcardViewState] = None
    effects: list[Effect] = Field(default_factory=list)
