"""Generation screen: collect parameters, generate, preview and save."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from pydantic import BaseModel, Field

from memoraize.core.logging import get_logger, log_context
from memoraize.core.result import ErrorKind, Result
from memoraize.core.store import COLLECTIONS_FIELD, DocumentStore, StoreError
from memoraize.modules.auth.identity import Identity
from memoraize.modules.extraction.extractor import ExtractionError, extract_text
from memoraize.modules.flashcards.models import Collection, Flashcard
from memoraize.modules.generation.client import GenerationClient, GenerationError
from memoraize.modules.generation.models import (
    CARD_COUNTS,
    LANGUAGES,
    AnswerType,
    Difficulty,
    GenerateRequest,
    GeneratedCard,
    InputKind,
)
from memoraize.modules.views.base import SIGN_IN_REQUIRED, signed_in_user
from memoraize.modules.views.collections import flashcards_url

logger = get_logger(__name__)

VIEW = "generate"

DIFFICULTIES = ("Easy", "Medium", "Hard")
ANSWER_TYPES = ("True or False", "Multiple Choice", "Short Answer")
INPUT_KINDS = ("topic", "word", "image")

DUPLICATE_NAME = "Flashcard collection with the same name already exists."


@dataclass
class Upload:
    filename: str
    content: bytes


class GenerationViewState(BaseModel):
    flashcards: list[GeneratedCard] = Field(default_factory=list)
    flipped: dict[str, bool] = Field(default_factory=dict)
    input_type: InputKind = "topic"
    text: str = ""
    lang: str = "English"
    num_flashcards: int = 10
    difficulty: Difficulty = "Medium"
    answer_type: AnswerType = "True or False"
    recommended_topic: str = ""
    save_dialog_open: bool = False
    name: str = ""


def options_changed(state: GenerationViewState, **options) -> GenerationViewState:
    return state.model_copy(update=options)


def recommendation_loaded(state: GenerationViewState, topic: str) -> GenerationViewState:
    return state.model_copy(update={"recommended_topic": topic})


def cards_generated(
    state: GenerationViewState, cards: list[GeneratedCard]
) -> GenerationViewState:
    return state.model_copy(update={"flashcards": list(cards)})


def card_flipped(state: GenerationViewState, index: int) -> GenerationViewState:
    slot = str(index)
    flipped = dict(state.flipped)
    flipped[slot] = not flipped.get(slot, False)
    return state.model_copy(update={"flipped": flipped})


def save_dialog_toggled(state: GenerationViewState, open_: bool) -> GenerationViewState:
    return state.model_copy(update={"save_dialog_open": open_})


def _validate_options(options: dict) -> Optional[str]:
    checks = {
        "input_type": INPUT_KINDS,
        "lang": LANGUAGES,
        "num_flashcards": CARD_COUNTS,
        "difficulty": DIFFICULTIES,
        "answer_type": ANSWER_TYPES,
    }
    for key, value in options.items():
        allowed = checks.get(key)
        if allowed is not None and value not in allowed:
            return f"Unsupported {key.replace('_', ' ')}: {value}"
    return None


class GenerationView:
    def __init__(
        self,
        store: DocumentStore,
        client: GenerationClient,
        identity: Identity,
    ) -> None:
        self.store = store
        self.client = client
        self.identity = identity
        self.state = GenerationViewState()

    def _log_extra(self) -> dict:
        return log_context(self.identity.id, VIEW)

    def set_options(self, **options) -> Result[None]:
        """Update form fields (input type, text, language, count, difficulty, answer type, name)."""
        unknown = set(options) - {
            "input_type",
            "text",
            "lang",
            "num_flashcards",
            "difficulty",
            "answer_type",
            "name",
        }
        if unknown:
            return Result.rejected(f"Unknown option: {', '.join(sorted(unknown))}")
        problem = _validate_options(options)
        if problem:
            return Result.rejected(problem)
        self.state = options_changed(self.state, **options)
        return Result.success()

    def flip(self, index: int) -> Result[None]:
        if not 0 <= index < len(self.state.flashcards):
            return Result.rejected(f"No flashcard at position {index}.")
        self.state = card_flipped(self.state, index)
        return Result.success()

    def open_save_dialog(self) -> Result[None]:
        self.state = save_dialog_toggled(self.state, True)
        return Result.success()

    def close_save_dialog(self) -> Result[None]:
        self.state = save_dialog_toggled(self.state, False)
        return Result.success()

    async def fetch_recommended_topic(self) -> Result[Optional[str]]:
        user_id = signed_in_user(self.identity)
        if user_id is None:
            return Result.success(None)
        try:
            raw = await self.store.read_collections(user_id)
            topics = [Collection.model_validate(c).name for c in raw or []]
            topic = await self.client.recommend_topic(topics)
        except (StoreError, GenerationError) as e:
            logger.error(f"Error fetching recommended topic: {e}", extra=self._log_extra())
            return Result.failure(ErrorKind.REMOTE, "Could not fetch a recommended topic.")
        self.state = recommendation_loaded(self.state, topic)
        return Result.success(topic)

    async def _input_data(self, upload: Optional[Upload]) -> tuple[str, Optional[str]]:
        kind = self.state.input_type
        if kind != "topic" and upload is not None:
            return await extract_text(kind, upload.content), kind
        return self.state.text, None

    async def generate(self, upload: Optional[Upload] = None) -> Result[list[GeneratedCard]]:
        try:
            data, file_type = await self._input_data(upload)
        except ExtractionError as e:
            logger.warning(f"Extraction failed: {e}", extra=self._log_extra())
            return Result.failure(ErrorKind.EXTRACTION, f"Could not read the uploaded file: {e}")
        if not data.strip():
            return Result.rejected("Enter a topic or upload a file first.")

        request = GenerateRequest(
            data=data,
            lang=self.state.lang,
            num_flashcards=self.state.num_flashcards,
            difficulty=self.state.difficulty,
            answer_type=self.state.answer_type,
            file_type=file_type,
        )
        try:
            cards = await self.client.generate(request)
        except GenerationError as e:
            logger.error(f"Error generating flashcards: {e}", extra=self._log_extra())
            return Result.failure(ErrorKind.REMOTE, "Flashcard generation failed.")
        self.state = cards_generated(self.state, cards)
        return Result.success(cards)

    async def save(self, name: Optional[str] = None) -> Result[str]:
        """Store the generated cards as a new collection in one atomic batch.

        Returns the URL of the new collection on success.
        """
        name = self.state.name if name is None else name
        user_id = signed_in_user(self.identity)
        if user_id is None:
            return Result.rejected(SIGN_IN_REQUIRED)
        if not name:
            return Result.rejected("Please enter a name")

        try:
            raw = await self.store.read_collections(user_id)
            batch = self.store.batch()
            if raw is not None:
                existing = [Collection.model_validate(c) for c in raw]
                if any(c.name == name for c in existing):
                    return Result.rejected(DUPLICATE_NAME)
                updated = existing + [Collection(name=name)]
                batch.set_user_record(
                    user_id,
                    {COLLECTIONS_FIELD: [c.model_dump() for c in updated]},
                    merge=True,
                )
            else:
                batch.set_user_record(
                    user_id, {COLLECTIONS_FIELD: [{"name": name}]}, merge=False
                )
            for card in self.state.flashcards:
                batch.create_card(user_id, name, Flashcard(front=card.front, back=card.back))
            await batch.commit()
        except StoreError as e:
            logger.error(f"Error saving generated collection: {e}", extra=self._log_extra())
            return Result.failure(ErrorKind.REMOTE, "Could not save the flashcards.")

        self.state = save_dialog_toggled(self.state, False)
        logger.info(
            f"Saved {len(self.state.flashcards)} generated cards as {name!r}",
            extra=self._log_extra(),
        )
        return Result.success(flashcards_url(name))
