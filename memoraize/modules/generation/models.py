"""Wire models for the generation contract (``GET``/``POST /generate``)."""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

LANGUAGES = (
    "Arabic",
    "Assamese",
    "Bengali",
    "Chinese Mandarin",
    "English",
    "French",
    "German",
    "Hindi",
    "Italian",
    "Japanese",
    "Korean",
    "Portuguese",
    "Russian",
    "Spanish",
    "Tamil",
    "Telugu",
    "Urdu",
)
CARD_COUNTS = (5, 10, 15, 20)

Difficulty = Literal["Easy", "Medium", "Hard"]
AnswerType = Literal["True or False", "Multiple Choice", "Short Answer"]
InputKind = Literal["topic", "word", "image"]


class GenerateRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    data: str
    lang: str = "English"
    num_flashcards: int = Field(default=10, alias="numFlashcards")
    difficulty: Difficulty = "Medium"
    answer_type: AnswerType = Field(default="True or False", alias="answerType")
    file_type: Optional[InputKind] = Field(default=None, alias="fileType")


class GeneratedCard(BaseModel):
    front: str
    back: str


class GenerateResponse(BaseModel):
    flashcards: Optional[list[GeneratedCard]] = None
    error: Optional[str] = None


class RecommendationResponse(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    recommended_topic: str = Field(alias="recommendedTopic")
