"""Flashcard and topic generation using pydantic-ai and the Gemini provider.

Backs the ``/api/generate`` contract served by this application. Provider
imports are kept lazy so the module imports without credentials.
"""

from __future__ import annotations

from pydantic import BaseModel, Field
from pydantic_ai import Agent

from memoraize.core.config import settings
from memoraize.modules.generation.models import GenerateRequest, GeneratedCard

DEFAULT_TOPIC = "Introduction to World History"


class GeneratedDeck(BaseModel):
    flashcards: list[GeneratedCard] = Field(default_factory=list)


class TopicSuggestion(BaseModel):
    topic: str


def _build_google_model(model_name: str):
    """Build the Google Gemini model provider (lazy import)."""
    from pydantic_ai.models.google import GoogleModel
    from pydantic_ai.providers.google import GoogleProvider

    provider = GoogleProvider(api_key=settings.generation.gemini_api_key)
    return GoogleModel(model_name, provider=provider)


SYSTEM_PROMPT = (
    "You are a flashcard creator. Create concise, accurate flashcards from the "
    "given text or topic. Return a JSON object {flashcards: [{front, back}]}. "
    "Rules: "
    "- Front: a clear question or prompt, one sentence. "
    "- Back: the answer in the requested answer format. "
    "  'True or False' fronts are statements and backs are True or False plus "
    "  a short reason; 'Multiple Choice' fronts list the options and backs name "
    "  the correct one; 'Short Answer' backs are one or two sentences. "
    "- Write both sides in the requested language. "
    "- Match the requested difficulty and produce exactly the requested count. "
    "- Plain text only, no markdown, no extra keys."
)

RECOMMENDATION_PROMPT = (
    "You recommend study topics. Given the topics a learner already has "
    "flashcards for, suggest exactly one new, related but different topic. "
    "Keep it short (2-6 words). Return {topic}."
)


def _build_instruction(req: GenerateRequest) -> str:
    source = "extracted from an uploaded file" if req.file_type else "typed by the user"
    return (
        f"Create {req.num_flashcards} flashcards in {req.lang}. "
        f"Difficulty: {req.difficulty}. Answer type: {req.answer_type}.\n"
        f"Source ({source}):\n{req.data}"
    )


async def generate_flashcards(req: GenerateRequest) -> list[GeneratedCard]:
    """Generate flashcards for the given request parameters."""
    model = _build_google_model(settings.generation.flashcards_model)
    agent: Agent[None, GeneratedDeck] = Agent[None, GeneratedDeck](
        model=model,
        output_type=GeneratedDeck,
        system_prompt=SYSTEM_PROMPT,
        retries=3,
    )
    res = await agent.run(_build_instruction(req))
    return _postprocess(res.output, limit=req.num_flashcards)


async def recommend_topic(topics: str) -> str:
    names = [t.strip() for t in topics.split(",") if t.strip()]
    if not names:
        return DEFAULT_TOPIC
    model = _build_google_model(settings.generation.recommendation_model)
    agent: Agent[None, TopicSuggestion] = Agent[None, TopicSuggestion](
        model=model,
        output_type=TopicSuggestion,
        system_prompt=RECOMMENDATION_PROMPT,
        retries=2,
    )
    res = await agent.run("Existing topics: " + ", ".join(names))
    return res.output.topic.strip() or DEFAULT_TOPIC


def _postprocess(deck: GeneratedDeck, *, limit: int) -> list[GeneratedCard]:
    """Drop blank cards and cap to the requested count."""
    cards = []
    for c in deck.flashcards or []:
        front = (c.front or "").strip()
        back = (c.back or "").strip()
        if front and back:
            cards.append(GeneratedCard(front=front, back=back))
    return cards[: max(1, limit)]
