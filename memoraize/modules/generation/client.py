"""HTTP client for the flashcard generation service."""

from __future__ import annotations

from typing import Optional

import httpx
from pydantic import ValidationError

from memoraize.core.config import settings
from memoraize.modules.generation.models import (
    GenerateRequest,
    GenerateResponse,
    GeneratedCard,
    RecommendationResponse,
)


class GenerationError(Exception):
    """Raised when the generation service fails or answers with an error."""

    pass


class GenerationClient:
    """Talks to ``<base_url>/generate``.

    ``transport`` lets callers swap the network layer (tests use
    ``httpx.MockTransport``).
    """

    def __init__(
        self,
        base_url: Optional[str] = None,
        *,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.base_url = (base_url or settings.generation.base_url).rstrip("/")
        self.timeout = timeout if timeout is not None else settings.generation.timeout_seconds
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url, timeout=self.timeout, transport=self.transport
        )

    async def recommend_topic(self, topics: list[str]) -> str:
        """Ask for one new topic given the names the user already studies."""
        params = {"topics": ", ".join(topics)}
        try:
            async with self._client() as client:
                response = await client.get("/generate", params=params)
                response.raise_for_status()
                payload = RecommendationResponse.model_validate(response.json())
        except httpx.HTTPError as e:
            raise GenerationError(f"HTTP error requesting recommendation: {e}") from e
        except (ValueError, ValidationError) as e:
            raise GenerationError(f"Malformed recommendation response: {e}") from e
        return payload.recommended_topic

    async def generate(self, request: GenerateRequest) -> list[GeneratedCard]:
        body = request.model_dump(by_alias=True)
        try:
            async with self._client() as client:
                response = await client.post("/generate", json=body)
                payload = GenerateResponse.model_validate(response.json())
        except httpx.HTTPError as e:
            raise GenerationError(f"HTTP error generating flashcards: {e}") from e
        except (ValueError, ValidationError) as e:
            raise GenerationError(f"Malformed generation response: {e}") from e

        if payload.error or response.is_error:
            raise GenerationError(
                payload.error or f"Generation failed with status {response.status_code}"
            )
        if payload.flashcards is None:
            raise GenerationError("Generation response carried no flashcards")
        return payload.flashcards
