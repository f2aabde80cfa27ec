"""Embedding service: text in, fixed-length float vector out."""

import logging
from typing import List, Optional, Protocol

from openai import AsyncOpenAI, OpenAIError

from recall.core.config import settings
from recall.services.openai_client import get_openai_client
from recall.shared.constants import EMBEDDING_INPUT_CHARS
from recall.shared.errors import EmbeddingServiceError

logger = logging.getLogger("Recall.Services.Embeddings")


class EmbeddingService(Protocol):
    """Anything that can turn a string into a vector."""

    async def embed(self, text: str) -> List[float]:
        ...


class OpenAIEmbeddingService:
    """Embeddings via the OpenAI API (one request per text)."""

    def __init__(self, client: Optional[AsyncOpenAI] = None, model: Optional[str] = None) -> None:
        self._client = client
        self.model = model or settings.OPENAI_EMBEDDING_MODEL

    @property
    def client(self) -> AsyncOpenAI:
        """Lazy-load the shared client."""
        if self._client is None:
            self._client = get_openai_client()
        return self._client

    async def embed(self, text: str) -> List[float]:
        if len(text) > EMBEDDING_INPUT_CHARS:
            logger.warning(
                "Embedding input clipped from %d to %d chars; the tail is not searchable",
                len(text),
                EMBEDDING_INPUT_CHARS,
            )
        try:
            response = await self.client.embeddings.create(
                model=self.model,
                input=text[:EMBEDDING_INPUT_CHARS],
            )
        except OpenAIError as exc:
            logger.warning("Embedding request failed with model %s: %s", self.model, exc)
            raise EmbeddingServiceError(str(exc)) from exc

        if not response.data:
            raise EmbeddingServiceError(f"Model {self.model} returned no embedding")
        return list(response.data[0].embedding)
