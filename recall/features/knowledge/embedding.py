"""
Embedding pipeline - turn an item's content into stored chunk vectors.

This is the "write" side of retrieval. An item's embeddings are always
replaced as a set: every old row is deleted before the new chunks are
written, so a content change never leaves stale chunks behind.
"""

import logging
from typing import Optional

from recall.core.config import DEFAULT_KNOWLEDGE_SETTINGS, KnowledgeSettings
from recall.features.knowledge.chunker import chunk_text
from recall.features.knowledge.models import EmbedResult
from recall.services.embeddings import EmbeddingService

logger = logging.getLogger("Recall.Knowledge.Embedding")


class EmbeddingPipeline:
    """Chunk, embed and persist item content."""

    def __init__(
        self,
        store,
        embeddings: EmbeddingService,
        settings: Optional[KnowledgeSettings] = None,
    ):
        self.store = store
        self.embeddings = embeddings
        self.settings = settings or DEFAULT_KNOWLEDGE_SETTINGS

    async def embed_item(self, item_id: str, content: str) -> EmbedResult:
        """
        Replace the embeddings of an item with fresh ones for ``content``.

        Chunks are embedded one at a time in order. If chunk k fails, the
        first k chunks stay stored and the error names the failing chunk
        ("Chunk k+1/N: ..."). A failure to clear the old rows stops before
        any chunk is embedded. Store failures are reported, never raised.

        Returns:
            EmbedResult with the number of chunks stored
        """
        chunks = chunk_text(content, self.settings)
        if not chunks:
            return EmbedResult(chunk_count=0)

        total = len(chunks)
        try:
            await self.store.embeddings.delete_for_item(item_id)
        except Exception as e:
            message = getattr(e, "message", None) or str(e)
            logger.error(f"Could not clear old chunks for {item_id}: {message}")
            return EmbedResult(chunk_count=0, error=f"Clearing previous chunks failed: {message}")

        for index, chunk in enumerate(chunks):
            try:
                vector = await self.embeddings.embed(chunk)
                await self.store.embeddings.insert(item_id, index, chunk, vector)
            except Exception as e:
                message = getattr(e, "message", None) or str(e)
                logger.error(f"Embedding stopped for {item_id} at chunk {index + 1}/{total}: {message}")
                return EmbedResult(
                    chunk_count=index,
                    error=f"Chunk {index + 1}/{total}: {message}",
                )

        logger.info(f"Embedded {item_id}: {total} chunks")
        return EmbedResult(chunk_count=total)
