"""
Search engine - the "read" side of the knowledge base.

Semantic search ranks stored chunks by cosine similarity to the query
embedding; keyword search runs Postgres full-text search over items.
Hybrid search returns both result sets side by side and leaves merging
to the caller.
"""

import asyncio
import json
import logging
from typing import List, Optional, Protocol, Sequence, Tuple

import numpy as np

from recall.core.config import DEFAULT_KNOWLEDGE_SETTINGS, KnowledgeSettings
from recall.core.logging_utils import sanitize_for_logging
from recall.features.database.models import EmbeddingRecord, KnowledgeItem
from recall.features.knowledge.models import HybridSearchResult, SearchResultChunk
from recall.services.embeddings import EmbeddingService

logger = logging.getLogger("Recall.Knowledge.Search")

ScoredChunk = Tuple[EmbeddingRecord, float]


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """
    Cosine similarity of two vectors.

    Returns 0.0 for empty vectors, zero-norm vectors, or vectors of
    different lengths.
    """
    if len(a) == 0 or len(b) == 0 or len(a) != len(b):
        return 0.0

    va = np.asarray(a, dtype=float)
    vb = np.asarray(b, dtype=float)
    norm = np.linalg.norm(va) * np.linalg.norm(vb)
    if norm == 0:
        return 0.0
    return float(np.dot(va, vb) / norm)


def parse_vector(raw: str) -> Optional[List[float]]:
    """Decode a stored vector; None if it is not a JSON list of numbers."""
    try:
        value = json.loads(raw)
    except (TypeError, ValueError):
        return None
    if not isinstance(value, list):
        return None
    if not all(isinstance(x, (int, float)) and not isinstance(x, bool) for x in value):
        return None
    return [float(x) for x in value]


class VectorIndex(Protocol):
    async def top_k(
        self,
        query_vector: List[float],
        limit: int,
        item_id: Optional[str] = None,
    ) -> List[ScoredChunk]:
        ...


class ExhaustiveVectorIndex:
    """
    Score every stored chunk against the query.

    Fine for a personal knowledge base (thousands of chunks). Swap in a
    different VectorIndex when the corpus outgrows a full scan.
    """

    def __init__(self, store):
        self.store = store

    async def top_k(
        self,
        query_vector: List[float],
        limit: int,
        item_id: Optional[str] = None,
    ) -> List[ScoredChunk]:
        records = await self.store.embeddings.list_all(item_id=item_id)

        scored: List[ScoredChunk] = []
        mismatched = 0
        for record in records:
            vector = parse_vector(record.embedding)
            if vector is None:
                logger.debug(f"Skipping unparsable embedding {record.id}")
                continue
            if len(vector) != len(query_vector):
                mismatched += 1
            scored.append((record, cosine_similarity(query_vector, vector)))

        if mismatched:
            logger.warning(f"{mismatched} stored vectors differ in length from the query vector, scored 0")

        scored.sort(key=lambda pair: pair[1], reverse=True)
        return scored[:limit]


class SearchEngine:
    """Semantic, keyword and hybrid search over the knowledge store."""

    def __init__(
        self,
        store,
        embeddings: EmbeddingService,
        settings: Optional[KnowledgeSettings] = None,
        vector_index: Optional[VectorIndex] = None,
    ):
        self.store = store
        self.embeddings = embeddings
        self.settings = settings or DEFAULT_KNOWLEDGE_SETTINGS
        self.vector_index = vector_index or ExhaustiveVectorIndex(store)

    async def semantic_search(
        self,
        query: str,
        limit: Optional[int] = None,
        item_id: Optional[str] = None,
    ) -> List[SearchResultChunk]:
        """
        Rank stored chunks by similarity to the query.

        Args:
            query: Natural-language query
            limit: Max chunks to return (default_search_limit when omitted)
            item_id: Restrict the scan to one item's chunks

        Returns:
            Chunks ordered by descending score; empty on any failure
        """
        if not query or not query.strip():
            return []
        limit = limit or self.settings.default_search_limit

        try:
            query_vector = await self.embeddings.embed(query)
        except Exception as e:
            logger.error(f"Query embedding failed for '{sanitize_for_logging(query)}': {e}")
            return []

        try:
            scored = await self.vector_index.top_k(query_vector, limit, item_id=item_id)
            items = await self.store.items.list_by_ids(list({record.item_id for record, _ in scored}))
        except Exception as e:
            logger.error(f"Semantic search failed: {e}")
            return []

        by_id = {item.id: item for item in items}
        results = []
        for record, score in scored:
            item = by_id.get(record.item_id)
            results.append(
                SearchResultChunk(
                    item_id=record.item_id,
                    chunk_index=record.chunk_index,
                    chunk_text=record.chunk_text,
                    score=score,
                    title=item.title if item else None,
                    summary=item.summary if item else None,
                )
            )

        logger.info(f"Semantic search '{sanitize_for_logging(query, 50)}': {len(results)} chunks")
        return results

    async def keyword_search(self, query: str, limit: Optional[int] = None) -> List[KnowledgeItem]:
        """Full-text search over item title, summary and content."""
        if not query or not query.strip():
            return []
        limit = limit or self.settings.keyword_search_limit

        try:
            return await self.store.items.full_text_search(query, limit=limit)
        except Exception as e:
            logger.error(f"Keyword search failed: {e}")
            return []

    async def hybrid_search(self, query: str, limit: Optional[int] = None) -> HybridSearchResult:
        """Run semantic and keyword search concurrently."""
        limit = limit or self.settings.hybrid_search_limit
        semantic, keyword = await asyncio.gather(
            self.semantic_search(query, limit=limit),
            self.keyword_search(query, limit=limit),
        )
        return HybridSearchResult(semantic=semantic, keyword=keyword)
