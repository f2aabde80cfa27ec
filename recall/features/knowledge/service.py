"""
Knowledge Service - Main interface for the knowledge base.

This is the primary class that the API and scripts should use. It wires
the store, embedding pipeline, indexers and search engine together and
exposes item, tag, project and page management on top.
"""

import functools
import logging
import re
from typing import Any, Dict, List, Optional, Tuple

from recall.core.config import DEFAULT_KNOWLEDGE_SETTINGS, KnowledgeSettings, settings as app_settings
from recall.features.database import UNSET, KnowledgeStore, get_knowledge_store
from recall.features.database.models import (
    KnowledgeItem,
    KnowledgeItemWithTags,
    Page,
    Project,
    Tag,
)
from recall.features.knowledge.embedding import EmbeddingPipeline
from recall.features.knowledge.indexer import KnowledgeIndexer
from recall.features.knowledge.models import (
    AskResult,
    BatchIndexResult,
    EmbedResult,
    HybridSearchResult,
    IndexResult,
    SearchResultChunk,
)
from recall.features.knowledge.search import SearchEngine, VectorIndex
from recall.services.embeddings import EmbeddingService, OpenAIEmbeddingService
from recall.services.llm import ClaudeCompletionService, CompletionService
from recall.shared.constants import (
    ASK_CONTEXT_CHUNKS,
    ASK_CONTEXT_SEPARATOR,
    ASK_NO_CONTEXT_NOTE,
    ASK_SYSTEM_PREFIX,
    KNOWLEDGE_ITEMS_TABLE,
)
from recall.shared.errors import KnowledgeError, NotFoundError, StoreError, ValidationError

logger = logging.getLogger("Recall.Knowledge.Service")

# Singleton instance
_knowledge_service = None


def _store_errors(method):
    """Re-raise unexpected store failures as StoreError; typed errors pass through."""

    @functools.wraps(method)
    async def wrapper(self, *args, **kwargs):
        try:
            return await method(self, *args, **kwargs)
        except KnowledgeError:
            raise
        except Exception as e:
            logger.error(f"{method.__name__} failed: {e}")
            raise StoreError(
                f"Store operation failed: {method.__name__}",
                details={"reason": str(e)},
            ) from e

    return wrapper


class KnowledgeService:
    """
    Unified knowledge service.

    Usage:
        knowledge = await get_knowledge_service()

        # Search across all items
        results = await knowledge.search("What did we decide about the budget?")

        # Index a new conversation
        await knowledge.index_source("conversation", conversation_id)

        # Ask a question answered from indexed content
        answer = await knowledge.ask("When is the offsite?")
    """

    def __init__(
        self,
        store: KnowledgeStore,
        embeddings: EmbeddingService,
        completions: CompletionService,
        settings: Optional[KnowledgeSettings] = None,
        vector_index: Optional[VectorIndex] = None,
    ):
        self.store = store
        self.completions = completions
        self.settings = settings or DEFAULT_KNOWLEDGE_SETTINGS
        self.pipeline = EmbeddingPipeline(store, embeddings, self.settings)
        self.search_engine = SearchEngine(store, embeddings, self.settings, vector_index=vector_index)
        self.indexers: Dict[str, KnowledgeIndexer] = {
            "conversation": KnowledgeIndexer(store, self.pipeline, completions, store.conversations),
            "transcript": KnowledgeIndexer(store, self.pipeline, completions, store.transcripts),
        }

    # ==================== SEARCH METHODS ====================

    async def search(self, query: str, limit: Optional[int] = None) -> HybridSearchResult:
        """Hybrid search: semantic chunks and keyword-matched items, side by side."""
        return await self.search_engine.hybrid_search(query, limit=limit)

    async def semantic_search(
        self,
        query: str,
        limit: Optional[int] = None,
        item_id: Optional[str] = None,
    ) -> List[SearchResultChunk]:
        return await self.search_engine.semantic_search(query, limit=limit, item_id=item_id)

    async def keyword_search(self, query: str, limit: Optional[int] = None) -> List[KnowledgeItem]:
        return await self.search_engine.keyword_search(query, limit=limit)

    async def ask(self, question: str, item_id: Optional[str] = None) -> AskResult:
        """
        Answer a question from the knowledge base.

        The closest chunks (optionally from one item only) are handed to the
        completion service as context. With no matching chunks the model is
        told so and still answers.

        Raises:
            ValidationError: blank question
            CompletionServiceError: the completion service failed
        """
        question = question.strip()
        if not question:
            raise ValidationError("Question must not be empty")

        chunks = await self.search_engine.semantic_search(question, limit=ASK_CONTEXT_CHUNKS, item_id=item_id)
        if chunks:
            context = ASK_CONTEXT_SEPARATOR.join(
                f"[{chunk.title or 'Item'}]: {chunk.chunk_text}" for chunk in chunks
            )
            system_prompt = f"{ASK_SYSTEM_PREFIX}\n\n## Context\n\n{context}"
        else:
            system_prompt = f"{ASK_SYSTEM_PREFIX}\n\n{ASK_NO_CONTEXT_NOTE}"

        logger.info(f"Answering question with {len(chunks)} context chunks")
        answer = await self.completions.complete(system_prompt, question)
        return AskResult(answer=answer, sources=chunks)

    # ==================== INDEXING METHODS ====================

    def indexer_for(self, source_type: str) -> KnowledgeIndexer:
        indexer = self.indexers.get(source_type)
        if indexer is None:
            raise ValidationError(
                f"Unknown source type: {source_type}",
                details={"source_type": source_type, "supported": sorted(self.indexers)},
            )
        return indexer

    async def index_source(self, source_type: str, source_id: str) -> IndexResult:
        """Index one conversation or transcript. Safe to call repeatedly."""
        return await self.indexer_for(source_type).index_source(source_id)

    async def index_all(self, source_type: str) -> BatchIndexResult:
        """
        Index every document of a source type.

        Use for initial setup or after a bulk import.
        """
        return await self.indexer_for(source_type).index_all_sources()

    # ==================== ITEMS ====================

    @_store_errors
    async def create_item(
        self,
        item_type: str,
        title: str,
        content: str,
        summary: Optional[str] = None,
    ) -> Tuple[KnowledgeItem, EmbedResult]:
        """
        Create an item directly and embed its content.

        Raises:
            InvalidItemTypeError: type outside the closed set; nothing is written
        """
        item = await self.store.items.create(
            item_type=item_type,
            title=title,
            content=content,
            summary=summary,
        )
        embed_result = await self.pipeline.embed_item(item.id, content)
        return item, embed_result

    @_store_errors
    async def get_item(self, item_id: str) -> KnowledgeItemWithTags:
        item = await self.store.items.get_by_id(item_id)
        if item is None:
            raise NotFoundError("Knowledge item", item_id)
        tags = await self.store.tags.list_for_item(item_id)
        return KnowledgeItemWithTags(**item.model_dump(), tags=tags)

    @_store_errors
    async def list_items(
        self,
        limit: int = 100,
        tag_id: Optional[str] = None,
        project_id: Optional[str] = None,
    ) -> List[KnowledgeItem]:
        if tag_id:
            return (await self.store.items.list_by_tag(tag_id))[:limit]
        if project_id:
            return (await self.store.items.list_by_project(project_id))[:limit]
        return await self.store.items.list_recent(limit=limit)

    @_store_errors
    async def update_item(
        self,
        item_id: str,
        title: Optional[str] = None,
        content: Optional[str] = None,
        summary: Optional[str] = UNSET,
    ) -> Tuple[KnowledgeItem, Optional[EmbedResult]]:
        """
        Update an item in place.

        ``None`` leaves title and content unchanged; ``summary=None`` clears
        the summary. Changing the content replaces the item's embeddings.

        Returns:
            (updated item, embed result if the content was re-embedded)
        """
        existing = await self.store.items.get_by_id(item_id)
        if existing is None:
            raise NotFoundError("Knowledge item", item_id)

        fields: Dict[str, Any] = {}
        if title is not None:
            fields["title"] = title
        if content is not None:
            fields["content"] = content
        if summary is not UNSET:
            fields["summary"] = summary

        item = await self.store.items.update(item_id, **fields) if fields else existing
        if item is None:
            raise NotFoundError("Knowledge item", item_id)

        embed_result = None
        if content is not None and content != existing.content:
            embed_result = await self.pipeline.embed_item(item_id, content)
        return item, embed_result

    @_store_errors
    async def delete_item(self, item_id: str) -> None:
        """Delete an item with its embeddings, tag links and project links."""
        if not await self.store.items.delete(item_id):
            raise NotFoundError("Knowledge item", item_id)

    @_store_errors
    async def reembed_item(self, item_id: str) -> EmbedResult:
        item = await self.store.items.get_by_id(item_id)
        if item is None:
            raise NotFoundError("Knowledge item", item_id)
        return await self.pipeline.embed_item(item.id, item.content)

    # ==================== TAGS ====================

    @_store_errors
    async def list_tags(self) -> List[Tag]:
        return await self.store.tags.list_all()

    @_store_errors
    async def tags_for_item(self, item_id: str) -> List[Tag]:
        return await self.store.tags.list_for_item(item_id)

    @_store_errors
    async def tag_item(self, item_id: str, name: str, color: Optional[str] = None) -> Tag:
        """Attach a manual tag by name, creating the tag if it does not exist."""
        if await self.store.items.get_by_id(item_id) is None:
            raise NotFoundError("Knowledge item", item_id)
        name = re.sub(r"\s+", "-", name.strip().lower())
        if not name:
            raise ValidationError("Tag name must not be empty")
        tag = await self.store.tags.get_or_create(name, color=color, is_auto=False)
        await self.store.tags.add_to_item(item_id, tag.id)
        return tag

    @_store_errors
    async def untag_item(self, item_id: str, tag_id: str) -> None:
        await self.store.tags.remove_from_item(item_id, tag_id)

    # ==================== PROJECTS ====================

    @_store_errors
    async def create_project(
        self,
        name: str,
        description: Optional[str] = None,
        color: Optional[str] = None,
    ) -> Project:
        return await self.store.projects.create(name, description=description, color=color)

    @_store_errors
    async def list_projects(self) -> List[Project]:
        return await self.store.projects.list_all()

    @_store_errors
    async def project_items(self, project_id: str) -> List[KnowledgeItem]:
        if await self.store.projects.get_by_id(project_id) is None:
            raise NotFoundError("Project", project_id)
        return await self.store.items.list_by_project(project_id)

    @_store_errors
    async def add_to_project(self, project_id: str, item_id: str) -> None:
        if await self.store.projects.get_by_id(project_id) is None:
            raise NotFoundError("Project", project_id)
        if await self.store.items.get_by_id(item_id) is None:
            raise NotFoundError("Knowledge item", item_id)
        await self.store.projects.add_item(project_id, item_id)

    @_store_errors
    async def remove_from_project(self, project_id: str, item_id: str) -> None:
        await self.store.projects.remove_item(project_id, item_id)

    # ==================== PAGES ====================

    @_store_errors
    async def create_page(
        self,
        title: str,
        content: str = "",
        source_item_id: Optional[str] = None,
    ) -> Page:
        return await self.store.pages.create(title, content=content, source_item_id=source_item_id)

    @_store_errors
    async def get_page(self, page_id: str) -> Page:
        page = await self.store.pages.get_by_id(page_id)
        if page is None:
            raise NotFoundError("Page", page_id)
        return page

    @_store_errors
    async def update_page(
        self,
        page_id: str,
        title: Optional[str] = None,
        content: Optional[str] = None,
    ) -> Page:
        page = await self.store.pages.update(page_id, title=title, content=content)
        if page is None:
            raise NotFoundError("Page", page_id)
        return page

    @_store_errors
    async def delete_page(self, page_id: str) -> None:
        if not await self.store.pages.delete(page_id):
            raise NotFoundError("Page", page_id)

    @_store_errors
    async def list_pages(self) -> List[Page]:
        return await self.store.pages.list_all()

    # ==================== HEALTH ====================

    async def health_check(self) -> Dict[str, Any]:
        """Check if the knowledge system is healthy."""
        store_ok = False
        try:
            await self.store.table(KNOWLEDGE_ITEMS_TABLE).select("id").limit(1).execute()
            store_ok = True
        except Exception as e:
            logger.error(f"Store health check failed: {e}")

        embeddings_ok = bool(app_settings.OPENAI_API_KEY)
        completions_ok = bool(app_settings.ANTHROPIC_API_KEY)

        return {
            "store_connected": store_ok,
            "embeddings_configured": embeddings_ok,
            "completions_configured": completions_ok,
            "status": "healthy" if (store_ok and embeddings_ok) else "unhealthy",
        }


async def get_knowledge_service() -> KnowledgeService:
    """Get the singleton knowledge service bound to the production clients."""
    global _knowledge_service

    if _knowledge_service is None:
        _knowledge_service = KnowledgeService(
            store=await get_knowledge_store(),
            embeddings=OpenAIEmbeddingService(),
            completions=ClaudeCompletionService(),
            settings=KnowledgeSettings.from_env(),
        )

    return _knowledge_service


# For scripts and tests - build an isolated instance
def create_knowledge_service(
    store: KnowledgeStore,
    embeddings: EmbeddingService,
    completions: CompletionService,
    settings: Optional[KnowledgeSettings] = None,
) -> KnowledgeService:
    """Create a new knowledge service instance (for isolation)."""
    return KnowledgeService(store, embeddings, completions, settings=settings)
