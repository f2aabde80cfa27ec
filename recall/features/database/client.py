"""
Knowledge Store - Unified Access to All Knowledge Repositories

Provides organized access to data through domain-specific repositories.
This is a thin wrapper that delegates to focused repository classes.
"""

import logging
from typing import Optional

from recall.core.database import get_supabase
from recall.features.database.repositories.conversations import ConversationsRepository
from recall.features.database.repositories.embeddings import EmbeddingsRepository
from recall.features.database.repositories.items import KnowledgeItemsRepository
from recall.features.database.repositories.pages import PagesRepository
from recall.features.database.repositories.projects import ProjectsRepository
from recall.features.database.repositories.tags import TagsRepository
from recall.features.database.repositories.transcripts import TranscriptsRepository

logger = logging.getLogger("Recall.Database")


class KnowledgeStore:
    """
    Unified store providing access to all repositories.

    Usage:
        store = await get_knowledge_store()
        item = await store.items.get_by_source_id(conversation_id)
        await store.embeddings.delete_for_item(item.id)
    """

    def __init__(self, client):
        """Initialize with an async Supabase client (or a test double)."""
        self._client = client

        self.items = KnowledgeItemsRepository(client)
        self.embeddings = EmbeddingsRepository(client)
        self.tags = TagsRepository(client)
        self.projects = ProjectsRepository(client)
        self.pages = PagesRepository(client)

        # Indexing sources
        self.conversations = ConversationsRepository(client)
        self.transcripts = TranscriptsRepository(client)

        logger.info("Knowledge store initialized with all repositories")

    @property
    def client(self):
        """Direct access to Supabase client for advanced queries."""
        return self._client

    def table(self, name: str):
        """Direct table access for one-off queries."""
        return self._client.table(name)


_store: Optional[KnowledgeStore] = None


async def get_knowledge_store() -> KnowledgeStore:
    """Get the singleton store bound to the shared Supabase client."""
    global _store
    if _store is None:
        _store = KnowledgeStore(await get_supabase())
    return _store
