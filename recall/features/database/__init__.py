"""
Database Feature Module - Knowledge Store

Typed persistence for knowledge items, embeddings, tags, projects and
pages, plus read access to the source documents that get indexed.

Usage:
    from recall.features.database import get_knowledge_store

    store = await get_knowledge_store()
    item = await store.items.get_by_id(item_id)
    tags = await store.tags.list_for_item(item_id)
"""

from recall.features.database.client import KnowledgeStore, get_knowledge_store
from recall.features.database.repositories.records import UNSET

__all__ = [
    "KnowledgeStore",
    "get_knowledge_store",
    "UNSET",
]
