"""
Knowledge Items Repository - knowledge_items table access.

Handles:
- Creating items (type validated before anything is written)
- Lookup by id and by source id (idempotent indexing)
- In-place updates of title/content/summary
- Listing by tag / project and full-text search over title/content/summary
"""

import logging
from typing import Any, Dict, List, Optional

from recall.features.database.repositories.records import UNSET, new_id, now_ms
from recall.features.database.models import KnowledgeItem
from recall.shared.constants import (
    ITEM_TAGS_TABLE,
    KNOWLEDGE_FTS_COLUMN,
    KNOWLEDGE_ITEM_TYPES,
    KNOWLEDGE_ITEMS_TABLE,
    PROJECT_ITEMS_TABLE,
)
from recall.shared.errors import InvalidItemTypeError

logger = logging.getLogger("Recall.Database.Items")

# Explicit column list keeps the generated fts column out of results
ITEM_COLUMNS = "id, type, title, content, summary, source_id, created_at, updated_at"


class KnowledgeItemsRepository:
    """Repository for knowledge item operations."""

    def __init__(self, client):
        """Initialize with Supabase client."""
        self.client = client

    async def create(
        self,
        item_type: str,
        title: str,
        content: str,
        summary: Optional[str] = None,
        source_id: Optional[str] = None,
        item_id: Optional[str] = None,
        created_at: Optional[int] = None,
        updated_at: Optional[int] = None,
    ) -> KnowledgeItem:
        """
        Create a knowledge item.

        Raises:
            InvalidItemTypeError: type outside conversation/transcription/page
        """
        if item_type not in KNOWLEDGE_ITEM_TYPES:
            raise InvalidItemTypeError(item_type)

        now = now_ms()
        payload = {
            "id": item_id or new_id(),
            "type": item_type,
            "title": title,
            "content": content,
            "summary": summary,
            "source_id": source_id,
            "created_at": created_at if created_at is not None else now,
            "updated_at": updated_at if updated_at is not None else now,
        }

        try:
            await self.client.table(KNOWLEDGE_ITEMS_TABLE).insert(payload).execute()
        except Exception as e:
            logger.error(f"Error creating knowledge item: {e}")
            raise

        logger.info(f"Knowledge item created: {payload['id']} ({item_type})")
        return KnowledgeItem(**payload)

    async def get_by_id(self, item_id: str) -> Optional[KnowledgeItem]:
        result = await self.client.table(KNOWLEDGE_ITEMS_TABLE).select(ITEM_COLUMNS).eq(
            "id", item_id
        ).limit(1).execute()
        return KnowledgeItem.model_validate(result.data[0]) if result.data else None

    async def get_by_source_id(self, source_id: str) -> Optional[KnowledgeItem]:
        """At most one item exists per source id."""
        result = await self.client.table(KNOWLEDGE_ITEMS_TABLE).select(ITEM_COLUMNS).eq(
            "source_id", source_id
        ).limit(1).execute()
        return KnowledgeItem.model_validate(result.data[0]) if result.data else None

    async def update(
        self,
        item_id: str,
        title: Optional[str] = UNSET,
        content: Optional[str] = UNSET,
        summary: Optional[str] = UNSET,
        updated_at: Optional[int] = None,
    ) -> Optional[KnowledgeItem]:
        """
        Update fields in place. Only the fields passed are written;
        ``summary=None`` clears the summary.

        Returns:
            The updated item, or None if it does not exist
        """
        changes: Dict[str, Any] = {"updated_at": updated_at if updated_at is not None else now_ms()}
        if title is not UNSET:
            changes["title"] = title
        if content is not UNSET:
            changes["content"] = content
        if summary is not UNSET:
            changes["summary"] = summary

        try:
            result = await self.client.table(KNOWLEDGE_ITEMS_TABLE).update(changes).eq(
                "id", item_id
            ).execute()
        except Exception as e:
            logger.error(f"Error updating knowledge item {item_id}: {e}")
            raise

        if not result.data:
            return None
        return await self.get_by_id(item_id)

    async def delete(self, item_id: str) -> bool:
        """Delete an item; embeddings and associations go with it (FK cascade)."""
        try:
            result = await self.client.table(KNOWLEDGE_ITEMS_TABLE).delete().eq("id", item_id).execute()
        except Exception as e:
            logger.error(f"Error deleting knowledge item {item_id}: {e}")
            raise
        deleted = bool(result.data)
        if deleted:
            logger.info(f"Knowledge item deleted: {item_id}")
        return deleted

    async def list_recent(self, limit: int = 500) -> List[KnowledgeItem]:
        result = await self.client.table(KNOWLEDGE_ITEMS_TABLE).select(ITEM_COLUMNS).order(
            "updated_at", desc=True
        ).limit(limit).execute()
        return [KnowledgeItem.model_validate(row) for row in (result.data or [])]

    async def list_by_ids(self, item_ids: List[str]) -> List[KnowledgeItem]:
        if not item_ids:
            return []
        result = await self.client.table(KNOWLEDGE_ITEMS_TABLE).select(ITEM_COLUMNS).in_(
            "id", item_ids
        ).order("updated_at", desc=True).execute()
        return [KnowledgeItem.model_validate(row) for row in (result.data or [])]

    async def list_by_tag(self, tag_id: str) -> List[KnowledgeItem]:
        links = await self.client.table(ITEM_TAGS_TABLE).select("item_id").eq("tag_id", tag_id).execute()
        return await self.list_by_ids([row["item_id"] for row in (links.data or [])])

    async def list_by_project(self, project_id: str) -> List[KnowledgeItem]:
        links = await self.client.table(PROJECT_ITEMS_TABLE).select("item_id").eq(
            "project_id", project_id
        ).execute()
        return await self.list_by_ids([row["item_id"] for row in (links.data or [])])

    async def full_text_search(self, query: str, limit: int = 20) -> List[KnowledgeItem]:
        """
        Token match over title/content/summary.

        Uses websearch_to_tsquery semantics, so bare words are ANDed and
        quoted phrases match as phrases.
        """
        query = query.strip()
        if not query:
            return []
        result = await self.client.table(KNOWLEDGE_ITEMS_TABLE).select(ITEM_COLUMNS).wfts(
            KNOWLEDGE_FTS_COLUMN, query
        ).limit(limit).execute()
        return [KnowledgeItem.model_validate(row) for row in (result.data or [])]
