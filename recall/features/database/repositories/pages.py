"""Pages Repository - standalone authored documents."""

import logging
from typing import Any, Dict, List, Optional

from recall.features.database.models import Page
from recall.features.database.repositories.records import new_id, now_ms
from recall.shared.constants import PAGES_TABLE

logger = logging.getLogger("Recall.Database.Pages")


class PagesRepository:
    """Repository for page operations. Pages are not chunked or embedded."""

    def __init__(self, client):
        """Initialize with Supabase client."""
        self.client = client

    async def create(
        self,
        title: str,
        content: str = "",
        source_item_id: Optional[str] = None,
        page_id: Optional[str] = None,
    ) -> Page:
        now = now_ms()
        payload = {
            "id": page_id or new_id(),
            "title": title,
            "content": content or "",
            "source_item_id": source_item_id,
            "created_at": now,
            "updated_at": now,
        }
        try:
            await self.client.table(PAGES_TABLE).insert(payload).execute()
        except Exception as e:
            logger.error(f"Error creating page '{title}': {e}")
            raise
        return Page(**payload)

    async def get_by_id(self, page_id: str) -> Optional[Page]:
        result = await self.client.table(PAGES_TABLE).select("*").eq("id", page_id).limit(1).execute()
        return Page.model_validate(result.data[0]) if result.data else None

    async def update(
        self,
        page_id: str,
        title: Optional[str] = None,
        content: Optional[str] = None,
    ) -> Optional[Page]:
        changes: Dict[str, Any] = {"updated_at": now_ms()}
        if title is not None:
            changes["title"] = title
        if content is not None:
            changes["content"] = content
        result = await self.client.table(PAGES_TABLE).update(changes).eq("id", page_id).execute()
        if not result.data:
            return None
        return await self.get_by_id(page_id)

    async def delete(self, page_id: str) -> bool:
        result = await self.client.table(PAGES_TABLE).delete().eq("id", page_id).execute()
        return bool(result.data)

    async def list_all(self) -> List[Page]:
        result = await self.client.table(PAGES_TABLE).select("*").order("updated_at", desc=True).execute()
        return [Page.model_validate(row) for row in (result.data or [])]
