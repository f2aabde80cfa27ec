"""
Embeddings Repository - chunk vectors owned by knowledge items.

Vectors are stored as JSON text; callers parse them at read time so a
single corrupt row can be skipped instead of failing a whole scan.
"""

import json
import logging
from typing import List, Optional

from recall.features.database.models import EmbeddingRecord
from recall.features.database.repositories.records import new_id, now_ms
from recall.shared.constants import EMBEDDINGS_TABLE

logger = logging.getLogger("Recall.Database.Embeddings")

EMBEDDING_COLUMNS = "id, item_id, chunk_index, chunk_text, embedding, created_at"

# PostgREST caps rows per response; scans page through in blocks this size
SCAN_PAGE_SIZE = 1000


class EmbeddingsRepository:
    """Repository for embedding rows."""

    def __init__(self, client, page_size: int = SCAN_PAGE_SIZE):
        """Initialize with Supabase client."""
        self.client = client
        self.page_size = page_size

    async def insert(
        self,
        item_id: str,
        chunk_index: int,
        chunk_text: str,
        vector: List[float],
    ) -> EmbeddingRecord:
        """Persist one chunk and its vector."""
        payload = {
            "id": new_id(),
            "item_id": item_id,
            "chunk_index": chunk_index,
            "chunk_text": chunk_text,
            "embedding": json.dumps(vector),
            "created_at": now_ms(),
        }
        await self.client.table(EMBEDDINGS_TABLE).insert(payload).execute()
        return EmbeddingRecord(**payload)

    async def delete_for_item(self, item_id: str) -> int:
        """Remove every embedding of an item. Returns the number of rows deleted."""
        try:
            result = await self.client.table(EMBEDDINGS_TABLE).delete().eq("item_id", item_id).execute()
        except Exception as e:
            logger.error(f"Error deleting embeddings for {item_id}: {e}")
            raise
        return len(result.data or [])

    async def list_for_item(self, item_id: str) -> List[EmbeddingRecord]:
        result = await self.client.table(EMBEDDINGS_TABLE).select(EMBEDDING_COLUMNS).eq(
            "item_id", item_id
        ).order("chunk_index").execute()
        return [EmbeddingRecord.model_validate(row) for row in (result.data or [])]

    async def list_all(self, item_id: Optional[str] = None) -> List[EmbeddingRecord]:
        """
        Load every embedding row, optionally for a single item.

        Pages through the table so the scan is not silently capped at the
        server's max rows per request.
        """
        records: List[EmbeddingRecord] = []
        offset = 0

        while True:
            query = self.client.table(EMBEDDINGS_TABLE).select(EMBEDDING_COLUMNS)
            if item_id:
                query = query.eq("item_id", item_id)
            result = await query.order("item_id").order("chunk_index").range(
                offset, offset + self.page_size - 1
            ).execute()

            rows = result.data or []
            records.extend(EmbeddingRecord.model_validate(row) for row in rows)
            if len(rows) < self.page_size:
                break
            offset += self.page_size

        return records

    async def count_for_item(self, item_id: str) -> int:
        result = await self.client.table(EMBEDDINGS_TABLE).select("id").eq("item_id", item_id).execute()
        return len(result.data or [])
