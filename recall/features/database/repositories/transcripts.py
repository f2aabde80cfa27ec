"""
Transcripts Repository - voice transcriptions as an indexing source.

Transcripts are produced by the audio pipeline; the knowledge base only
reads them. The recording's file name doubles as the item title.
"""

import logging
from typing import List, Optional

from recall.features.database.models import SourceDocument
from recall.shared.constants import TRANSCRIPTS_TABLE

logger = logging.getLogger("Recall.Database.Transcripts")


class TranscriptsRepository:
    """Read-only access to transcripts for the indexer."""

    label = "Transcript"
    item_type = "transcription"

    def __init__(self, client):
        """Initialize with Supabase client."""
        self.client = client

    async def get_document(self, transcript_id: str) -> Optional[SourceDocument]:
        result = await self.client.table(TRANSCRIPTS_TABLE).select(
            "id, source_file, full_text"
        ).eq("id", transcript_id).limit(1).execute()
        if not result.data:
            return None

        row = result.data[0]
        return SourceDocument(
            id=row["id"],
            title=row.get("source_file") or None,
            content=row.get("full_text") or "",
            item_type=self.item_type,
        )

    async def list_ids(self) -> List[str]:
        """All transcript ids, oldest first."""
        result = await self.client.table(TRANSCRIPTS_TABLE).select("id").order("created_at").execute()
        return [row["id"] for row in (result.data or [])]
