"""
Conversations Repository - chat history as an indexing source.

A conversation row holds its messages as a JSON array of
``{"role": ..., "content": ...}`` objects. For indexing, messages are
rendered one block per message, blocks separated by a blank line so the
chunker sees each message as a paragraph.
"""

import logging
from typing import Any, Dict, List, Optional

from recall.features.database.models import SourceDocument
from recall.shared.constants import CONVERSATIONS_TABLE

logger = logging.getLogger("Recall.Database.Conversations")


def render_messages(messages: List[Dict[str, Any]]) -> str:
    """Format messages as ``[role]: content`` blocks."""
    return "\n\n".join(
        f"[{message.get('role', 'user')}]: {message.get('content', '')}"
        for message in messages
    )


class ConversationsRepository:
    """Read-only access to conversations for the indexer."""

    label = "Conversation"
    item_type = "conversation"

    def __init__(self, client):
        """Initialize with Supabase client."""
        self.client = client

    async def get_document(self, conversation_id: str) -> Optional[SourceDocument]:
        result = await self.client.table(CONVERSATIONS_TABLE).select("id, title, messages").eq(
            "id", conversation_id
        ).limit(1).execute()
        if not result.data:
            return None

        row = result.data[0]
        return SourceDocument(
            id=row["id"],
            title=row.get("title") or None,
            content=render_messages(row.get("messages") or []),
            item_type=self.item_type,
        )

    async def list_ids(self) -> List[str]:
        """All conversation ids, oldest first."""
        result = await self.client.table(CONVERSATIONS_TABLE).select("id").order("created_at").execute()
        return [row["id"] for row in (result.data or [])]
