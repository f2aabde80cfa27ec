"""
Tags Repository - tags and the item_tags association.

Tag names are unique. Re-associating an item with a tag it already has
is a no-op rather than an error.
"""

import logging
from typing import List, Optional

from postgrest.exceptions import APIError

from recall.features.database.models import Tag
from recall.features.database.repositories.records import is_unique_violation, new_id
from recall.shared.constants import ITEM_TAGS_TABLE, TAGS_TABLE

logger = logging.getLogger("Recall.Database.Tags")


class TagsRepository:
    """Repository for tag operations."""

    def __init__(self, client):
        """Initialize with Supabase client."""
        self.client = client

    async def create(
        self,
        name: str,
        color: Optional[str] = None,
        is_auto: bool = False,
        tag_id: Optional[str] = None,
    ) -> Tag:
        """
        Create a tag.

        Raises:
            postgrest.exceptions.APIError: 23505 if the name is taken
        """
        payload = {
            "id": tag_id or new_id(),
            "name": name,
            "color": color,
            "is_auto": is_auto,
        }
        await self.client.table(TAGS_TABLE).insert(payload).execute()
        logger.info(f"Tag created: {name} (auto={is_auto})")
        return Tag(**payload)

    async def get_by_id(self, tag_id: str) -> Optional[Tag]:
        result = await self.client.table(TAGS_TABLE).select("*").eq("id", tag_id).limit(1).execute()
        return Tag.model_validate(result.data[0]) if result.data else None

    async def get_by_name(self, name: str) -> Optional[Tag]:
        result = await self.client.table(TAGS_TABLE).select("*").eq("name", name).limit(1).execute()
        return Tag.model_validate(result.data[0]) if result.data else None

    async def get_or_create(self, name: str, color: Optional[str] = None, is_auto: bool = False) -> Tag:
        """
        Return the tag with this name, creating it if needed.

        A concurrent create of the same name is resolved by looking the
        tag up again.
        """
        tag = await self.get_by_name(name)
        if tag:
            return tag
        try:
            return await self.create(name, color=color, is_auto=is_auto)
        except APIError as e:
            if not is_unique_violation(e):
                raise
            tag = await self.get_by_name(name)
            if tag is None:
                raise
            return tag

    async def list_all(self) -> List[Tag]:
        result = await self.client.table(TAGS_TABLE).select("*").order("name").execute()
        return [Tag.model_validate(row) for row in (result.data or [])]

    async def delete(self, tag_id: str) -> bool:
        result = await self.client.table(TAGS_TABLE).delete().eq("id", tag_id).execute()
        return bool(result.data)

    async def add_to_item(self, item_id: str, tag_id: str) -> None:
        """Associate a tag with an item; duplicates are ignored."""
        await self.client.table(ITEM_TAGS_TABLE).upsert(
            {"item_id": item_id, "tag_id": tag_id},
            on_conflict="item_id,tag_id",
            ignore_duplicates=True,
        ).execute()

    async def remove_from_item(self, item_id: str, tag_id: str) -> None:
        await self.client.table(ITEM_TAGS_TABLE).delete().eq("item_id", item_id).eq(
            "tag_id", tag_id
        ).execute()

    async def list_for_item(self, item_id: str) -> List[Tag]:
        links = await self.client.table(ITEM_TAGS_TABLE).select("tag_id").eq("item_id", item_id).execute()
        tag_ids = [row["tag_id"] for row in (links.data or [])]
        if not tag_ids:
            return []
        result = await self.client.table(TAGS_TABLE).select("*").in_("id", tag_ids).order("name").execute()
        return [Tag.model_validate(row) for row in (result.data or [])]
