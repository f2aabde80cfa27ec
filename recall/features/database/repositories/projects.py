"""Projects Repository - projects and the project_items association."""

import logging
from typing import Any, Dict, List, Optional

from recall.features.database.models import Project
from recall.features.database.repositories.records import new_id, now_ms
from recall.shared.constants import PROJECT_ITEMS_TABLE, PROJECTS_TABLE

logger = logging.getLogger("Recall.Database.Projects")


class ProjectsRepository:
    """Repository for project operations."""

    def __init__(self, client):
        """Initialize with Supabase client."""
        self.client = client

    async def create(
        self,
        name: str,
        description: Optional[str] = None,
        color: Optional[str] = None,
        project_id: Optional[str] = None,
    ) -> Project:
        now = now_ms()
        payload = {
            "id": project_id or new_id(),
            "name": name,
            "description": description,
            "color": color,
            "created_at": now,
            "updated_at": now,
        }
        try:
            await self.client.table(PROJECTS_TABLE).insert(payload).execute()
        except Exception as e:
            logger.error(f"Error creating project '{name}': {e}")
            raise
        logger.info(f"Project created: {payload['id']}")
        return Project(**payload)

    async def get_by_id(self, project_id: str) -> Optional[Project]:
        result = await self.client.table(PROJECTS_TABLE).select("*").eq("id", project_id).limit(1).execute()
        return Project.model_validate(result.data[0]) if result.data else None

    async def list_all(self) -> List[Project]:
        result = await self.client.table(PROJECTS_TABLE).select("*").order("updated_at", desc=True).execute()
        return [Project.model_validate(row) for row in (result.data or [])]

    async def update(self, project_id: str, **fields: Any) -> Optional[Project]:
        """Update name/description/color; unknown keys are ignored."""
        changes: Dict[str, Any] = {
            key: value for key, value in fields.items()
            if key in ("name", "description", "color")
        }
        changes["updated_at"] = now_ms()
        result = await self.client.table(PROJECTS_TABLE).update(changes).eq("id", project_id).execute()
        if not result.data:
            return None
        return await self.get_by_id(project_id)

    async def delete(self, project_id: str) -> bool:
        result = await self.client.table(PROJECTS_TABLE).delete().eq("id", project_id).execute()
        return bool(result.data)

    async def add_item(self, project_id: str, item_id: str) -> None:
        """Add an item to a project; already-present items are ignored."""
        await self.client.table(PROJECT_ITEMS_TABLE).upsert(
            {"project_id": project_id, "item_id": item_id},
            on_conflict="project_id,item_id",
            ignore_duplicates=True,
        ).execute()

    async def remove_item(self, project_id: str, item_id: str) -> None:
        await self.client.table(PROJECT_ITEMS_TABLE).delete().eq("project_id", project_id).eq(
            "item_id", item_id
        ).execute()
