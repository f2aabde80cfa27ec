from recall.features.knowledge import KnowledgeService
from recall.features.knowledge import get_knowledge_service as _get_knowledge_service


async def get_knowledge_service() -> KnowledgeService:
    """Provide the singleton knowledge service for request handlers."""
    return await _get_knowledge_service()
