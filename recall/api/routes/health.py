from fastapi import APIRouter, Depends

from recall.api.dependencies import get_knowledge_service
from recall.features.knowledge import KnowledgeService

router = APIRouter(tags=["Health"])


@router.get("/health")
async def health_check(knowledge: KnowledgeService = Depends(get_knowledge_service)):
    """Health endpoint for monitoring: store reachability and provider configuration."""
    return await knowledge.health_check()
