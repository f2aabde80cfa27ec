"""
Knowledge API endpoints.

These endpoints expose the knowledge system for:
1. Search (hybrid, semantic, keyword) and question answering
2. Indexing conversations and transcripts
3. Managing items, tags, projects and pages

Typed KnowledgeError exceptions raised by the service are rendered as the
standard error envelope by the application's exception handler.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Query

from recall.api.dependencies import get_knowledge_service
from recall.api.models import (
    AskRequest,
    AskResponse,
    BatchIndexResponse,
    CreateItemRequest,
    CreateItemResponse,
    CreatePageRequest,
    CreateProjectRequest,
    EmbedResponse,
    HybridSearchResponse,
    IndexResponse,
    KeywordSearchResponse,
    SemanticSearchRequest,
    SemanticSearchResponse,
    TagItemRequest,
    UpdateItemRequest,
    UpdateItemResponse,
    UpdatePageRequest,
)
from recall.core.logging_utils import sanitize_for_logging
from recall.features.database.models import (
    KnowledgeItem,
    KnowledgeItemWithTags,
    Page,
    Project,
    Tag,
)
from recall.features.knowledge import KnowledgeService

logger = logging.getLogger("Recall.API.Knowledge")
router = APIRouter(prefix="/knowledge", tags=["knowledge"])


# ===================== Search =====================

@router.get("/search", response_model=HybridSearchResponse)
async def hybrid_search(
    q: str = Query(..., description="Search query"),
    limit: Optional[int] = Query(None, ge=1, le=100),
    knowledge: KnowledgeService = Depends(get_knowledge_service),
):
    """
    Hybrid search: semantic chunk matches and keyword item matches.

    Example: /knowledge/search?q=what did we decide about the budget&limit=5
    """
    logger.info(f"Hybrid search: {sanitize_for_logging(q, 50)}")
    result = await knowledge.search(q, limit=limit)
    return HybridSearchResponse(query=q, semantic=result.semantic, keyword=result.keyword)


@router.post("/search/semantic", response_model=SemanticSearchResponse)
async def semantic_search(
    request: SemanticSearchRequest,
    knowledge: KnowledgeService = Depends(get_knowledge_service),
):
    results = await knowledge.semantic_search(request.query, limit=request.limit, item_id=request.item_id)
    return SemanticSearchResponse(query=request.query, results=results, total=len(results))


@router.get("/search/keyword", response_model=KeywordSearchResponse)
async def keyword_search(
    q: str = Query(..., description="Search terms; quoted phrases match as phrases"),
    limit: Optional[int] = Query(None, ge=1, le=100),
    knowledge: KnowledgeService = Depends(get_knowledge_service),
):
    results = await knowledge.keyword_search(q, limit=limit)
    return KeywordSearchResponse(query=q, results=results, total=len(results))


@router.post("/ask", response_model=AskResponse)
async def ask(
    request: AskRequest,
    knowledge: KnowledgeService = Depends(get_knowledge_service),
):
    """
    Answer a question using the closest chunks as context.

    Pass ``item_id`` to answer from a single item.
    """
    logger.info(f"Ask: {sanitize_for_logging(request.question, 50)}")
    result = await knowledge.ask(request.question, item_id=request.item_id)
    return AskResponse(question=request.question, answer=result.answer, sources=result.sources)


# ===================== Indexing =====================

@router.post("/index/{source_type}/{source_id}", response_model=IndexResponse)
async def index_source(
    source_type: str,
    source_id: str,
    knowledge: KnowledgeService = Depends(get_knowledge_service),
):
    """
    Index one source document (``conversation`` or ``transcript``).

    Already-indexed sources return the existing item with ``created=false``.
    """
    result = await knowledge.index_source(source_type, source_id)
    return IndexResponse(
        success=result.success,
        item_id=result.item_id,
        error=result.error,
        created=result.created,
        warnings=result.warnings,
    )


@router.post("/index/{source_type}", response_model=BatchIndexResponse)
async def index_all(
    source_type: str,
    knowledge: KnowledgeService = Depends(get_knowledge_service),
):
    """Index every document of a source type, sequentially."""
    result = await knowledge.index_all(source_type)
    return BatchIndexResponse(indexed=result.indexed, failed=result.failed, errors=result.errors)


# ===================== Items =====================

@router.get("/items", response_model=List[KnowledgeItem])
async def list_items(
    limit: int = Query(100, ge=1, le=500),
    tag_id: Optional[str] = Query(None),
    project_id: Optional[str] = Query(None),
    knowledge: KnowledgeService = Depends(get_knowledge_service),
):
    return await knowledge.list_items(limit=limit, tag_id=tag_id, project_id=project_id)


@router.post("/items", response_model=CreateItemResponse)
async def create_item(
    request: CreateItemRequest,
    knowledge: KnowledgeService = Depends(get_knowledge_service),
):
    """Create an item directly (e.g. a page) and embed its content."""
    item, embed_result = await knowledge.create_item(
        request.type,
        request.title,
        request.content,
        summary=request.summary,
    )
    embedding = EmbedResponse(item_id=item.id, chunk_count=embed_result.chunk_count, error=embed_result.error)
    return CreateItemResponse(item=item, embedding=embedding)


@router.get("/items/{item_id}", response_model=KnowledgeItemWithTags)
async def get_item(item_id: str, knowledge: KnowledgeService = Depends(get_knowledge_service)):
    return await knowledge.get_item(item_id)


@router.patch("/items/{item_id}", response_model=UpdateItemResponse)
async def update_item(
    item_id: str,
    request: UpdateItemRequest,
    knowledge: KnowledgeService = Depends(get_knowledge_service),
):
    """Update title, content or summary. Content changes are re-embedded."""
    item, embed_result = await knowledge.update_item(item_id, **request.model_dump(exclude_unset=True))
    embedding = None
    if embed_result is not None:
        embedding = EmbedResponse(item_id=item_id, chunk_count=embed_result.chunk_count, error=embed_result.error)
    return UpdateItemResponse(item=item, embedding=embedding)


@router.delete("/items/{item_id}")
async def delete_item(item_id: str, knowledge: KnowledgeService = Depends(get_knowledge_service)):
    await knowledge.delete_item(item_id)
    return {"status": "deleted", "id": item_id}


@router.post("/items/{item_id}/reembed", response_model=EmbedResponse)
async def reembed_item(item_id: str, knowledge: KnowledgeService = Depends(get_knowledge_service)):
    result = await knowledge.reembed_item(item_id)
    return EmbedResponse(item_id=item_id, chunk_count=result.chunk_count, error=result.error)


# ===================== Tags =====================

@router.get("/tags", response_model=List[Tag])
async def list_tags(knowledge: KnowledgeService = Depends(get_knowledge_service)):
    return await knowledge.list_tags()


@router.get("/items/{item_id}/tags", response_model=List[Tag])
async def list_item_tags(item_id: str, knowledge: KnowledgeService = Depends(get_knowledge_service)):
    return await knowledge.tags_for_item(item_id)


@router.post("/items/{item_id}/tags", response_model=Tag)
async def tag_item(
    item_id: str,
    request: TagItemRequest,
    knowledge: KnowledgeService = Depends(get_knowledge_service),
):
    return await knowledge.tag_item(item_id, request.name, color=request.color)


@router.delete("/items/{item_id}/tags/{tag_id}")
async def untag_item(item_id: str, tag_id: str, knowledge: KnowledgeService = Depends(get_knowledge_service)):
    await knowledge.untag_item(item_id, tag_id)
    return {"status": "removed", "item_id": item_id, "tag_id": tag_id}


# ===================== Projects =====================

@router.post("/projects", response_model=Project)
async def create_project(
    request: CreateProjectRequest,
    knowledge: KnowledgeService = Depends(get_knowledge_service),
):
    return await knowledge.create_project(request.name, description=request.description, color=request.color)


@router.get("/projects", response_model=List[Project])
async def list_projects(knowledge: KnowledgeService = Depends(get_knowledge_service)):
    return await knowledge.list_projects()


@router.get("/projects/{project_id}/items", response_model=List[KnowledgeItem])
async def list_project_items(project_id: str, knowledge: KnowledgeService = Depends(get_knowledge_service)):
    return await knowledge.project_items(project_id)


@router.post("/projects/{project_id}/items/{item_id}")
async def add_project_item(
    project_id: str,
    item_id: str,
    knowledge: KnowledgeService = Depends(get_knowledge_service),
):
    await knowledge.add_to_project(project_id, item_id)
    return {"status": "added", "project_id": project_id, "item_id": item_id}


@router.delete("/projects/{project_id}/items/{item_id}")
async def remove_project_item(
    project_id: str,
    item_id: str,
    knowledge: KnowledgeService = Depends(get_knowledge_service),
):
    await knowledge.remove_from_project(project_id, item_id)
    return {"status": "removed", "project_id": project_id, "item_id": item_id}


# ===================== Pages =====================

@router.post("/pages", response_model=Page)
async def create_page(request: CreatePageRequest, knowledge: KnowledgeService = Depends(get_knowledge_service)):
    return await knowledge.create_page(request.title, content=request.content, source_item_id=request.source_item_id)


@router.get("/pages", response_model=List[Page])
async def list_pages(knowledge: KnowledgeService = Depends(get_knowledge_service)):
    return await knowledge.list_pages()


@router.get("/pages/{page_id}", response_model=Page)
async def get_page(page_id: str, knowledge: KnowledgeService = Depends(get_knowledge_service)):
    return await knowledge.get_page(page_id)


@router.patch("/pages/{page_id}", response_model=Page)
async def update_page(
    page_id: str,
    request: UpdatePageRequest,
    knowledge: KnowledgeService = Depends(get_knowledge_service),
):
    return await knowledge.update_page(page_id, title=request.title, content=request.content)


@router.delete("/pages/{page_id}")
async def delete_page(page_id: str, knowledge: KnowledgeService = Depends(get_knowledge_service)):
    await knowledge.delete_page(page_id)
    return {"status": "deleted", "id": page_id}
