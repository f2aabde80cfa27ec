from pydantic import BaseModel, Field
from typing import Optional, List

from recall.features.database.models import KnowledgeItem
from recall.features.knowledge.models import SearchResultChunk


# =========================================================================
# SEARCH MODELS
# =========================================================================

class SemanticSearchRequest(BaseModel):
    query: str = Field(..., description="Natural-language search query")
    limit: Optional[int] = Field(None, ge=1, le=100, description="Max chunks to return")
    item_id: Optional[str] = Field(None, description="Restrict the search to one item")


class SemanticSearchResponse(BaseModel):
    query: str
    results: List[SearchResultChunk]
    total: int


class KeywordSearchResponse(BaseModel):
    query: str
    results: List[KnowledgeItem]
    total: int


class HybridSearchResponse(BaseModel):
    query: str
    semantic: List[SearchResultChunk]
    keyword: List[KnowledgeItem]


class AskRequest(BaseModel):
    question: str = Field(..., min_length=1, description="Question to answer from the knowledge base")
    item_id: Optional[str] = Field(None, description="Only use context from this item")


class AskResponse(BaseModel):
    question: str
    answer: str
    sources: List[SearchResultChunk]


# =========================================================================
# INDEXING MODELS
# =========================================================================

class IndexResponse(BaseModel):
    success: bool
    item_id: Optional[str] = None
    error: Optional[str] = None
    created: bool = False
    warnings: List[str] = []


class BatchIndexResponse(BaseModel):
    indexed: int
    failed: int
    errors: List[str] = []


class EmbedResponse(BaseModel):
    item_id: str
    chunk_count: int
    error: Optional[str] = None


# =========================================================================
# ITEM / TAG / PROJECT / PAGE MODELS
# =========================================================================

class CreateItemRequest(BaseModel):
    type: str = Field(..., description="conversation, transcription or page")
    title: str = Field(..., min_length=1)
    content: str
    summary: Optional[str] = None


class CreateItemResponse(BaseModel):
    item: KnowledgeItem
    embedding: EmbedResponse


class UpdateItemRequest(BaseModel):
    """Only fields present in the body are applied; ``"summary": null`` clears the summary."""

    title: Optional[str] = None
    content: Optional[str] = None
    summary: Optional[str] = None


class UpdateItemResponse(BaseModel):
    item: KnowledgeItem
    embedding: Optional[EmbedResponse] = None


class TagItemRequest(BaseModel):
    name: str = Field(..., min_length=1)
    color: Optional[str] = None


class CreateProjectRequest(BaseModel):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    color: Optional[str] = None


class CreatePageRequest(BaseModel):
    title: str = Field(..., min_length=1)
    content: str = ""
    source_item_id: Optional[str] = None


class UpdatePageRequest(BaseModel):
    title: Optional[str] = None
    content: Optional[str] = None
