"""
Knowledge System - index and search personal knowledge.

This module provides:
1. Chunking: Split item content into retrievable units
2. Embedding: Replace an item's chunk vectors as a set
3. Indexing: Turn conversations and transcripts into knowledge items
4. Search: Semantic, keyword and hybrid search

Design for modularity:
- Each component receives its collaborators through its constructor
- Embedding and completion providers are protocols, swappable in tests
- The vector index behind semantic search is pluggable
"""

from recall.features.knowledge.chunker import chunk_text
from recall.features.knowledge.embedding import EmbeddingPipeline
from recall.features.knowledge.indexer import KnowledgeIndexer, parse_tags
from recall.features.knowledge.models import (
    AskResult,
    BatchIndexResult,
    EmbedResult,
    HybridSearchResult,
    IndexResult,
    SearchResultChunk,
)
from recall.features.knowledge.search import (
    ExhaustiveVectorIndex,
    SearchEngine,
    cosine_similarity,
)
from recall.features.knowledge.service import (
    KnowledgeService,
    create_knowledge_service,
    get_knowledge_service,
)

__all__ = [
    # Main service
    "KnowledgeService",
    "get_knowledge_service",
    "create_knowledge_service",
    # Pipeline
    "chunk_text",
    "EmbeddingPipeline",
    "KnowledgeIndexer",
    "parse_tags",
    # Search
    "SearchEngine",
    "ExhaustiveVectorIndex",
    "cosine_similarity",
    # Results
    "AskResult",
    "EmbedResult",
    "IndexResult",
    "BatchIndexResult",
    "HybridSearchResult",
    "SearchResultChunk",
]
