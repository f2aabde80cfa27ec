"""
Features Module - Self-contained feature units.

Each feature is a modular unit with its own logic:
- database: Knowledge store repositories and indexing sources
- knowledge: Chunking, embeddings, indexing and search
"""

# Core store that other features depend on
from recall.features.database import get_knowledge_store, KnowledgeStore

__all__ = [
    "get_knowledge_store",
    "KnowledgeStore",
]
