"""
Results returned by the knowledge pipeline and search engine.

Operation results are plain dataclasses, the same shape the host uses for
provider results; search hits are pydantic so they serialize straight into
API responses.
"""

from dataclasses import dataclass, field
from typing import List, Optional

from pydantic import BaseModel

from recall.features.database.models import KnowledgeItem


class SearchResultChunk(BaseModel):
    item_id: str
    chunk_index: int
    chunk_text: str
    score: float
    title: Optional[str] = None
    summary: Optional[str] = None


@dataclass
class EmbedResult:
    chunk_count: int
    error: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return self.error is None


@dataclass
class IndexResult:
    """
    Outcome of indexing one source document.

    ``success`` with an ``error`` means the item exists but embedding
    stopped part way; ``warnings`` collects best-effort steps that failed
    (summary, tags) without affecting success.
    """

    success: bool
    item_id: Optional[str] = None
    error: Optional[str] = None
    created: bool = False
    warnings: List[str] = field(default_factory=list)


@dataclass
class BatchIndexResult:
    indexed: int = 0
    failed: int = 0
    errors: List[str] = field(default_factory=list)


@dataclass
class AskResult:
    """An answer plus the chunks that were given to the model as context."""

    answer: str
    sources: List[SearchResultChunk] = field(default_factory=list)


@dataclass
class HybridSearchResult:
    semantic: List[SearchResultChunk] = field(default_factory=list)
    keyword: List[KnowledgeItem] = field(default_factory=list)
