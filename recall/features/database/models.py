"""
Typed rows of the knowledge store.

Entities are pydantic models validated straight from store rows; column
names match field names.
"""

from dataclasses import dataclass
from typing import List, Literal, Optional

from pydantic import BaseModel

KnowledgeItemType = Literal["conversation", "transcription", "page"]


class KnowledgeItem(BaseModel):
    id: str
    type: KnowledgeItemType
    title: str
    content: str
    summary: Optional[str] = None
    source_id: Optional[str] = None
    created_at: int
    updated_at: int


class EmbeddingRecord(BaseModel):
    """One stored chunk; ``embedding`` is the JSON-serialized vector."""

    id: str
    item_id: str
    chunk_index: int
    chunk_text: str
    embedding: str
    created_at: int


class Tag(BaseModel):
    id: str
    name: str
    color: Optional[str] = None
    is_auto: bool = False


class Project(BaseModel):
    id: str
    name: str
    description: Optional[str] = None
    color: Optional[str] = None
    created_at: int
    updated_at: int


class Page(BaseModel):
    id: str
    title: str
    content: str = ""
    source_item_id: Optional[str] = None
    created_at: int
    updated_at: int


class KnowledgeItemWithTags(KnowledgeItem):
    tags: List[Tag] = []


@dataclass
class SourceDocument:
    """A source record (conversation, transcript) resolved into indexable text."""

    id: str
    content: str
    item_type: str
    title: Optional[str] = None
