"""Database Repositories - Organized data access."""

from recall.features.database.repositories.conversations import ConversationsRepository
from recall.features.database.repositories.embeddings import EmbeddingsRepository
from recall.features.database.repositories.items import KnowledgeItemsRepository
from recall.features.database.repositories.pages import PagesRepository
from recall.features.database.repositories.projects import ProjectsRepository
from recall.features.database.repositories.tags import TagsRepository
from recall.features.database.repositories.transcripts import TranscriptsRepository

__all__ = [
    "ConversationsRepository",
    "EmbeddingsRepository",
    "KnowledgeItemsRepository",
    "PagesRepository",
    "ProjectsRepository",
    "TagsRepository",
    "TranscriptsRepository",
]
