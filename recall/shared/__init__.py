# Shared constants and utilities
from .constants import (
    KNOWLEDGE_ITEM_TYPES,
    SUMMARY_INSTRUCTION,
    TAGS_INSTRUCTION,
)

__all__ = [
    "KNOWLEDGE_ITEM_TYPES",
    "SUMMARY_INSTRUCTION",
    "TAGS_INSTRUCTION",
]
