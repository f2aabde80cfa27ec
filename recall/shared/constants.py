"""
Shared constants for the knowledge service.

Prompts live here so the indexer and any offline tooling send the model
exactly the same instructions.
"""

# Closed set of knowledge item types
KNOWLEDGE_ITEM_TYPES = frozenset({
    "conversation",
    "transcription",
    "page",
})

# Table names (logical schema, see scripts/setup_knowledge_schema.py)
KNOWLEDGE_ITEMS_TABLE = "knowledge_items"
EMBEDDINGS_TABLE = "embeddings"
TAGS_TABLE = "tags"
ITEM_TAGS_TABLE = "item_tags"
PROJECTS_TABLE = "projects"
PROJECT_ITEMS_TABLE = "project_items"
PAGES_TABLE = "pages"
CONVERSATIONS_TABLE = "conversations"
TRANSCRIPTS_TABLE = "transcripts"

# Generated tsvector column over title/content/summary
KNOWLEDGE_FTS_COLUMN = "fts"

SUMMARY_INSTRUCTION = (
    "Summarize the following conversation in 2-3 concise sentences. "
    "Output only the summary, no preamble."
)
TAGS_INSTRUCTION = (
    "From the following conversation, output 3-5 short topic tags "
    "(single words or two words). Output only the tags separated by commas, nothing else."
)

# Input budgets for completion calls (characters)
SUMMARY_INPUT_CHARS = 12000
TAGS_INPUT_CHARS = 8000

TITLE_PREVIEW_CHARS = 80
MAX_AUTO_TAGS = 5
MAX_TAG_LENGTH = 30

# Embedding service input cap (characters)
EMBEDDING_INPUT_CHARS = 8000

# Question answering over the knowledge base
ASK_SYSTEM_PREFIX = (
    "You are a helpful assistant with access to the user's knowledge base. "
    "Use the following context when relevant to answer the question. "
    "If the context doesn't contain enough information, say so."
)
ASK_NO_CONTEXT_NOTE = "(No relevant context found in the knowledge base.)"
ASK_CONTEXT_CHUNKS = 8
ASK_CONTEXT_SEPARATOR = "\n\n---\n\n"
